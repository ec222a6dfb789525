# src/schedule_dashboard/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- ensures local (gitignored) directories exist,
- wires the API client, session store, schedule source and dashboard into AppState,
- closes network resources on shutdown.
"""

from __future__ import annotations

import logging
from functools import partial

from ..auth.session import SessionStore
from ..auth.storage import CredentialFile
from ..backend.api import ApiClient, make_timeout
from ..backend.auth_api import HttpIdentityApi
from ..config import get_settings
from ..core.ports import IdentityApi, ScheduleSource
from ..core.state import AppState
from ..schedule.client import ScheduleClient
from ..schedule.dashboard import Dashboard
from ..schedule.periods import today
from ..schedule.recurrence import OfflineScheduleSource

logger = logging.getLogger(__name__)


class OfflineIdentityApi:
    """
    Identity stand-in for offline demo mode.

    Any non-empty token signs in as a local Admin; nothing leaves the machine.
    """

    async def exchange(self, external_token: str) -> dict:
        return {
            "token": f"offline-{external_token}",
            "email": "demo@localhost",
            "name": "Offline Demo",
            "picture": None,
            "role": "Admin",
            "status": "Enabled",
        }

    async def validate(self, bearer_token: str) -> bool:
        return bearer_token.startswith("offline-")

    async def refresh(self, bearer_token: str) -> dict:
        return {"token": bearer_token, "role": "Admin", "status": "Enabled"}


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)
    settings.session_path.parent.mkdir(parents=True, exist_ok=True)


def create_initial_state(*, settings=None) -> AppState:
    """
    Create AppState from the provided settings.

    Keeping settings injectable makes the app easier to test and avoids hidden global config reads.
    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()

    _ensure_local_dirs(settings)

    api: ApiClient | None = None
    identity_api: IdentityApi
    source: ScheduleSource

    if settings.offline_mode:
        logger.info("No API base URL configured; running in offline demo mode.")
        identity_api = OfflineIdentityApi()
        source = OfflineScheduleSource.from_file(settings.offline_tasks_path)
    else:
        api = ApiClient(
            settings.api_base_url,
            timeout=make_timeout(settings.connect_timeout_seconds, settings.request_timeout_seconds),
        )
        identity_api = HttpIdentityApi(api)
        source = ScheduleClient(api)

    session = SessionStore(CredentialFile(settings.session_path), identity_api)
    if api is not None:
        # Per-request credential injection + the 401/403 policy both go through the session.
        api.credentials = session

    dashboard = Dashboard(source, clock=partial(today, settings.timezone))

    return AppState(
        settings=settings,
        session=session,
        source=source,
        dashboard=dashboard,
        api=api,
    )


async def shutdown(state: AppState) -> None:
    """Best-effort shutdown (no exceptions should escape)."""
    if state.api is None:
        return
    try:
        await state.api.aclose()
    except Exception:
        logger.debug("API client close failed.", exc_info=True)
