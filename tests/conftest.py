# tests/conftest.py

from __future__ import annotations

from datetime import date
from pathlib import Path
from types import SimpleNamespace

import pytest

from schedule_dashboard.auth.session import SessionStore
from schedule_dashboard.auth.storage import CredentialFile
from schedule_dashboard.core.state import AppState
from schedule_dashboard.schedule.dashboard import Dashboard

from .fakes import FakeIdentityApi, FakeScheduleSource

# Every test runs "today" in a pinned timezone/date instead of the host clock.
TODAY = date(2024, 2, 15)


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with AppState and the CLI.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="schedule-dashboard-test",
        log_level="DEBUG",
        api_base_url="",
        timezone="UTC",
        default_view="day",
        data_dir=tmp_path,
        session_path=tmp_path / "session.json",
        offline_tasks_path=None,
        offline_mode=True,
    )


@pytest.fixture()
def identity_api() -> FakeIdentityApi:
    return FakeIdentityApi()


@pytest.fixture()
def storage(settings: SimpleNamespace) -> CredentialFile:
    return CredentialFile(settings.session_path)


@pytest.fixture()
def session(storage: CredentialFile, identity_api: FakeIdentityApi) -> SessionStore:
    return SessionStore(storage, identity_api)


@pytest.fixture()
def source() -> FakeScheduleSource:
    return FakeScheduleSource()


@pytest.fixture()
def state(settings: SimpleNamespace, session: SessionStore, source: FakeScheduleSource) -> AppState:
    """
    AppState wired with deterministic fakes.

    NOTE: The session store and credential file are real; their behavior is
    part of what we want to test.
    """
    return AppState(
        settings=settings,
        session=session,
        source=source,
        dashboard=Dashboard(source, clock=lambda: TODAY),
    )
