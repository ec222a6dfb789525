# src/schedule_dashboard/core/state.py

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..auth.session import SessionStore
from ..backend.api import ApiClient
from ..schedule.dashboard import Dashboard
from .ports import ScheduleSource


@dataclass
class AppState:
    """
    Everything a connector needs, wired once by cli.bootstrap.

    api is None in offline demo mode.
    """

    settings: Any

    session: SessionStore
    source: ScheduleSource
    dashboard: Dashboard
    api: ApiClient | None = None
