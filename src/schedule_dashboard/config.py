# src/schedule_dashboard/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app (normal "settings layer").
- No secrets required at import time.
- Empty SCHED_API_BASE_URL means "offline demo mode" (local task file, no network).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

ENV_PREFIX = "SCHED"


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


def _env_optional_path(name: str) -> Optional[Path]:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return None
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    log_level: str

    # ---- Task retrieval / identity API ----
    api_base_url: str
    request_timeout_seconds: float
    connect_timeout_seconds: float

    # ---- Calendar ----
    timezone: str
    default_view: str

    # ---- Local data paths (ignored by git) ----
    data_dir: Path
    session_path: Path
    offline_tasks_path: Optional[Path]

    @property
    def offline_mode(self) -> bool:
        return not self.api_base_url.strip()

    @staticmethod
    def from_env() -> "Settings":
        app_name = _env(_k("APP_NAME"), "schedule-dashboard") or "schedule-dashboard"
        log_level = _env(_k("LOG_LEVEL"), "INFO")

        # e.g. http://localhost:8080/api (all endpoint paths are relative to it)
        api_base_url = _env(_k("API_BASE_URL"), "").strip().rstrip("/")
        request_timeout_seconds = _env_float(_k("REQUEST_TIMEOUT_SECONDS"), 20.0)
        connect_timeout_seconds = _env_float(_k("CONNECT_TIMEOUT_SECONDS"), 5.0)

        timezone = _env(_k("TIMEZONE"), "UTC").strip() or "UTC"
        default_view = _env(_k("DEFAULT_VIEW"), "day").strip().lower() or "day"

        data_dir = _env_path(_k("DATA_DIR"), Path(".local/schedule"))
        session_path = _env_path(_k("SESSION_PATH"), data_dir / "session.json")
        offline_tasks_path = _env_optional_path(_k("OFFLINE_TASKS_PATH"))

        return Settings(
            app_name=app_name,
            log_level=log_level,
            api_base_url=api_base_url,
            request_timeout_seconds=request_timeout_seconds,
            connect_timeout_seconds=connect_timeout_seconds,
            timezone=timezone,
            default_view=default_view,
            data_dir=data_dir,
            session_path=session_path,
            offline_tasks_path=offline_tasks_path,
        )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings once per process (.env first, real environment wins)."""
    load_dotenv(override=False)
    return Settings.from_env()
