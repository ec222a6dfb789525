# src/schedule_dashboard/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The core depends on Protocols instead of concrete implementations.
This keeps the HTTP backend, the offline demo source and credential storage
swappable and makes testing easier.
"""

from datetime import date
from typing import Any, Awaitable, Protocol

from ..schedule.models import Period, ScheduleMap


class ScheduleSource(Protocol):
    """Where ScheduleMaps come from (HTTP API or offline recurrence evaluation)."""

    def fetch(self, period: Period) -> Awaitable[ScheduleMap]: ...
    def departments(self) -> Awaitable[list[str]]: ...
    def frequencies(self) -> Awaitable[list[str]]: ...


class IdentityApi(Protocol):
    """
    Backend auth endpoints.

    exchange/refresh return the raw JSON payload; validate returns the
    server's verdict for the given bearer credential.
    """

    def exchange(self, external_token: str) -> Awaitable[dict[str, Any]]: ...
    def validate(self, bearer_token: str) -> Awaitable[bool]: ...
    def refresh(self, bearer_token: str) -> Awaitable[dict[str, Any]]: ...


class CredentialStorage(Protocol):
    """
    Persisted (token, identity) pair.

    load() returns None unless BOTH parts are present; save/clear always
    write both parts together.
    """

    def load(self) -> tuple[str, dict[str, Any]] | None: ...
    def save(self, token: str, identity: dict[str, Any]) -> None: ...
    def clear(self) -> None: ...


class CredentialProvider(Protocol):
    """What the HTTP transport needs from the session: read the token, report denial."""

    def bearer_token(self) -> str | None: ...
    def invalidate(self, reason: str) -> None: ...


class Clock(Protocol):
    """Returns "today" in the configured timezone."""

    def __call__(self) -> date: ...
