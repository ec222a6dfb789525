# src/schedule_dashboard/core/errors.py

"""
Error taxonomy shared by the schedule and session components.

Pure components (period resolver, aggregation) never raise these on
well-formed input; errors surface at the query/session boundary.
"""

from __future__ import annotations


class DashboardError(Exception):
    """Base class for all dashboard errors."""


class InvalidDate(DashboardError, ValueError):
    """An anchor date could not be parsed."""

    def __init__(self, value: object) -> None:
        super().__init__(f"Invalid date: {value!r} (expected yyyy-MM-dd)")
        self.value = value


class ApiError(DashboardError):
    """
    Transport failure or non-2xx response from the backend API.

    status_code is None when no response was received at all.
    """

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


class AuthDenied(ApiError):
    """A request was rejected for authorization reasons (401/403)."""


class FetchFailed(DashboardError):
    """Schedule retrieval failed; no partial ScheduleMap is produced."""


class AuthExchangeFailed(DashboardError):
    """The identity exchange was rejected; message is safe to show to the user."""
