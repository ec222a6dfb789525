# src/schedule_dashboard/schedule/client.py

"""
Schedule query client.

One resolved Period -> exactly one request against the endpoint of matching
granularity (never a per-day loop). Any failure is FetchFailed and no partial
ScheduleMap escapes.
"""

from __future__ import annotations

import logging
from datetime import date
from typing import Any

from ..backend.api import ApiClient
from ..core.errors import ApiError, AuthDenied, FetchFailed
from .models import Period, PeriodKind, ScheduleMap, Task

logger = logging.getLogger(__name__)


def endpoint_for(period: Period) -> tuple[str, dict[str, str] | None]:
    """Path (relative to the API base URL) and query params for a period."""
    kind = period.kind
    if kind == PeriodKind.DAY:
        return f"/schedule/date/{period.start.isoformat()}", None
    if kind == PeriodKind.WEEK:
        return f"/schedule/week/{period.start.isoformat()}", None
    if kind == PeriodKind.MONTH:
        return f"/schedule/month/{period.year}/{period.month}", None
    if kind == PeriodKind.QUARTER:
        return f"/schedule/quarter/{period.year}/{period.quarter}", None
    if kind == PeriodKind.HALF_YEAR:
        return f"/schedule/half-year/{period.year}/{period.half}", None
    if kind == PeriodKind.YEAR:
        return f"/schedule/year/{period.year}", None
    return "/schedule/range", {"start": period.start.isoformat(), "end": period.end.isoformat()}


def _parse_tasks(raw: Any, where: str) -> list[Task]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise FetchFailed(f"Malformed schedule payload at {where}: expected a list of tasks")
    tasks: list[Task] = []
    for item in raw:
        if item is None:
            continue
        if not isinstance(item, dict):
            raise FetchFailed(f"Malformed task record at {where}")
        tasks.append(Task.from_api(item))
    return tasks


def to_schedule_map(payload: Any, period: Period) -> ScheduleMap:
    """
    Normalize a backend payload into a ScheduleMap for `period`.

    Day grain returns a bare task list; every other grain returns
    {date: [task, ...]}. Keys outside the period are dropped.
    """
    if period.kind == PeriodKind.DAY and not isinstance(payload, dict):
        tasks = _parse_tasks(payload, period.start.isoformat())
        return {period.start.isoformat(): tasks} if tasks else {}

    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise FetchFailed("Malformed schedule payload: expected a date -> tasks mapping")

    parsed: dict[date, list[Task]] = {}
    for key, raw_tasks in payload.items():
        try:
            day = date.fromisoformat(str(key))
        except ValueError:
            raise FetchFailed(f"Malformed schedule payload: bad date key {key!r}") from None
        if not period.contains(day):
            logger.warning("Dropping %s: outside %s (%s..%s)", day, period.label, period.start, period.end)
            continue
        tasks = _parse_tasks(raw_tasks, day.isoformat())
        if tasks:
            parsed.setdefault(day, []).extend(tasks)

    return {day.isoformat(): parsed[day] for day in sorted(parsed)}


def _parse_vocabulary(payload: Any, what: str) -> list[str]:
    if not isinstance(payload, list):
        raise FetchFailed(f"Malformed {what} payload")
    return [str(v) for v in payload if v is not None and str(v).strip()]


class ScheduleClient:
    """ScheduleSource backed by the task retrieval API."""

    def __init__(self, api: ApiClient) -> None:
        self._api = api

    async def fetch(self, period: Period) -> ScheduleMap:
        path, params = endpoint_for(period)
        try:
            payload = await self._api.get(path, params=params)
        except AuthDenied:
            raise
        except ApiError as e:
            raise FetchFailed(f"Could not load {period.label}: {e.message}") from e

        schedule = to_schedule_map(payload, period)
        logger.info(
            "Fetched %s (%s): %d dates, %d tasks",
            period.label,
            path,
            len(schedule),
            sum(len(v) for v in schedule.values()),
        )
        return schedule

    async def departments(self) -> list[str]:
        try:
            payload = await self._api.get("/master/departments")
        except AuthDenied:
            raise
        except ApiError as e:
            raise FetchFailed(f"Could not load departments: {e.message}") from e
        return _parse_vocabulary(payload, "departments")

    async def frequencies(self) -> list[str]:
        try:
            payload = await self._api.get("/master/frequencies")
        except AuthDenied:
            raise
        except ApiError as e:
            raise FetchFailed(f"Could not load frequencies: {e.message}") from e
        return _parse_vocabulary(payload, "frequencies")
