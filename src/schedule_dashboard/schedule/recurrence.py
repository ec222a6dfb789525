# src/schedule_dashboard/schedule/recurrence.py

"""
Offline schedule source: evaluates task recurrence locally.

Used for demos / local runs when no API base URL is configured. The rules are
the task store's own scheduling rules:
- a task with specific dates ("October 1") occurs only on those month-days,
- otherwise its frequency decides (with a few comment hints such as
  "Every Wednesday" or "In January and June").
"""

from __future__ import annotations

import json
import logging
import re
from datetime import date
from pathlib import Path

from ..core.errors import FetchFailed
from .models import Frequency, Period, ScheduleMap, Task

logger = logging.getLogger(__name__)

_MONTHS = {
    name: i
    for i, name in enumerate(
        [
            "january",
            "february",
            "march",
            "april",
            "may",
            "june",
            "july",
            "august",
            "september",
            "october",
            "november",
            "december",
        ],
        start=1,
    )
}

_MONTH_DAY = re.compile(r"^([a-z]+)\s+(\d{1,2})$")

MONDAY, TUESDAY, WEDNESDAY, THURSDAY, FRIDAY, SATURDAY, SUNDAY = range(7)


def parse_month_day(text: str) -> tuple[int, int] | None:
    """'October 1' -> (10, 1); anything else -> None."""
    m = _MONTH_DAY.match(text.strip().lower())
    if not m:
        return None
    month = _MONTHS.get(m.group(1))
    day = int(m.group(2))
    if month is None or not 1 <= day <= 31:
        return None
    return month, day


def _matches_specific(specific_dates: str | None, day: date) -> bool:
    if not specific_dates:
        return False
    for part in specific_dates.split(","):
        md = parse_month_day(part)
        if md is not None and md == (day.month, day.day):
            return True
    return False


def is_scheduled_on(task: Task, day: date) -> bool:
    if task.specific_dates:
        return _matches_specific(task.specific_dates, day)

    freq = task.frequency_kind
    comments = (task.comments or "").lower()
    weekday = day.weekday()

    if freq == Frequency.DAILY:
        if "monday" in comments and "thursday" in comments:
            return weekday in (MONDAY, THURSDAY)
        if "wednesday" in comments:
            return weekday == WEDNESDAY
        return True

    if freq == Frequency.WEEKLY:
        if "sun" in comments and "wed" in comments:
            return weekday in (SUNDAY, WEDNESDAY)
        # default: first day of the (Sunday-first) week
        return weekday == SUNDAY

    if freq == Frequency.MONTHLY:
        return day.day == 1

    if freq == Frequency.QUARTERLY:
        return day.day == 1 and day.month in (1, 4, 7, 10)

    if freq == Frequency.HALF_YEARLY:
        if "january" in comments and "june" in comments:
            return day.day == 1 and day.month in (1, 6)
        return day.day == 1 and day.month in (1, 7)

    if freq == Frequency.YEARLY:
        # yearly tasks are expected to carry specific dates
        return False

    if task.frequency:
        logger.debug("Unknown frequency %r for %r", task.frequency, task.activity)
    return False


def load_tasks(path: str | Path) -> list[Task]:
    """Read a JSON list of task records (same shape as the API's)."""
    path = Path(path)
    try:
        data = json.loads(path.read_text("utf-8"))
    except (OSError, ValueError) as e:
        raise FetchFailed(f"Could not read offline tasks from {path}: {e}") from e
    if not isinstance(data, list):
        raise FetchFailed(f"Offline tasks file {path} must contain a JSON list")
    return [Task.from_api(item) for item in data if isinstance(item, dict)]


class OfflineScheduleSource:
    """ScheduleSource that evaluates recurrence over an in-memory task list."""

    def __init__(self, tasks: list[Task] | None = None) -> None:
        self._tasks = list(tasks or [])

    @classmethod
    def from_file(cls, path: str | Path | None) -> OfflineScheduleSource:
        if path is None or not Path(path).exists():
            if path is not None:
                logger.warning("Offline tasks file %s not found; schedule will be empty.", path)
            return cls([])
        tasks = load_tasks(path)
        logger.info("Loaded %d offline tasks from %s", len(tasks), path)
        return cls(tasks)

    async def fetch(self, period: Period) -> ScheduleMap:
        schedule: ScheduleMap = {}
        for day in period.days():
            todays = [t for t in self._tasks if is_scheduled_on(t, day)]
            if todays:
                schedule[day.isoformat()] = todays
        return schedule

    async def departments(self) -> list[str]:
        seen: dict[str, None] = {}
        for t in self._tasks:
            if t.department:
                seen.setdefault(t.department, None)
        return list(seen)

    async def frequencies(self) -> list[str]:
        return [f.value for f in Frequency]
