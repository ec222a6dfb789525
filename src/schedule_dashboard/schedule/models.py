# src/schedule_dashboard/schedule/models.py

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from datetime import date, timedelta
from enum import StrEnum
from typing import Any


class Frequency(StrEnum):
    """Recurrence vocabulary used by the task store (values as delivered)."""

    DAILY = "Daily"
    WEEKLY = "Weekly"
    MONTHLY = "Monthly"
    QUARTERLY = "Quarterly"
    HALF_YEARLY = "Half-Yearly"
    YEARLY = "Yearly"

    @classmethod
    def from_raw(cls, raw: str | None) -> Frequency | None:
        """Case-insensitive lookup; unknown or empty values map to None."""
        if not raw:
            return None
        key = raw.strip().lower()
        for member in cls:
            if member.value.lower() == key:
                return member
        return None


class PeriodKind(StrEnum):
    DAY = "day"
    WEEK = "week"
    MONTH = "month"
    QUARTER = "quarter"
    HALF_YEAR = "half-year"
    YEAR = "year"
    # explicit start/end (built by periods.custom_range, never by resolve)
    RANGE = "range"


def _opt_str(value: Any) -> str | None:
    if value is None:
        return None
    s = str(value).strip()
    return s or None


def _times(value: Any) -> int:
    try:
        n = int(value)
    except (TypeError, ValueError):
        return 1
    return max(1, n)


@dataclass(frozen=True, slots=True)
class Task:
    activity: str
    department: str
    frequency: str
    no_of_times: int = 1
    specific_dates: str | None = None
    comments: str | None = None
    # row in the external task sheet (its identity there)
    row_number: int | None = None

    @property
    def frequency_kind(self) -> Frequency | None:
        return Frequency.from_raw(self.frequency)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> Task:
        """
        Build a Task from the backend's JSON record.

        Department is kept exactly as delivered (no case/whitespace normalization).
        """
        row = data.get("rowNumber")
        return cls(
            activity=str(data.get("activity") or ""),
            department=str(data.get("department") or ""),
            frequency=str(data.get("frequency") or ""),
            no_of_times=_times(data.get("noOfTimes")),
            specific_dates=_opt_str(data.get("specificDates")),
            comments=_opt_str(data.get("comments")),
            row_number=int(row) if isinstance(row, int) or (isinstance(row, str) and row.isdigit()) else None,
        )

    def to_api(self) -> dict[str, Any]:
        return {
            "rowNumber": self.row_number,
            "activity": self.activity,
            "department": self.department,
            "frequency": self.frequency,
            "noOfTimes": self.no_of_times,
            "specificDates": self.specific_dates,
            "comments": self.comments,
        }


# ISO date (yyyy-MM-dd) -> tasks on that date; chronological key order.
ScheduleMap = dict[str, list[Task]]


@dataclass(frozen=True, slots=True)
class Period:
    kind: PeriodKind
    start: date
    end: date
    label: str

    def __post_init__(self) -> None:
        if self.start > self.end:
            raise ValueError(f"Period start {self.start} is after end {self.end}")

    # Calendar coordinates used to address the retrieval endpoints.

    @property
    def year(self) -> int:
        return self.start.year

    @property
    def month(self) -> int:
        return self.start.month

    @property
    def quarter(self) -> int:
        return (self.start.month - 1) // 3 + 1

    @property
    def half(self) -> int:
        return 1 if self.start.month <= 6 else 2

    def contains(self, d: date) -> bool:
        return self.start <= d <= self.end

    def days(self) -> Iterator[date]:
        current = self.start
        while current <= self.end:
            yield current
            current += timedelta(days=1)

    def __len__(self) -> int:
        return (self.end - self.start).days + 1
