# src/schedule_dashboard/schedule/periods.py

"""
Period resolution: (view kind, anchor date) -> concrete date interval.

Conventions:
- weeks start on SUNDAY (same as the retrieval API's week/{date} endpoint),
- quarters are Jan-Mar, Apr-Jun, Jul-Sep, Oct-Dec,
- halves are Jan-Jun (H1) and Jul-Dec (H2),
- "today" is always computed in an explicit IANA timezone.
"""

from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta, timezone
from zoneinfo import ZoneInfo

from ..core.errors import InvalidDate
from .models import Period, PeriodKind

WEEK_START = calendar.SUNDAY

# fromisoformat also takes "20240215" and ISO-week forms; anchors are strictly yyyy-MM-dd.
_ISO_DATE = re.compile(r"\d{4}-\d{2}-\d{2}", re.ASCII)


def parse_anchor(value: date | datetime | str) -> date:
    """Accept a date, datetime or ISO yyyy-MM-dd string; raise InvalidDate otherwise."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if not _ISO_DATE.fullmatch(text):
            raise InvalidDate(value)
        try:
            return date.fromisoformat(text)
        except ValueError:
            raise InvalidDate(value) from None
    raise InvalidDate(value)


def today(tz_name: str = "UTC", *, now: datetime | None = None) -> date:
    """
    Calendar date in the given timezone (never the host's implicit local time).

    now is an aware instant to evaluate instead of the current one.
    """
    instant = now if now is not None else datetime.now(timezone.utc)
    return instant.astimezone(ZoneInfo(tz_name)).date()


def _last_day(year: int, month: int) -> date:
    return date(year, month, calendar.monthrange(year, month)[1])


def _month_span(year: int, first_month: int, months: int) -> tuple[date, date]:
    last_month = first_month + months - 1
    return date(year, first_month, 1), _last_day(year, last_month)


def resolve(kind: PeriodKind | str, anchor: date | datetime | str) -> Period:
    """
    Map a view kind and anchor to a Period containing the anchor.

    Pure and total for every calendar date. Raises InvalidDate for an
    unparseable anchor and ValueError for an unknown kind.
    """
    kind = PeriodKind(kind)
    d = parse_anchor(anchor)

    if kind == PeriodKind.DAY:
        return Period(kind, d, d, d.isoformat())

    if kind == PeriodKind.WEEK:
        offset = (d.weekday() - WEEK_START) % 7
        start = d - timedelta(days=offset)
        return Period(kind, start, start + timedelta(days=6), f"Week of {start.isoformat()}")

    if kind == PeriodKind.MONTH:
        start, end = _month_span(d.year, d.month, 1)
        return Period(kind, start, end, f"{calendar.month_name[d.month]} {d.year}")

    if kind == PeriodKind.QUARTER:
        q = (d.month - 1) // 3 + 1
        start, end = _month_span(d.year, (q - 1) * 3 + 1, 3)
        return Period(kind, start, end, f"Q{q} {d.year}")

    if kind == PeriodKind.HALF_YEAR:
        h = 1 if d.month <= 6 else 2
        start, end = _month_span(d.year, 1 if h == 1 else 7, 6)
        return Period(kind, start, end, f"H{h} {d.year}")

    if kind == PeriodKind.YEAR:
        return Period(kind, date(d.year, 1, 1), date(d.year, 12, 31), str(d.year))

    raise ValueError(f"Period kind {kind.value!r} needs explicit bounds; use custom_range()")


def custom_range(start: date | str, end: date | str) -> Period:
    """Explicit [start, end] interval (both inclusive)."""
    s = parse_anchor(start)
    e = parse_anchor(end)
    if s > e:
        raise ValueError(f"Range start {s.isoformat()} is after end {e.isoformat()}")
    return Period(PeriodKind.RANGE, s, e, f"{s.isoformat()} to {e.isoformat()}")


def _add_months(d: date, months: int) -> date:
    idx = d.year * 12 + (d.month - 1) + months
    year, month0 = divmod(idx, 12)
    return date(year, month0 + 1, 1)


def shift(period: Period, steps: int) -> Period:
    """Period of the same kind `steps` units before (negative) or after (positive)."""
    kind = period.kind
    if steps == 0:
        return period
    if kind == PeriodKind.DAY:
        return resolve(kind, period.start + timedelta(days=steps))
    if kind == PeriodKind.WEEK:
        return resolve(kind, period.start + timedelta(weeks=steps))
    if kind == PeriodKind.RANGE:
        span = timedelta(days=len(period) * steps)
        return custom_range(period.start + span, period.end + span)

    months = {
        PeriodKind.MONTH: 1,
        PeriodKind.QUARTER: 3,
        PeriodKind.HALF_YEAR: 6,
        PeriodKind.YEAR: 12,
    }[kind]
    return resolve(kind, _add_months(period.start, months * steps))
