# tests/test_periods.py

from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from schedule_dashboard.core.errors import InvalidDate
from schedule_dashboard.schedule.models import PeriodKind
from schedule_dashboard.schedule.periods import custom_range, parse_anchor, resolve, shift, today


def test_day_is_the_anchor_itself() -> None:
    p = resolve("day", "2024-02-15")
    assert (p.start, p.end) == (date(2024, 2, 15), date(2024, 2, 15))
    assert p.label == "2024-02-15"
    assert len(p) == 1


def test_week_starts_on_sunday() -> None:
    p = resolve(PeriodKind.WEEK, "2024-02-15")  # Thursday
    assert p.start == date(2024, 2, 11)
    assert p.end == date(2024, 2, 17)
    assert p.label == "Week of 2024-02-11"

    # a Sunday anchors its own week
    assert resolve("week", "2024-02-11").start == date(2024, 2, 11)
    # a Saturday is the last day of it
    assert resolve("week", "2024-02-17").start == date(2024, 2, 11)


def test_week_may_cross_a_year_boundary() -> None:
    p = resolve("week", date(2025, 1, 1))
    assert p.start == date(2024, 12, 29)
    assert p.end == date(2025, 1, 4)


def test_month_handles_leap_february() -> None:
    p = resolve("month", "2024-02-10")
    assert (p.start, p.end) == (date(2024, 2, 1), date(2024, 2, 29))
    assert p.label == "February 2024"

    assert resolve("month", "2023-02-10").end == date(2023, 2, 28)


@pytest.mark.parametrize(
    ("anchor", "start", "end", "label"),
    [
        ("2024-02-15", date(2024, 1, 1), date(2024, 3, 31), "Q1 2024"),
        ("2024-04-01", date(2024, 4, 1), date(2024, 6, 30), "Q2 2024"),
        ("2024-09-30", date(2024, 7, 1), date(2024, 9, 30), "Q3 2024"),
        ("2024-12-31", date(2024, 10, 1), date(2024, 12, 31), "Q4 2024"),
    ],
)
def test_quarters(anchor: str, start: date, end: date, label: str) -> None:
    p = resolve("quarter", anchor)
    assert (p.start, p.end, p.label) == (start, end, label)


def test_half_years() -> None:
    h1 = resolve("half-year", "2024-06-30")
    assert (h1.start, h1.end, h1.label) == (date(2024, 1, 1), date(2024, 6, 30), "H1 2024")

    h2 = resolve("half-year", "2024-08-10")
    assert (h2.start, h2.end, h2.label) == (date(2024, 7, 1), date(2024, 12, 31), "H2 2024")


def test_year() -> None:
    p = resolve("year", datetime(2024, 5, 5, 23, 59))
    assert (p.start, p.end, p.label) == (date(2024, 1, 1), date(2024, 12, 31), "2024")
    assert len(p) == 366


@pytest.mark.parametrize("kind", ["day", "week", "month", "quarter", "half-year", "year"])
@pytest.mark.parametrize("anchor", ["2024-01-01", "2024-02-29", "2024-07-04", "2024-12-31"])
def test_period_always_contains_its_anchor(kind: str, anchor: str) -> None:
    p = resolve(kind, anchor)
    assert p.start <= p.end
    assert p.contains(date.fromisoformat(anchor))


def test_unparseable_anchor_raises_invalid_date() -> None:
    with pytest.raises(InvalidDate):
        resolve("day", "2024-13-45")
    with pytest.raises(InvalidDate):
        parse_anchor("yesterday")
    with pytest.raises(InvalidDate):
        parse_anchor(20240215)  # type: ignore[arg-type]


def test_unknown_kind_and_range_need_explicit_bounds() -> None:
    with pytest.raises(ValueError):
        resolve("fortnight", "2024-02-15")
    with pytest.raises(ValueError):
        resolve("range", "2024-02-15")


def test_custom_range() -> None:
    p = custom_range("2024-02-10", "2024-02-20")
    assert p.kind == PeriodKind.RANGE
    assert len(p) == 11
    assert p.label == "2024-02-10 to 2024-02-20"

    with pytest.raises(ValueError):
        custom_range("2024-02-20", "2024-02-10")


def test_shift_moves_by_whole_units() -> None:
    assert shift(resolve("day", "2024-03-01"), -1).start == date(2024, 2, 29)
    assert shift(resolve("week", "2024-02-15"), 1).start == date(2024, 2, 18)
    assert shift(resolve("month", "2024-01-31"), 1).end == date(2024, 2, 29)

    q4 = shift(resolve("quarter", "2024-02-15"), -1)
    assert (q4.start, q4.label) == (date(2023, 10, 1), "Q4 2023")

    assert shift(resolve("half-year", "2024-08-10"), 1).label == "H1 2025"
    assert shift(resolve("year", "2024-08-10"), -2).label == "2022"

    r = shift(custom_range("2024-02-10", "2024-02-12"), 1)
    assert (r.start, r.end) == (date(2024, 2, 13), date(2024, 2, 15))


@pytest.mark.parametrize("value", ["20240215", "2024-W07-4", "2024-046", "2024-2-15", "2024-02-15T10:00"])
def test_anchor_strings_must_be_plain_iso_dates(value: str) -> None:
    with pytest.raises(InvalidDate):
        parse_anchor(value)


def test_today_is_taken_in_the_configured_zone() -> None:
    # 20:00 UTC is already the next morning in India and still afternoon in New York.
    instant = datetime(2024, 2, 15, 20, 0, tzinfo=timezone.utc)
    assert today("UTC", now=instant) == date(2024, 2, 15)
    assert today("Asia/Kolkata", now=instant) == date(2024, 2, 16)
    assert today("America/New_York", now=instant) == date(2024, 2, 15)

    # Saturday noon in UTC is already Sunday in Auckland, which starts a new week
    saturday_noon = datetime(2024, 2, 17, 12, 0, tzinfo=timezone.utc)
    assert resolve("week", today("Pacific/Auckland", now=saturday_noon)).start == date(2024, 2, 18)
    assert resolve("week", today("UTC", now=saturday_noon)).start == date(2024, 2, 11)
