# tests/test_dashboard.py

from __future__ import annotations

import asyncio
from datetime import date

import pytest

from schedule_dashboard.core.errors import AuthDenied, FetchFailed, InvalidDate
from schedule_dashboard.schedule.dashboard import Dashboard

from .fakes import FakeScheduleSource, UncancellableScheduleSource, make_task

TODAY = date(2024, 2, 15)
FEB = date(2024, 2, 1)
MAR = date(2024, 3, 1)

FEB_DATA = {
    "2024-02-01": [make_task("Fire extinguisher check", "Safety", "Monthly")],
    "2024-02-15": [make_task("Lobby cleaning", "Housekeeping"), make_task("Pump check", "MEP")],
}
MAR_DATA = {"2024-03-01": [make_task("Fire extinguisher check", "Safety", "Monthly")]}


async def _settle() -> None:
    for _ in range(5):
        await asyncio.sleep(0)


def _dashboard(source: FakeScheduleSource) -> Dashboard:
    return Dashboard(source, clock=lambda: TODAY)


@pytest.mark.asyncio
async def test_select_defaults_to_today_and_publishes() -> None:
    source = FakeScheduleSource({TODAY: {"2024-02-15": FEB_DATA["2024-02-15"]}})
    dash = _dashboard(source)

    assert await dash.select("day") is True
    snap = dash.snapshot()
    assert snap.period is not None and snap.period.start == TODAY
    assert snap.total == 2
    assert snap.loading is False
    assert snap.error is None
    assert list(snap.grouped["2024-02-15"]) == ["Housekeeping", "MEP"]


@pytest.mark.asyncio
async def test_department_change_regroups_without_fetching() -> None:
    source = FakeScheduleSource({FEB: FEB_DATA})
    dash = _dashboard(source)
    await dash.select("month")
    assert len(source.calls) == 1

    dash.set_department("MEP")
    assert dash.snapshot().total == 1
    assert list(dash.grouped) == ["2024-02-15"]

    dash.set_department(None)
    assert dash.snapshot().total == 3
    assert len(source.calls) == 1


@pytest.mark.asyncio
async def test_department_survives_period_change() -> None:
    source = FakeScheduleSource({FEB: FEB_DATA, MAR: MAR_DATA})
    dash = _dashboard(source)
    await dash.select("month", department="Safety")
    assert dash.snapshot().total == 1

    await dash.shift(1)
    assert dash.period is not None and dash.period.start == MAR
    assert dash.department == "Safety"
    assert list(dash.grouped) == ["2024-03-01"]


@pytest.mark.asyncio
async def test_invalid_anchor_leaves_state_untouched() -> None:
    source = FakeScheduleSource({FEB: FEB_DATA})
    dash = _dashboard(source)
    await dash.select("month")
    before = dash.generation

    with pytest.raises(InvalidDate):
        await dash.select("month", "2024-02-30")
    assert dash.generation == before
    assert dash.snapshot().total == 3


@pytest.mark.asyncio
async def test_fetch_failure_is_published_as_error() -> None:
    source = FakeScheduleSource({FEB: FEB_DATA})
    dash = _dashboard(source)
    await dash.select("month")

    source.fail_with = FetchFailed("Could not load March 2024: HTTP 500")
    assert await dash.shift(1) is False
    snap = dash.snapshot()
    assert snap.error == "Could not load March 2024: HTTP 500"
    assert snap.grouped == {}
    assert snap.total == 0


@pytest.mark.asyncio
async def test_denial_marks_the_view_and_propagates() -> None:
    source = FakeScheduleSource()
    source.fail_with = AuthDenied("Token expired", status_code=401)
    dash = _dashboard(source)

    with pytest.raises(AuthDenied):
        await dash.select("day")
    assert dash.error is not None and "sign in" in dash.error


@pytest.mark.asyncio
async def test_newer_selection_cancels_the_older_fetch() -> None:
    source = FakeScheduleSource({FEB: FEB_DATA, MAR: MAR_DATA})
    source.gates[FEB] = asyncio.Event()
    dash = _dashboard(source)

    first = asyncio.create_task(dash.select("month", "2024-02-10"))
    await _settle()
    assert dash.loading is True

    assert await dash.select("month", "2024-03-10") is True
    assert await first is False

    assert [p.start for p in source.cancelled] == [FEB]
    assert list(dash.grouped) == ["2024-03-01"]
    assert dash.period is not None and dash.period.start == MAR


@pytest.mark.asyncio
async def test_late_response_for_an_older_selection_is_discarded() -> None:
    # A's response arrives after B's even though A was asked first.
    source = UncancellableScheduleSource({FEB: FEB_DATA, MAR: MAR_DATA})
    source.gates[FEB] = asyncio.Event()
    source.gates[MAR] = asyncio.Event()
    dash = _dashboard(source)

    a = asyncio.create_task(dash.select("month", "2024-02-10"))
    await _settle()
    b = asyncio.create_task(dash.select("month", "2024-03-10"))
    await _settle()

    source.gates[MAR].set()
    assert await b is True
    source.gates[FEB].set()
    assert await a is False

    assert dash.period is not None and dash.period.start == MAR
    assert list(dash.grouped) == ["2024-03-01"]
    assert dash.error is None


@pytest.mark.asyncio
async def test_stale_failure_does_not_overwrite_current_data() -> None:
    source = UncancellableScheduleSource({MAR: MAR_DATA})
    source.gates[FEB] = asyncio.Event()
    dash = _dashboard(source)

    a = asyncio.create_task(dash.select("month", "2024-02-10"))
    await _settle()
    assert await dash.select("month", "2024-03-10") is True

    source.fail_with = FetchFailed("Could not load February 2024: HTTP 502")
    source.gates[FEB].set()
    assert await a is False
    assert dash.error is None
    assert list(dash.grouped) == ["2024-03-01"]


@pytest.mark.asyncio
async def test_reload_and_shift_without_a_period_start_at_today() -> None:
    source = FakeScheduleSource()
    dash = _dashboard(source)
    assert await dash.reload() is True
    assert source.calls[-1].start == TODAY

    await dash.reload()
    assert len(source.calls) == 2
    assert source.calls[-1] == source.calls[0]
