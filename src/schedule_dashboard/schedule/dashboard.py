# src/schedule_dashboard/schedule/dashboard.py

"""
Dashboard view state: selection -> period -> fetch -> grouped view.

Every selection gets a new generation number and cancels the fetch that is
still in flight. Results (data or error) are published only while their
generation is current, so an older response can never overwrite a newer one.
Changing only the department re-groups the cached ScheduleMap without a fetch.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date

from ..core.errors import AuthDenied, FetchFailed
from ..core.ports import Clock, ScheduleSource
from .aggregate import ALL_DEPARTMENTS, GroupedView, aggregate, count
from .models import Period, PeriodKind, ScheduleMap
from .periods import resolve, shift

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class DashboardSnapshot:
    period: Period | None
    department: str
    grouped: GroupedView = field(default_factory=dict)
    total: int = 0
    loading: bool = False
    error: str | None = None


class Dashboard:
    def __init__(self, source: ScheduleSource, *, clock: Clock) -> None:
        self._source = source
        self._clock = clock

        self._generation = 0
        self._inflight: asyncio.Future[ScheduleMap] | None = None

        self.period: Period | None = None
        self.department: str = ALL_DEPARTMENTS
        self.schedule: ScheduleMap = {}
        self.grouped: GroupedView = {}
        self.error: str | None = None

    @property
    def generation(self) -> int:
        return self._generation

    @property
    def loading(self) -> bool:
        return self._inflight is not None and not self._inflight.done()

    def snapshot(self) -> DashboardSnapshot:
        return DashboardSnapshot(
            period=self.period,
            department=self.department,
            grouped=self.grouped,
            total=count(self.grouped),
            loading=self.loading,
            error=self.error,
        )

    def set_department(self, department: str | None) -> GroupedView:
        """Change the filter; recomputes the grouped view from cached data."""
        self.department = department or ALL_DEPARTMENTS
        self.grouped = aggregate(self.schedule, self.department)
        return self.grouped

    async def select(
        self,
        kind: PeriodKind | str,
        anchor: date | str | None = None,
        *,
        department: str | None = None,
    ) -> bool:
        """
        Resolve and load a new period. Returns True if this call's result was
        published, False if it was superseded (or failed).

        InvalidDate for a bad anchor is raised before any state changes.
        """
        period = resolve(kind, anchor if anchor is not None else self._clock())
        if department is not None:
            self.department = department
        return await self._load(period)

    async def shift(self, steps: int) -> bool:
        """Move to the previous (-1) / next (+1) period of the current kind."""
        if self.period is None:
            return await self.select(PeriodKind.DAY)
        return await self._load(shift(self.period, steps))

    async def reload(self) -> bool:
        if self.period is None:
            return await self.select(PeriodKind.DAY)
        return await self._load(self.period)

    async def _load(self, period: Period) -> bool:
        self._generation += 1
        generation = self._generation

        previous = self._inflight
        if previous is not None and not previous.done():
            previous.cancel()
            logger.debug("Cancelled stale fetch (superseded by generation %d)", generation)

        self.period = period
        self.error = None

        fut: asyncio.Future[ScheduleMap] = asyncio.ensure_future(self._source.fetch(period))
        self._inflight = fut

        try:
            schedule = await fut
        except asyncio.CancelledError:
            if generation != self._generation:
                return False
            raise
        except FetchFailed as e:
            if generation != self._generation:
                return False
            self._publish_failure(str(e))
            logger.info("Fetch failed for %s: %s", period.label, e)
            return False
        except AuthDenied:
            if generation == self._generation:
                self._publish_failure("Session expired. Please sign in again.")
            raise
        finally:
            if self._inflight is fut:
                self._inflight = None

        if generation != self._generation:
            logger.debug("Discarding stale result for %s (generation %d)", period.label, generation)
            return False

        self.schedule = schedule
        self.grouped = aggregate(schedule, self.department)
        logger.debug("Published %s: %d tasks", period.label, count(self.grouped))
        return True

    def _publish_failure(self, message: str) -> None:
        self.schedule = {}
        self.grouped = {}
        self.error = message
