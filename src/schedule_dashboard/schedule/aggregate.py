# src/schedule_dashboard/schedule/aggregate.py

"""
Aggregation & filter engine: ScheduleMap -> GroupedView.

Key invariants:
- dates come out in chronological order,
- within a date, departments appear in first-seen order (NOT alphabetical),
- department comparison is exact and case-sensitive, as delivered by the store,
- a date whose filtered task list is empty does not appear at all.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from .models import ScheduleMap, Task

ALL_DEPARTMENTS = "all"

# ISO date -> department -> tasks (both levels in display order)
GroupedView = dict[str, dict[str, list[Task]]]


def _is_all(department: str | None) -> bool:
    return department is None or department == ALL_DEPARTMENTS


def filter_tasks(tasks: Iterable[Task], department: str | None = ALL_DEPARTMENTS) -> list[Task]:
    if _is_all(department):
        return list(tasks)
    return [t for t in tasks if t.department == department]


def group_by_department(tasks: Iterable[Task]) -> dict[str, list[Task]]:
    groups: dict[str, list[Task]] = {}
    for task in tasks:
        groups.setdefault(task.department, []).append(task)
    return groups


def aggregate(
    schedule: Mapping[str, Sequence[Task]],
    department: str | None = ALL_DEPARTMENTS,
) -> GroupedView:
    """Filter each date's tasks by department, then group them by department."""
    view: GroupedView = {}
    # ISO yyyy-MM-dd keys sort chronologically.
    for day in sorted(schedule):
        kept = filter_tasks(schedule[day] or (), department)
        if kept:
            view[day] = group_by_department(kept)
    return view


def count(view: Mapping[str, Mapping[str, Sequence[Task]]]) -> int:
    return sum(len(tasks) for groups in view.values() for tasks in groups.values())


def departments(schedule: ScheduleMap) -> list[str]:
    """Departments present in the data, first-seen order across dates."""
    seen: dict[str, None] = {}
    for day in sorted(schedule):
        for task in schedule[day] or ():
            seen.setdefault(task.department, None)
    return list(seen)


def department_totals(view: GroupedView) -> dict[str, int]:
    totals: dict[str, int] = {}
    for groups in view.values():
        for dept, tasks in groups.items():
            totals[dept] = totals.get(dept, 0) + len(tasks)
    return totals
