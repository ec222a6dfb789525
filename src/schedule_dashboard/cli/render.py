# src/schedule_dashboard/cli/render.py

from __future__ import annotations

from datetime import date

from ..schedule.aggregate import ALL_DEPARTMENTS, department_totals
from ..schedule.dashboard import DashboardSnapshot
from ..schedule.models import Task


def _task_line(task: Task) -> str:
    line = f"      - {task.activity} [{task.frequency or '-'}"
    if task.no_of_times > 1:
        line += f" x{task.no_of_times}"
    line += "]"
    if task.comments:
        line += f" ({task.comments})"
    return line


def render_snapshot(snap: DashboardSnapshot) -> str:
    if snap.period is None:
        return "No period selected. Use /view <day|week|month|quarter|half-year|year> [yyyy-mm-dd]."

    header = f"{snap.period.label} ({snap.period.start.isoformat()} .. {snap.period.end.isoformat()})"
    if snap.department != ALL_DEPARTMENTS:
        header += f" | department: {snap.department}"

    if snap.loading:
        return f"{header}\n  Loading..."
    if snap.error:
        return f"{header}\n  Error: {snap.error}"
    if not snap.grouped:
        return f"{header}\n  No tasks scheduled."

    lines = [header, f"  {snap.total} task(s)"]
    for day, groups in snap.grouped.items():
        weekday = date.fromisoformat(day).strftime("%A")
        lines.append(f"  {day} ({weekday})")
        for dept, tasks in groups.items():
            lines.append(f"    {dept} ({len(tasks)})")
            lines.extend(_task_line(t) for t in tasks)

    totals = department_totals(snap.grouped)
    if len(totals) > 1:
        lines.append("  By department: " + ", ".join(f"{d}: {n}" for d, n in totals.items()))
    return "\n".join(lines)
