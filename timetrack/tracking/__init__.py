"""Entity resolution, timer lifecycle and time totals."""

from timetrack.tracking.resolver import (
    resolve_workspace,
    resolve_project,
    resolve_member,
    resolve_task,
)
from timetrack.tracking.timers import (
    StopResult,
    elapsed_minutes,
    find_active_timer,
    start_timer,
    stop_timer,
    soft_delete_timer,
)
from timetrack.tracking.aggregation import TaskTotal, total_minutes, task_total_minutes, task_totals
from timetrack.tracking.periods import Period, resolve_period

__all__ = [
    "resolve_workspace",
    "resolve_project",
    "resolve_member",
    "resolve_task",
    "StopResult",
    "elapsed_minutes",
    "find_active_timer",
    "start_timer",
    "stop_timer",
    "soft_delete_timer",
    "TaskTotal",
    "total_minutes",
    "task_total_minutes",
    "task_totals",
    "Period",
    "resolve_period",
]
