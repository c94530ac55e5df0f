"""Command workflows that combine resolution, timers and totals into reports.

These are what the Slack layer calls. Each one uses a single clock
reading for the whole command so the stop of one timer and the start of
the next line up exactly.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional, Union
from zoneinfo import ZoneInfo

from sqlalchemy.orm import Session

from timetrack.errors import InvalidState
from timetrack.models import Member, Project, Timer, Workspace, utcnow
from timetrack.tracking.aggregation import TaskTotal, task_total_minutes, task_totals, total_minutes
from timetrack.tracking.periods import Period, resolve_period
from timetrack.tracking.resolver import resolve_member, resolve_project, resolve_task, resolve_workspace
from timetrack.tracking.timers import elapsed_minutes, find_active_timer, start_timer, stop_timer


@dataclass
class Scope:
    """The entities a command runs against."""
    workspace: Workspace
    project: Project
    member: Member


@dataclass
class StartReport:
    project: Project
    period: Period
    started_timer: Optional[Timer] = None
    started_task_total: int = 0
    stopped_timer: Optional[Timer] = None
    stopped_task_total: int = 0
    already_started_timer: Optional[Timer] = None
    already_started_task_total: int = 0
    member_total: int = 0


@dataclass
class StopReport:
    project: Project
    period: Period
    stopped_timer: Timer
    stopped_task_total: int = 0
    member_total: int = 0
    already_finished: bool = False


@dataclass
class StatusReport:
    project: Project
    period: Period
    tasks: list[TaskTotal] = field(default_factory=list)
    member_total: int = 0
    current_timer: Optional[Timer] = None
    current_timer_elapsed: int = 0
    current_task_total: int = 0


def resolve_scope(
    db: Session,
    team_id: str,
    channel_id: str,
    user_id: str,
    channel_name: Optional[str] = None,
    user_name: Optional[str] = None,
) -> Scope:
    """Find or create the workspace, project and member a command refers to."""
    workspace = resolve_workspace(db, team_id)
    project = resolve_project(db, workspace, channel_id, name=channel_name)
    member = resolve_member(db, workspace, user_id, name=user_name)
    return Scope(workspace=workspace, project=project, member=member)


def start(
    db: Session,
    scope: Scope,
    task_name: str,
    tz: Union[str, ZoneInfo] = "UTC",
    now: Optional[datetime] = None,
) -> StartReport:
    """Start a timer on ``task_name``, stopping the running one first.

    Starting the task that is already running changes nothing; the report
    carries that timer as ``already_started_timer``.
    """
    if not task_name or not task_name.strip():
        raise InvalidState("a task name is required to start a timer")

    now = now or utcnow()
    today = resolve_period("today", tz, now)
    member = scope.member
    task = resolve_task(db, scope.workspace, scope.project, task_name.strip())
    report = StartReport(project=scope.project, period=today)

    active = find_active_timer(db, member)
    if active is not None and active.task_id == task.id:
        report.already_started_timer = active
        report.already_started_task_total = (
            task_total_minutes(db, member, task, today) + elapsed_minutes(active, now)
        )
    else:
        if active is not None:
            stopped = stop_timer(db, active, now).timer
            report.stopped_timer = stopped
            report.stopped_task_total = task_total_minutes(db, member, stopped.task, today)

        report.started_timer = start_timer(db, member, task, now)
        report.started_task_total = task_total_minutes(db, member, task, today)

    report.member_total = total_minutes(db, member, today)
    return report


def stop(
    db: Session,
    scope: Scope,
    tz: Union[str, ZoneInfo] = "UTC",
    now: Optional[datetime] = None,
) -> StopReport:
    """Stop the member's running timer."""
    now = now or utcnow()
    today = resolve_period("today", tz, now)
    member = scope.member

    active = find_active_timer(db, member)
    if active is None:
        raise InvalidState("there is no running timer to stop")

    result = stop_timer(db, active, now)
    return StopReport(
        project=scope.project,
        period=today,
        stopped_timer=result.timer,
        stopped_task_total=task_total_minutes(db, member, result.timer.task, today),
        member_total=total_minutes(db, member, today),
        already_finished=result.already_finished,
    )


def status(
    db: Session,
    scope: Scope,
    period_token: str = "today",
    tz: Union[str, ZoneInfo] = "UTC",
    now: Optional[datetime] = None,
) -> StatusReport:
    """Totals for ``period_token`` plus the running timer, if any."""
    now = now or utcnow()
    period = resolve_period(period_token, tz, now)
    member = scope.member

    report = StatusReport(
        project=scope.project,
        period=period,
        tasks=task_totals(db, member, period),
        member_total=total_minutes(db, member, period),
    )

    current = find_active_timer(db, member)
    if current is not None:
        report.current_timer = current
        report.current_timer_elapsed = elapsed_minutes(current, now)
        report.current_task_total = (
            task_total_minutes(db, member, current.task, period) + report.current_timer_elapsed
        )

    return report
