"""Read-only minute totals over finished timers.

Only finished, live timers that started inside the period count. The
running timer is left out; callers add its elapsed minutes themselves.
"""

from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.orm import Session, joinedload

from timetrack.models import Member, Task, Timer, store_errors
from timetrack.tracking.periods import Period


@dataclass
class TaskTotal:
    """Minutes a member spent on one task within a period."""
    task: Task
    minutes: int


def _finished_in(member: Member, period: Period):
    return (
        Timer.member_id == member.id,
        Timer.finished_at.is_not(None),
        Timer.live(),
        Timer.started_at >= period.start,
        Timer.started_at < period.end,
    )


def total_minutes(db: Session, member: Member, period: Period) -> int:
    """Sum of minutes over the member's finished timers in ``period``."""
    stmt = select(func.coalesce(func.sum(Timer.minutes), 0)).where(*_finished_in(member, period))
    with store_errors():
        return int(db.execute(stmt).scalar_one())


def task_total_minutes(db: Session, member: Member, task: Task, period: Period) -> int:
    """Same as ``total_minutes`` but restricted to one task."""
    stmt = select(func.coalesce(func.sum(Timer.minutes), 0)).where(
        *_finished_in(member, period),
        Timer.task_id == task.id,
    )
    with store_errors():
        return int(db.execute(stmt).scalar_one())


def task_totals(db: Session, member: Member, period: Period) -> list[TaskTotal]:
    """Per-task totals, in the order each task was first worked on."""
    stmt = (
        select(Timer)
        .options(joinedload(Timer.task).joinedload(Task.project))
        .where(*_finished_in(member, period))
        .order_by(Timer.started_at, Timer.id)
    )
    with store_errors():
        timers = db.execute(stmt).scalars().all()

    totals: dict[str, TaskTotal] = {}
    for timer in timers:
        entry = totals.get(timer.task_id)
        if entry is None:
            entry = totals[timer.task_id] = TaskTotal(task=timer.task, minutes=0)
        entry.minutes += timer.minutes

    return list(totals.values())
