"""Timer lifecycle: find the running timer, start one, stop one.

A member has no timer, one running timer, or only finished ones. Starting
does not stop anything by itself; the command workflow stops the running
timer first so that both timers stay separately visible in history. The
store backs this up with a partial unique index, so a second concurrent
start fails with ``AlreadyActive`` instead of creating two running timers.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from timetrack.errors import AlreadyActive, DataIntegrityViolation, InvalidState
from timetrack.models import Member, Task, Timer, as_utc, store_errors, utcnow


@dataclass
class StopResult:
    """Outcome of ``stop_timer``.

    ``already_finished`` is True when another request stopped the timer
    first; ``timer`` then carries the values that request stored.
    """
    timer: Timer
    already_finished: bool = False


def minutes_between(started_at: datetime, finished_at: datetime) -> int:
    """Whole minutes from ``started_at`` to ``finished_at``, never negative."""
    seconds = (finished_at - started_at).total_seconds()
    return max(0, int(seconds // 60))


def elapsed_minutes(timer: Timer, now: Optional[datetime] = None) -> int:
    """Minutes on ``timer`` so far; for a running timer this is not persisted."""
    if timer.finished_at is not None:
        return timer.minutes
    return minutes_between(timer.started_at, _now(now))


def find_active_timer(db: Session, member: Member) -> Optional[Timer]:
    """Return the member's running timer, or None."""
    stmt = select(Timer).where(
        Timer.member_id == member.id,
        Timer.finished_at.is_(None),
        Timer.live(),
    )
    with store_errors():
        timers = db.execute(stmt).scalars().all()

    if len(timers) > 1:
        raise DataIntegrityViolation(
            f"member {member.id} has {len(timers)} running timers"
        )
    return timers[0] if timers else None


def start_timer(db: Session, member: Member, task: Task, now: Optional[datetime] = None) -> Timer:
    """Create a running timer for ``member`` on ``task``.

    Callers check ``find_active_timer`` and stop that timer first. If they
    don't, or a duplicate request got there first, ``AlreadyActive`` is
    raised.
    """
    timer = Timer(
        member_id=member.id,
        task_id=task.id,
        started_at=_now(now),
        finished_at=None,
        minutes=0,
    )

    with store_errors():
        db.add(timer)
        try:
            db.commit()
        except IntegrityError as e:
            db.rollback()
            if find_active_timer(db, member) is not None:
                raise AlreadyActive("you already have a running timer") from e
            raise DataIntegrityViolation(
                f"timer insert rejected: {type(e.orig).__name__}: {e.orig}"
            ) from e

    return timer


def stop_timer(db: Session, timer: Timer, now: Optional[datetime] = None) -> StopResult:
    """Finish ``timer`` and record its minutes.

    The update only matches while the timer is still running. If it
    matches nothing the row is read back: a timer stopped by someone else
    is returned with ``already_finished`` set, a deleted or missing timer
    is an ``InvalidState``.
    """
    finished_at = _now(now)
    minutes = minutes_between(timer.started_at, finished_at)

    stmt = (
        update(Timer)
        .where(
            Timer.id == timer.id,
            Timer.finished_at.is_(None),
            Timer.live(),
        )
        .values(finished_at=finished_at, minutes=minutes)
        .execution_options(synchronize_session=False)
    )

    with store_errors():
        result = db.execute(stmt)
        db.commit()
        current = db.get(Timer, timer.id, populate_existing=True)

    if current is None:
        raise InvalidState("that timer no longer exists")
    if current.deleted_at is not None:
        raise InvalidState("that timer was deleted")

    if result.rowcount == 0:
        return StopResult(timer=current, already_finished=True)

    return StopResult(timer=current)


def soft_delete_timer(db: Session, timer: Timer, now: Optional[datetime] = None) -> Timer:
    """Delete a timer without finishing it. Its row stays for history."""
    timer.soft_delete(_now(now))
    with store_errors():
        db.commit()
    return timer


def _now(now: Optional[datetime]) -> datetime:
    return as_utc(now) if now is not None else utcnow()
