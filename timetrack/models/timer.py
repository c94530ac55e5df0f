"""Timer model: one timed interval of work by a member on a task."""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Integer
from sqlalchemy.orm import relationship

from timetrack.models.database import Base, utcnow
from timetrack.models.mixins import SoftDeleteMixin, live_unique_index


class Timer(SoftDeleteMixin, Base):
    """A timer is running while ``finished_at`` is NULL.

    ``minutes`` stays 0 until the timer is stopped and is never changed
    afterwards.
    """
    
    __tablename__ = "timers"
    __table_args__ = (
        # At most one running timer per member
        live_unique_index(
            "uq_timers_active_member",
            "member_id",
            where="finished_at IS NULL AND deleted_at IS NULL",
        ),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    member_id = Column(String(36), ForeignKey("members.id"), nullable=False, index=True)
    task_id = Column(String(36), ForeignKey("tasks.id"), nullable=False, index=True)
    started_at = Column(DateTime, nullable=False, index=True)
    finished_at = Column(DateTime, nullable=True)
    minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    member = relationship("Member", back_populates="timers")
    task = relationship("Task", back_populates="timers")
    
    @property
    def is_running(self) -> bool:
        return self.finished_at is None and self.deleted_at is None
    
    def __repr__(self):
        state = "running" if self.finished_at is None else f"{self.minutes}m"
        return f"<Timer {self.id[:8]} {state}>"
