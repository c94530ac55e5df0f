"""Task model: a named unit of work inside a project."""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey, Text
from sqlalchemy.orm import relationship

from timetrack.models.database import Base, utcnow
from timetrack.models.mixins import SoftDeleteMixin, live_unique_index

TAG_LENGTH = 8


class Task(SoftDeleteMixin, Base):
    """A task, referenced from Slack by its short ``tag``.

    The tag is drawn once at creation and never changes.
    """
    
    __tablename__ = "tasks"
    __table_args__ = (
        live_unique_index("uq_tasks_workspace_project_name", "workspace_id", "project_id", "name"),
        live_unique_index("uq_tasks_tag", "tag"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(36), ForeignKey("workspaces.id"), nullable=False, index=True)
    project_id = Column(String(36), ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(Text, nullable=False)
    tag = Column(String(TAG_LENGTH), nullable=False)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    workspace = relationship("Workspace")
    project = relationship("Project", back_populates="tasks")
    timers = relationship("Timer", back_populates="task")
    
    def __repr__(self):
        return f"<Task {self.tag}: {self.name[:50]}>"
