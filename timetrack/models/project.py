"""Project model: one per Slack channel within a workspace."""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from timetrack.models.database import Base, utcnow
from timetrack.models.mixins import SoftDeleteMixin, live_unique_index


class Project(SoftDeleteMixin, Base):
    """Tasks started in a channel belong to that channel's project."""
    
    __tablename__ = "projects"
    __table_args__ = (
        live_unique_index("uq_projects_workspace_channel", "workspace_id", "slack_channel_id"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(36), ForeignKey("workspaces.id"), nullable=False, index=True)
    slack_channel_id = Column(String(50), nullable=False)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    workspace = relationship("Workspace", back_populates="projects")
    tasks = relationship("Task", back_populates="project")
    
    def __repr__(self):
        return f"<Project #{self.name} ({self.slack_channel_id})>"
