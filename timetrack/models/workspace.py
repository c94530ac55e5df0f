"""Workspace model for Slack workspaces."""

import uuid
from sqlalchemy import Column, String, DateTime
from sqlalchemy.orm import relationship

from timetrack.models.database import Base, utcnow
from timetrack.models.mixins import SoftDeleteMixin, live_unique_index


class Workspace(SoftDeleteMixin, Base):
    """A Slack workspace (team) that uses the timer command."""
    
    __tablename__ = "workspaces"
    __table_args__ = (
        live_unique_index("uq_workspaces_slack_team_id", "slack_team_id"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    slack_team_id = Column(String(50), nullable=False, index=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    projects = relationship("Project", back_populates="workspace")
    members = relationship("Member", back_populates="workspace")
    
    def __repr__(self):
        return f"<Workspace {self.slack_team_id}>"
