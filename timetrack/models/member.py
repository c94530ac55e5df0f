"""Member model for Slack users within a workspace."""

import uuid
from sqlalchemy import Column, String, DateTime, ForeignKey
from sqlalchemy.orm import relationship

from timetrack.models.database import Base, utcnow
from timetrack.models.mixins import SoftDeleteMixin, live_unique_index


class Member(SoftDeleteMixin, Base):
    """A Slack user who runs timers."""
    
    __tablename__ = "members"
    __table_args__ = (
        live_unique_index("uq_members_workspace_user", "workspace_id", "slack_user_id"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    workspace_id = Column(String(36), ForeignKey("workspaces.id"), nullable=False, index=True)
    slack_user_id = Column(String(50), nullable=False)
    name = Column(String(255), nullable=True)
    created_at = Column(DateTime, default=utcnow, nullable=False)
    
    # Relationships
    workspace = relationship("Workspace", back_populates="members")
    timers = relationship("Timer", back_populates="member")
    
    def __repr__(self):
        return f"<Member {self.name} ({self.slack_user_id})>"
