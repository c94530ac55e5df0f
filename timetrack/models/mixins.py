"""Shared column sets for the tracking models."""

from datetime import datetime
from typing import Optional

from sqlalchemy import Column, DateTime, Index, text

from timetrack.models.database import utcnow


class SoftDeleteMixin:
    """Adds a nullable ``deleted_at`` column.

    There is no global filter: every query that should ignore deleted rows
    has to apply ``Model.live()`` itself.
    """

    deleted_at = Column(DateTime, nullable=True)

    @classmethod
    def live(cls):
        return cls.deleted_at.is_(None)

    def soft_delete(self, when: Optional[datetime] = None):
        """Mark the row deleted; the caller commits."""
        if self.deleted_at is None:
            self.deleted_at = when or utcnow()

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None


def live_unique_index(name: str, *columns: str, where: str = "deleted_at IS NULL") -> Index:
    """Unique index that only covers rows matching ``where`` (live rows by default)."""
    return Index(
        name,
        *columns,
        unique=True,
        sqlite_where=text(where),
        postgresql_where=text(where),
    )
