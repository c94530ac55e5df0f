"""Database models."""

from timetrack.models.database import (
    Base,
    as_utc,
    create_store_engine,
    init_db,
    make_session_factory,
    session_scope,
    store_errors,
    utcnow,
)
from timetrack.models.workspace import Workspace
from timetrack.models.project import Project
from timetrack.models.member import Member
from timetrack.models.task import Task, TAG_LENGTH
from timetrack.models.timer import Timer

__all__ = [
    "Base",
    "as_utc",
    "create_store_engine",
    "init_db",
    "make_session_factory",
    "session_scope",
    "store_errors",
    "utcnow",
    "Workspace",
    "Project",
    "Member",
    "Task",
    "TAG_LENGTH",
    "Timer",
]
