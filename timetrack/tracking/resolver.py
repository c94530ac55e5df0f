"""Find-or-create resolution for workspaces, projects, members and tasks.

Each resolver looks up the live row for its key and inserts one when it
is missing. Two requests can race on the same key: both see nothing and
both insert. The partial unique indexes on the tables decide the winner;
the loser gets an ``IntegrityError``, rolls back and re-reads the row the
winner committed. A second miss after that is treated as a real error.

Existing rows are returned as they are, never updated.
"""

import secrets
from typing import Callable, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, MultipleResultsFound
from sqlalchemy.orm import Session

from timetrack.errors import DataIntegrityViolation, InvalidState, UniquenessConflict
from timetrack.models import Member, Project, TAG_LENGTH, Task, Workspace, store_errors

T = TypeVar("T")


def resolve_workspace(db: Session, slack_team_id: str) -> Workspace:
    """Return the live workspace for ``slack_team_id``, creating it if needed."""
    slack_team_id = _require_key(slack_team_id, "workspace id")
    stmt = select(Workspace).where(
        Workspace.slack_team_id == slack_team_id,
        Workspace.live(),
    )
    return _resolve(db, stmt, lambda: Workspace(slack_team_id=slack_team_id))


def resolve_project(
    db: Session,
    workspace: Workspace,
    slack_channel_id: str,
    name: Optional[str] = None,
) -> Project:
    """Return the live project for a channel of ``workspace``.

    ``name`` is only stored when the project is created.
    """
    slack_channel_id = _require_key(slack_channel_id, "channel id")
    stmt = select(Project).where(
        Project.workspace_id == workspace.id,
        Project.slack_channel_id == slack_channel_id,
        Project.live(),
    )
    return _resolve(
        db,
        stmt,
        lambda: Project(workspace_id=workspace.id, slack_channel_id=slack_channel_id, name=name),
    )


def resolve_member(
    db: Session,
    workspace: Workspace,
    slack_user_id: str,
    name: Optional[str] = None,
) -> Member:
    """Return the live member for a Slack user of ``workspace``."""
    slack_user_id = _require_key(slack_user_id, "user id")
    stmt = select(Member).where(
        Member.workspace_id == workspace.id,
        Member.slack_user_id == slack_user_id,
        Member.live(),
    )
    return _resolve(
        db,
        stmt,
        lambda: Member(workspace_id=workspace.id, slack_user_id=slack_user_id, name=name),
    )


def resolve_task(db: Session, workspace: Workspace, project: Project, name: str) -> Task:
    """Return the live task called ``name`` in ``project``.

    New tasks get a fresh random tag. If the insert fails and no task with
    that name exists afterwards, the failure was a tag collision and the
    insert is tried once more with another tag.
    """
    name = _require_key(name, "task name")
    stmt = select(Task).where(
        Task.workspace_id == workspace.id,
        Task.project_id == project.id,
        Task.name == name,
        Task.live(),
    )

    def build() -> Task:
        return Task(
            workspace_id=workspace.id,
            project_id=project.id,
            name=name,
            tag=generate_tag(),
        )

    return _resolve(db, stmt, build, attempts=2)


def generate_tag() -> str:
    """Random lowercase hex tag of ``TAG_LENGTH`` characters."""
    return secrets.token_hex(TAG_LENGTH // 2)


def _require_key(value: Optional[str], what: str) -> str:
    if value is None or not value.strip():
        raise InvalidState(f"{what} must not be empty")
    return value


def _lookup(db: Session, stmt) -> Optional[T]:
    try:
        return db.execute(stmt).scalar_one_or_none()
    except MultipleResultsFound as e:
        raise DataIntegrityViolation(f"more than one live row matches {stmt}") from e


def _is_unique_violation(error: IntegrityError) -> bool:
    # psycopg reports SQLSTATE 23505; SQLite only has the message text
    if getattr(error.orig, "pgcode", None) == "23505":
        return True
    return "unique" in str(error.orig).lower()


def _insert(db: Session, row: T) -> T:
    """Insert and commit ``row``; a unique index violation becomes ``UniquenessConflict``."""
    db.add(row)
    try:
        db.commit()
    except IntegrityError as e:
        db.rollback()
        if not _is_unique_violation(e):
            raise DataIntegrityViolation(
                f"insert rejected: {type(e.orig).__name__}: {e.orig}"
            ) from e
        raise UniquenessConflict(str(e.orig)) from e
    return row


def _resolve(db: Session, stmt, build: Callable[[], T], attempts: int = 1) -> T:
    """Run ``_find_or_create`` up to ``attempts`` times.

    A conflict whose re-read comes back empty means the row that beat us
    cannot be seen, which the unique indexes should make impossible.
    """
    for attempt in range(1, attempts + 1):
        try:
            return _find_or_create(db, stmt, build)
        except UniquenessConflict as e:
            if attempt == attempts:
                raise DataIntegrityViolation(f"insert conflicted but no live row was found: {e}") from e


def _find_or_create(db: Session, stmt, build: Callable[[], T]) -> T:
    """Look up ``stmt``; insert ``build()`` when nothing matches.

    Raises ``UniquenessConflict`` when the insert is rejected and the
    re-read still finds nothing.
    """
    with store_errors():
        existing = _lookup(db, stmt)
        if existing is not None:
            return existing

        try:
            return _insert(db, build())
        except UniquenessConflict:
            winner = _lookup(db, stmt)
            if winner is None:
                raise
            return winner
