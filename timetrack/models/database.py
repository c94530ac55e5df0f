"""Database engine, sessions and error translation.

There is no module-level engine: the process creates one with
``create_store_engine`` at startup, hands a session factory to whatever
needs it and disposes the engine at shutdown. Every tracking function
takes its ``Session`` as an explicit argument.
"""

from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Generator

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DisconnectionError, InterfaceError, OperationalError
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from timetrack.errors import StoreUnavailable

Base = declarative_base()


def utcnow() -> datetime:
    """Current time as a naive UTC datetime, the format stored in every column."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc(value: datetime) -> datetime:
    """Convert an aware datetime to naive UTC; naive values are assumed to be UTC already."""
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def create_store_engine(url: str, timeout_seconds: int = 30, echo: bool = False) -> Engine:
    """Create the engine for ``url``.

    ``timeout_seconds`` bounds how long a single store call may block: the
    SQLite busy timeout, or a server side statement timeout on PostgreSQL.
    """
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args = {"check_same_thread": False, "timeout": timeout_seconds}
    elif url.startswith("postgresql"):
        connect_args = {
            "connect_timeout": timeout_seconds,
            "options": f"-c statement_timeout={timeout_seconds * 1000}",
        }

    engine = create_engine(url, echo=echo, pool_pre_ping=True, connect_args=connect_args)

    if engine.dialect.name == "sqlite":
        @event.listens_for(engine, "connect")
        def _enable_foreign_keys(dbapi_connection, connection_record):
            cursor = dbapi_connection.cursor()
            cursor.execute("PRAGMA foreign_keys=ON")
            cursor.close()

    return engine


def make_session_factory(engine: Engine) -> sessionmaker:
    """Session factory bound to ``engine``.

    Objects stay readable after commit so resolved entities can be handed
    between tracking calls inside one request.
    """
    return sessionmaker(bind=engine, autoflush=False, expire_on_commit=False)


def init_db(engine: Engine):
    """Create all tables."""
    # Register every model on the metadata before creating tables
    from timetrack.models import workspace, project, member, task, timer  # noqa: F401

    Base.metadata.create_all(bind=engine)


@contextmanager
def session_scope(session_factory: sessionmaker) -> Generator[Session, None, None]:
    """Request-scoped session: committed on success, rolled back on error, always closed."""
    db = session_factory()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@contextmanager
def store_errors():
    """Translate connection level SQLAlchemy failures into ``StoreUnavailable``."""
    try:
        yield
    except (OperationalError, InterfaceError, DisconnectionError) as e:
        raise StoreUnavailable(str(e)) from e
