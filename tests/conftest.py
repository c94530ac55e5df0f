"""Shared fixtures: a fresh file-backed SQLite store per test."""

import pytest

from timetrack.models import create_store_engine, init_db, make_session_factory
from timetrack.tracking import resolve_member, resolve_project, resolve_task, resolve_workspace


@pytest.fixture
def engine(tmp_path):
    engine = create_store_engine(f"sqlite:///{tmp_path / 'timetrack.db'}", timeout_seconds=30)
    init_db(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return make_session_factory(engine)


@pytest.fixture
def db(session_factory):
    session = session_factory()
    yield session
    session.close()


@pytest.fixture
def workspace(db):
    return resolve_workspace(db, "T0001")


@pytest.fixture
def project(db, workspace):
    return resolve_project(db, workspace, "C2147483705", name="test")


@pytest.fixture
def member(db, workspace):
    return resolve_member(db, workspace, "U2147483697", name="Steve")


@pytest.fixture
def task(db, workspace, project):
    return resolve_task(db, workspace, project, "build")
