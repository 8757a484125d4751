"""Shared fixtures: one app per session, one rolled-back transaction per test.

Tables live in an in-memory SQLite database created once. Every test that
asks for ``session`` runs inside an outer transaction with a SAVEPOINT the
application's units of work join, so their commits and rollbacks stay local
and teardown discards all rows.
"""

from __future__ import annotations

import os

import pytest
from gym_buddy.core.config import TestingConfig
from gym_buddy.core.extensions import db as _db
from gym_buddy.factory import create_app
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker


class TestConfig(TestingConfig):
    """In-memory database, no Redis, no rate limiting (see ``test_app_api``)."""

    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    REDIS_URL = None
    RATE_LIMIT_ENABLED = False
    CORS_ORIGINS = "http://localhost:3000"


@pytest.fixture(scope="session")
def app():
    for var in ("DATABASE_URL", "REDIS_URL"):
        os.environ.pop(var, None)
    app = create_app(TestConfig)
    app.logger.setLevel("WARNING")
    return app


@pytest.fixture(scope="session")
def db(app):
    """Workout tables, created once and dropped at the end of the run."""
    with app.app_context():
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    conn = db.engine.connect()
    try:
        yield conn
    finally:
        conn.close()


@pytest.fixture()
def session(db, connection):
    """Scoped session swapped in for ``db.session`` for the length of one test.

    Tests that go through a service commit their factory rows first; the
    service's unit of work would otherwise roll them back with its own work.
    """
    outer = connection.begin()
    scoped = scoped_session(
        sessionmaker(bind=connection, join_transaction_mode="create_savepoint", autoflush=False)
    )
    savepoint = connection.begin_nested()

    @event.listens_for(scoped(), "after_transaction_end")
    def _reopen_savepoint(sess, trans):  # pragma: no cover
        nonlocal savepoint
        if not savepoint.is_active:
            savepoint = connection.begin_nested()

    app_session = db.session
    db.session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = app_session
        outer.rollback()


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture(scope="session")
def faker():
    from faker import Faker

    Faker.seed(1337)
    return Faker()


@pytest.fixture(autouse=True)
def _bind_factories(request):
    """Bind factories to the transactional session when a test requests it."""
    from tests.factories import bind_session

    wants_db = "session" in request.fixturenames
    bind_session(request.getfixturevalue("session") if wants_db else None)
    yield
    bind_session(None)
