"""
Shared fixtures.

One application and one in-memory SQLite connection live for the whole run.
Every test gets a session joined to an outer transaction through SAVEPOINTs,
so ``commit()`` inside services only releases a savepoint and the outer
rollback at teardown discards everything the test wrote.
"""

from __future__ import annotations

import os

import pytest
from faker import Faker
from sqlalchemy import event
from sqlalchemy.orm import scoped_session, sessionmaker

from memberhub.core.config import TestingConfig
from memberhub.core.extensions import db as _db
from memberhub.factory import create_app
from memberhub.services._shared.ports import InMemoryMailSender
from tests.factories import SQLAlchemySession


class TestConfig(TestingConfig):
    SQLALCHEMY_DATABASE_URI = "sqlite:///:memory:"
    JWT_SECRET_KEY = "testing-jwt-secret-with-enough-entropy-000"
    JWT_ACCESS_EXPIRATION = "15m"
    JWT_REFRESH_EXPIRATION = "7d"
    REFRESH_TOKEN_BACKEND = "sqlalchemy"
    FRONTEND_URL = "http://frontend.test"
    CORS_ORIGINS = "http://frontend.test"


@pytest.fixture(scope="session")
def app():
    """The app under test, with mail captured in memory instead of logged."""
    os.environ.pop("DATABASE_URL", None)
    application = create_app(TestConfig)
    outbox = InMemoryMailSender()
    application.extensions["mail_sender"] = outbox
    application.extensions["auth_service"].mail = outbox
    return application


def _sqlalchemy_controls_transactions(engine) -> None:
    """
    Stop pysqlite from managing BEGIN itself.

    The driver defers BEGIN until the first write, so the outer transaction
    would not exist yet and releasing the first SAVEPOINT would commit for
    real. Must run before the engine opens its first connection.
    """

    @event.listens_for(engine, "connect")
    def _autocommit_driver(dbapi_connection, _record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _explicit_begin(conn):
        conn.exec_driver_sql("BEGIN")


@pytest.fixture(scope="session")
def db(app):
    # the context stays pushed for the whole run so ``g`` and ``db`` resolve
    with app.app_context():
        if _db.engine.dialect.name == "sqlite":
            _sqlalchemy_controls_transactions(_db.engine)
        _db.create_all()
        yield _db
        _db.session.remove()
        _db.drop_all()


@pytest.fixture(scope="session")
def connection(db):
    conn = db.engine.connect()
    yield conn
    conn.close()


@pytest.fixture()
def session(db, connection):
    outer = connection.begin()
    scoped = scoped_session(
        sessionmaker(
            bind=connection,
            autoflush=False,
            join_transaction_mode="create_savepoint",
        )
    )
    flask_session = db.session
    flask_session.remove()
    db.session = scoped
    try:
        yield scoped
    finally:
        scoped.remove()
        db.session = flask_session
        outer.rollback()


@pytest.fixture(autouse=True)
def _factories_session(session):
    SQLAlchemySession.set(session)
    yield


@pytest.fixture()
def client(app, session):
    return app.test_client()


@pytest.fixture()
def outbox(app):
    """The captured mail, emptied for this test."""
    sender = app.extensions["mail_sender"]
    sender.outbox.clear()
    return sender


@pytest.fixture(scope="session")
def faker():
    Faker.seed(1337)
    return Faker()
