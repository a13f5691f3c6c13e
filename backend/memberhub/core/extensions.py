"""
Extension singletons.

Created unbound at import time so models and services can import them;
:func:`init_app` binds them to an application.
"""

from __future__ import annotations

from pathlib import Path

import redis
from flask import Flask
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_sqlalchemy import SQLAlchemy
from redis.exceptions import RedisError
from sqlalchemy import MetaData, event

# Constraint names are stable across backends and match the migrations
NAMING_CONVENTION = {
    "pk": "pk_%(table_name)s",
    "fk": "fk_%(table_name)s_%(column_0_name)s_%(referred_table_name)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ix": "ix_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
}

MIGRATIONS_DIR = str(Path(__file__).resolve().parents[2] / "migrations")

db = SQLAlchemy(
    metadata=MetaData(naming_convention=NAMING_CONVENTION),
    session_options={"autoflush": False},
)
migrate = Migrate(render_as_batch=True)
jwt = JWTManager()
redis_client: redis.Redis | None = None


def _sqlite_foreign_keys(dbapi_connection, _record) -> None:
    # SQLite ignores ON DELETE rules unless this is set on every connection
    cursor = dbapi_connection.cursor()
    try:
        cursor.execute("PRAGMA foreign_keys=ON")
    finally:
        cursor.close()


def _connect_redis(app: Flask) -> redis.Redis | None:
    if app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy") != "redis":
        return None
    url = app.config.get("REDIS_URL")
    if not url:
        raise RuntimeError("REDIS_URL is required when REFRESH_TOKEN_BACKEND is 'redis'")
    client = redis.Redis.from_url(url)
    try:
        client.ping()
    except RedisError as exc:
        raise RuntimeError(f"Failed to connect to Redis at {url!r}") from exc
    return client


def init_app(app: Flask) -> None:
    """
    Bind the database, migrations and JWT manager to ``app``.

    Redis is connected (and pinged) only for the ``redis`` refresh-token
    backend, so the default SQL setup never needs a Redis server.
    """
    global redis_client

    db.init_app(app)
    with app.app_context():
        if db.engine.dialect.name == "sqlite":
            event.listen(db.engine, "connect", _sqlite_foreign_keys)

    # Registers every table on db.metadata before Alembic or create_all look
    import memberhub.models  # noqa: F401

    migrate.init_app(app, db, directory=MIGRATIONS_DIR)
    jwt.init_app(app)

    redis_client = _connect_redis(app)
    if redis_client is None:
        app.extensions.pop("redis_client", None)
    else:
        app.extensions["redis_client"] = redis_client


def get_redis() -> redis.Redis:
    if redis_client is None:
        raise RuntimeError("Redis client is not initialized. Call init_app() first.")
    return redis_client
