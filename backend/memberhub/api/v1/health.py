"""Liveness check that also pings the database."""

from __future__ import annotations

import logging

from flask import Blueprint, current_app
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

from memberhub.api.deps import json_response, timing
from memberhub.core.extensions import db

bp = Blueprint("health", __name__)

log = logging.getLogger(__name__)


def _database_reachable() -> bool:
    try:
        db.session.execute(text("SELECT 1"))
    except SQLAlchemyError:
        log.exception("health check could not reach the database")
        db.session.rollback()
        return False
    return True


@bp.get("/health")
@timing
def healthcheck():
    """Always 200; ``status`` is ``degraded`` when the database is down."""
    db_ok = _database_reachable()
    return json_response(
        {
            "status": "ok" if db_ok else "degraded",
            "db": "ok" if db_ok else "fail",
            "version": current_app.config.get("APP_VERSION", "dev"),
        }
    )
