"""JSON logging to stdout, correlated by request id."""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any
from uuid import uuid4

from flask import Flask, Response, g, has_request_context, request

REQUEST_ID_HEADER = "X-Request-ID"
CORRELATION_HEADERS = (REQUEST_ID_HEADER, "X-Correlation-ID")

# ``extra=`` keys copied into the payload; anything else stays out of the log line
EXTRA_KEYS = ("event", "user_id", "endpoint", "elapsed_ms", "status_code")


class JSONFormatter(logging.Formatter):
    """One JSON object per record, stamped with the record's own creation time."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, tz=timezone.utc)
        payload: dict[str, Any] = {
            "time": created.isoformat(timespec="milliseconds"),
            "level": record.levelname,
            "name": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", None),
        }
        payload.update({key: getattr(record, key) for key in EXTRA_KEYS if hasattr(record, key)})
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


class RequestIdFilter(logging.Filter):
    """Attach ``request_id`` (``None`` outside a request) to every record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = ensure_request_id() if has_request_context() else None
        return True


def ensure_request_id() -> str:
    """
    Return the id correlating logs and error bodies of the current request.

    The first call in a request adopts an incoming correlation header or
    mints a UUID4 and caches it on ``g``. Outside a request every call
    returns a fresh UUID4.
    """
    if not has_request_context():
        return str(uuid4())
    cached = g.get("request_id")
    if cached:
        return cached
    incoming = next(
        (request.headers[h] for h in CORRELATION_HEADERS if request.headers.get(h)), None
    )
    g.request_id = incoming or str(uuid4())
    return g.request_id


def _resolve_level(level: str | int) -> int | str:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(level.upper())
    return resolved if isinstance(resolved, int) else level.upper()


def configure_logging(level: str | int = "INFO") -> None:
    """
    Route the root logger to a JSON stdout handler.

    Safe to call once per ``create_app``: the handler installed by a previous
    call is replaced, handlers owned by others are left alone.
    """
    root = logging.getLogger()
    for existing in [h for h in root.handlers if getattr(h, "_memberhub", False)]:
        root.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(JSONFormatter())
    handler.addFilter(RequestIdFilter())
    handler._memberhub = True  # type: ignore[attr-defined]
    root.addHandler(handler)
    root.setLevel(_resolve_level(level))


def init_app(app: Flask) -> None:
    """Seed the request id early and echo it back in ``X-Request-ID``."""
    app.logger.addFilter(RequestIdFilter())

    @app.before_request
    def _seed_request_id() -> None:
        ensure_request_id()

    @app.after_request
    def _echo_request_id(response: Response) -> Response:
        response.headers.setdefault(REQUEST_ID_HEADER, ensure_request_id())
        return response


__all__ = [
    "CORRELATION_HEADERS",
    "JSONFormatter",
    "REQUEST_ID_HEADER",
    "RequestIdFilter",
    "configure_logging",
    "ensure_request_id",
    "init_app",
]
