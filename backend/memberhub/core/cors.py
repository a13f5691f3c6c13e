from __future__ import annotations

from flask import Flask
from flask_cors import CORS


def allowed_origins(raw: str | None) -> list[str] | str:
    """Parse ``CORS_ORIGINS``; blank or ``*`` means any origin (returned as ``"*"``)."""
    origins = [origin.strip() for origin in (raw or "").split(",") if origin.strip()]
    return "*" if origins in ([], ["*"]) else origins


def init_app(app: Flask) -> None:
    """
    Apply CORS to ``/api/*``.

    Credentials are only allowed with an explicit origin list; browsers
    refuse them alongside a wildcard anyway.
    """
    origins = allowed_origins(app.config.get("CORS_ORIGINS"))
    CORS(
        app,
        resources={r"/api/*": {"origins": origins}},
        supports_credentials=origins != "*",
        expose_headers=["X-Request-ID"],
        max_age=app.config.get("CORS_MAX_AGE", 600),
    )
