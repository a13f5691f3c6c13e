"""Application factory wiring Flask extensions, services and blueprints."""

from __future__ import annotations

from flask import Flask

from memberhub.core.config import AuthSettings, BaseConfig, ConfigurationError, get_config
from memberhub.core.logger import configure_logging, init_app as init_logging
from memberhub.services._shared.ports import LoggingMailSender, RefreshTokenStore


def _build_refresh_token_store(app: Flask) -> RefreshTokenStore:
    backend = str(app.config.get("REFRESH_TOKEN_BACKEND", "sqlalchemy")).lower()
    if backend == "redis":
        from memberhub.core.extensions import get_redis
        from memberhub.infra.redis.refresh_token_store import RedisRefreshTokenStore

        return RedisRefreshTokenStore(r=get_redis())
    if backend == "sqlalchemy":
        from memberhub.infra.sqlalchemy.refresh_token_store import SQLAlchemyRefreshTokenStore

        return SQLAlchemyRefreshTokenStore()
    raise ConfigurationError(f"Unknown REFRESH_TOKEN_BACKEND: {backend!r}")


def _init_services(app: Flask, settings: AuthSettings) -> None:
    """Build the long-lived auth collaborators and park them in ``app.extensions``."""
    from memberhub.infra.jwt.flask_jwt_token_provider import JWTTokenProvider
    from memberhub.services.auth.refresh_tokens import RefreshTokenManager
    from memberhub.services.auth.service import AuthService

    manager = RefreshTokenManager(
        store=_build_refresh_token_store(app),
        token_provider=JWTTokenProvider(settings),
        settings=settings,
    )
    mail_sender = LoggingMailSender(str(app.config.get("MAIL_FROM", "noreply@memberhub.local")))
    app.extensions["auth_settings"] = settings
    app.extensions["mail_sender"] = mail_sender
    app.extensions["refresh_token_manager"] = manager
    app.extensions["auth_service"] = AuthService(
        refresh_tokens=manager, mail_sender=mail_sender, settings=settings
    )


def create_app(
    config: str | type[BaseConfig] | object | None = None,
    *,
    instance_relative_config: bool = True,
    instance_config_filename: str = "config.py",
) -> Flask:
    """Build and configure the Flask application.

    :raises ConfigurationError: When ``JWT_SECRET_KEY`` is missing or the
        refresh token backend is unknown.
    """

    app = Flask(__name__, instance_relative_config=instance_relative_config)

    app.config.from_object(get_config() if config is None else config)
    if instance_relative_config and instance_config_filename:
        app.config.from_pyfile(instance_config_filename, silent=True)

    configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    # Fail fast on missing secrets before anything binds to the app
    settings = AuthSettings.from_mapping(app.config)
    app.config["JWT_ACCESS_TOKEN_EXPIRES"] = settings.access_expires

    from memberhub.core import proxy

    proxy.init_app(app)

    from memberhub.core import extensions

    extensions.init_app(app)

    init_logging(app)

    from memberhub.core import cors

    cors.init_app(app)

    _init_services(app, settings)

    from memberhub.api import init_app as init_api

    init_api(app)

    from memberhub.core import errors

    errors.init_app(app)

    from memberhub import cli as app_cli

    app_cli.init_app(app)

    return app
