"""
Settings
========

Flask config classes read from the process environment (and a ``.env`` file
in development through python-dotenv). ``APP_ENV`` picks the class:
``development`` (default), ``testing`` or ``production``.

Authentication values that services need are frozen into
:class:`AuthSettings` once at startup, so services never read
``current_app.config`` directly.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Final

from dotenv import load_dotenv

load_dotenv()

APP_ENV_VAR: Final[str] = "APP_ENV"
TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "y", "on"})

DEFAULT_ACCESS_EXPIRATION: Final[str] = "15m"
DEFAULT_REFRESH_EXPIRATION: Final[str] = "7d"
DEFAULT_FRONTEND_URL: Final[str] = "http://localhost:5173"

_DURATION = re.compile(r"^\s*(?P<count>[^dhm]*)(?P<unit>[dhm])\s*$")
_UNITS: Final[dict[str, str]] = {"d": "days", "h": "hours", "m": "minutes"}
# What a known unit with a bad count resolves to
_UNIT_FALLBACKS: Final[dict[str, timedelta]] = {
    "d": timedelta(days=7),
    "h": timedelta(hours=168),
    "m": timedelta(minutes=15),
}


class ConfigurationError(RuntimeError):
    """Mandatory setting missing or invalid; the app refuses to start."""


def env_bool(name: str, default: bool = False) -> bool:
    """Read ``name`` as a flag; unset means ``default``."""
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in TRUTHY


def parse_duration(
    raw: str | None,
    *,
    fallback: timedelta = timedelta(days=7),
    units: str = "dhm",
) -> timedelta:
    """
    Turn ``"7d"``, ``"12h"`` or ``"15m"`` into a :class:`~datetime.timedelta`.

    :param raw: Count followed by a unit suffix.
    :param fallback: Used when ``raw`` is empty, has no suffix, or its suffix
        is not listed in ``units``.
    :param units: Suffixes to accept. Refresh lifetimes pass ``"dh"``.
    :returns: The parsed duration. A known suffix with a count that is not a
        positive integer yields that unit's default (7 days, 168 hours or
        15 minutes) rather than ``fallback``.
    """
    match = _DURATION.match(raw or "")
    if match is None or match["unit"] not in units:
        return fallback
    unit = match["unit"]
    try:
        count = int(match["count"])
    except ValueError:
        count = 0
    if count <= 0:
        return _UNIT_FALLBACKS[unit]
    return timedelta(**{_UNITS[unit]: count})


@dataclass(frozen=True, slots=True)
class AuthSettings:
    """
    Token and password-reset settings, fixed at startup.

    :param jwt_secret: HMAC secret for access tokens.
    :param access_expires: Access token lifetime.
    :param refresh_expiration: Refresh lifetime as configured, e.g. ``"7d"``.
    :param password_reset_ttl: How long a reset link stays valid.
    :param welcome_link_ttl: How long the set-your-password link in the
        welcome mail stays valid.
    :param frontend_url: Origin used when building password-setup links.
    """

    jwt_secret: str
    access_expires: timedelta
    refresh_expiration: str = DEFAULT_REFRESH_EXPIRATION
    password_reset_ttl: timedelta = timedelta(hours=1)
    welcome_link_ttl: timedelta = timedelta(days=7)
    frontend_url: str = DEFAULT_FRONTEND_URL

    @property
    def refresh_expires(self) -> timedelta:
        # minutes are not a valid refresh unit
        return parse_duration(self.refresh_expiration, units="dh")

    @classmethod
    def from_mapping(cls, config: Mapping[str, Any]) -> AuthSettings:
        """
        :raises ConfigurationError: ``JWT_SECRET_KEY`` is unset or empty.
        """
        secret = config.get("JWT_SECRET_KEY")
        if not secret:
            raise ConfigurationError("JWT_SECRET_KEY is not defined")
        access = config.get("JWT_ACCESS_EXPIRATION", DEFAULT_ACCESS_EXPIRATION)
        reset_seconds = int(config.get("PASSWORD_RESET_TTL_SECONDS", 3600))
        welcome_seconds = int(config.get("WELCOME_LINK_TTL_SECONDS", 7 * 24 * 3600))
        return cls(
            jwt_secret=str(secret),
            access_expires=parse_duration(access, fallback=timedelta(minutes=15)),
            refresh_expiration=str(
                config.get("JWT_REFRESH_EXPIRATION") or DEFAULT_REFRESH_EXPIRATION
            ),
            password_reset_ttl=timedelta(seconds=reset_seconds),
            welcome_link_ttl=timedelta(seconds=welcome_seconds),
            frontend_url=str(config.get("FRONTEND_URL", DEFAULT_FRONTEND_URL)).rstrip("/"),
        )


class BaseConfig:
    """
    Values every environment shares.

    ``JWT_SECRET_KEY`` has no default here; startup fails without it.
    ``REFRESH_TOKEN_BACKEND`` is ``"sqlalchemy"`` or ``"redis"`` (the latter
    needs ``REDIS_URL``). ``CORS_ORIGINS`` is a comma-separated list.
    """

    API_BASE_PREFIX = "/api"
    DEBUG = False
    TESTING = False
    JSON_SORT_KEYS = False
    PROPAGATE_EXCEPTIONS = False

    SECRET_KEY = os.getenv("SECRET_KEY", "CHANGE_ME")
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY")
    JWT_ACCESS_EXPIRATION = os.getenv("JWT_EXPIRATION", DEFAULT_ACCESS_EXPIRATION)
    JWT_REFRESH_EXPIRATION = os.getenv("JWT_REFRESH_EXPIRATION", DEFAULT_REFRESH_EXPIRATION)
    PASSWORD_RESET_TTL_SECONDS = int(os.getenv("PASSWORD_RESET_TTL_SECONDS", "3600"))
    WELCOME_LINK_TTL_SECONDS = int(os.getenv("WELCOME_LINK_TTL_SECONDS", "604800"))

    REFRESH_TOKEN_BACKEND = os.getenv("REFRESH_TOKEN_BACKEND", "sqlalchemy")
    REDIS_URL = os.getenv("REDIS_URL")

    SQLALCHEMY_DATABASE_URI = os.getenv("DATABASE_URL", "sqlite:///./memberhub.db")
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    SQLALCHEMY_ECHO = env_bool("SQLALCHEMY_ECHO")

    FRONTEND_URL = os.getenv("FRONTEND_URL", DEFAULT_FRONTEND_URL)
    MAIL_FROM = os.getenv("MAIL_FROM", "noreply@memberhub.local")

    SEED_ADMIN_EMAIL = os.getenv("SEED_ADMIN_EMAIL", "admin@memberhub.local")
    SEED_ADMIN_PASSWORD = os.getenv("SEED_ADMIN_PASSWORD")

    LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
    CORS_ORIGINS = os.getenv("CORS_ORIGINS", DEFAULT_FRONTEND_URL)
    CORS_MAX_AGE = 600


class DevelopmentConfig(BaseConfig):
    """Debug on, and a throwaway JWT secret so ``flask run`` works without ``.env``."""

    DEBUG = env_bool("FLASK_DEBUG", True)
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "dev-only-jwt-secret")


class TestingConfig(BaseConfig):
    TESTING = True
    JWT_SECRET_KEY = os.getenv("JWT_SECRET_KEY", "testing-jwt-secret-with-enough-entropy")
    SQLALCHEMY_DATABASE_URI = os.getenv("TEST_DATABASE_URL", "sqlite:///:memory:")
    REFRESH_TOKEN_BACKEND = "sqlalchemy"
    LOG_LEVEL = "WARNING"


class ProductionConfig(BaseConfig):
    """Secrets come from the environment only."""

    SQLALCHEMY_ECHO = False


ENVIRONMENTS: Mapping[str, type[BaseConfig]] = {
    "development": DevelopmentConfig,
    "testing": TestingConfig,
    "production": ProductionConfig,
}


def get_config() -> type[BaseConfig]:
    """Config class named by ``APP_ENV``; unknown or unset names get development."""
    name = os.getenv(APP_ENV_VAR, "development").strip().lower()
    return ENVIRONMENTS.get(name, DevelopmentConfig)
