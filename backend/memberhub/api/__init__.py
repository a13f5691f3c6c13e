"""HTTP surface: versioned blueprint groups mounted under ``API_BASE_PREFIX``."""

from __future__ import annotations

from collections.abc import Iterable

from flask import Blueprint, Flask


def join_prefix(*segments: str) -> str:
    """``join_prefix("/api/", "v1", "")`` -> ``"/api/v1"``."""
    return "/" + "/".join(s.strip("/") for s in segments if s.strip("/"))


def register_blueprint_group(
    app: Flask, *, base_prefix: str, entries: Iterable[tuple[Blueprint, str]]
) -> None:
    """Mount each ``(blueprint, relative_prefix)`` below ``base_prefix``."""
    for blueprint, relative in entries:
        app.register_blueprint(blueprint, url_prefix=join_prefix(base_prefix, relative))


def init_app(app: Flask) -> None:
    from memberhub.api import v1

    base = app.config.get("API_BASE_PREFIX", "/api")
    register_blueprint_group(
        app, base_prefix=join_prefix(base, v1.API_VERSION), entries=v1.REGISTRY
    )


__all__ = ["init_app", "join_prefix", "register_blueprint_group"]
