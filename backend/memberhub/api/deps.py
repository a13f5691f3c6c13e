"""
View helpers: body and query parsing, auth guards and response shaping.

Guards raise instead of returning responses; the JWT loaders and the problem
handlers in :mod:`memberhub.core.errors` render the 401/403.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

from flask import Response, current_app, g, jsonify, request
from flask_jwt_extended import get_jwt, get_jwt_identity, verify_jwt_in_request

from memberhub.core.errors import Forbidden
from memberhub.models.user import UserRole
from memberhub.schemas.common import PaginationQuerySchema
from memberhub.services._shared.base import ServiceContext
from memberhub.services._shared.policies.roles import has_role, parse_role

View = TypeVar("View", bound=Callable[..., Any])

log = logging.getLogger("memberhub.api")


def parse_pagination(default_limit: int = 20, max_limit: int = 100) -> dict[str, Any]:
    """``{"page", "limit", "sort"}`` from the query string; bad values raise a 422."""
    schema = PaginationQuerySchema(default_limit=default_limit, max_limit=max_limit)
    return schema.load(request.args)


def json_body() -> dict[str, Any]:
    # A missing or unparsable body is validated as empty
    return request.get_json(silent=True) or {}


def json_response(payload: Any, *, status: int = 200) -> Response:
    response = jsonify(payload)
    response.status_code = status
    return response


def current_user_id() -> int:
    return int(get_jwt_identity())


def service_context() -> ServiceContext:
    subject = get_jwt_identity()
    return ServiceContext(
        actor_id=None if subject is None else int(subject),
        request_id=g.get("request_id"),
    )


def auth_service():
    """The :class:`~memberhub.services.auth.service.AuthService` built by the factory."""
    return current_app.extensions["auth_service"]


def require_auth(view: View) -> View:
    @wraps(view)
    def guarded(*args: Any, **kwargs: Any):
        verify_jwt_in_request()
        return view(*args, **kwargs)

    return guarded  # type: ignore[return-value]


def require_roles(*roles: UserRole) -> Callable[[View], View]:
    """
    Authenticate, then demand one of ``roles`` in the token's ``role`` claim.

    A role string this build does not know counts as no role at all.
    """
    allowed = frozenset(roles)

    def decorate(view: View) -> View:
        @wraps(view)
        def guarded(*args: Any, **kwargs: Any):
            verify_jwt_in_request()
            if not has_role(parse_role(get_jwt().get("role")), allowed):
                raise Forbidden("Insufficient role")
            return view(*args, **kwargs)

        return guarded  # type: ignore[return-value]

    return decorate


def timing(view: View) -> View:
    """Log the handler's wall time at DEBUG as ``elapsed_ms``."""

    @wraps(view)
    def timed(*args: Any, **kwargs: Any):
        started = time.perf_counter()
        try:
            return view(*args, **kwargs)
        finally:
            log.debug(
                "handler finished",
                extra={
                    "endpoint": request.endpoint,
                    "elapsed_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            )

    return timed  # type: ignore[return-value]
