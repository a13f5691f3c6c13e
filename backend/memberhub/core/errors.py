"""
Problem responses
=================

Every error leaving the API is an RFC 7807 ``application/problem+json``
document::

    {"type": "about:blank", "title": "Not Found", "status": 404,
     "detail": "...", "instance": "/api/v1/zones/9", "code": "not_found",
     "request_id": "..."}

``details`` is added only when there is structured, client-safe context
(e.g. marshmallow field errors). 4xx are logged at WARNING, 5xx at ERROR
with the traceback.
"""

from __future__ import annotations

import logging
from http import HTTPStatus
from typing import Any

from flask import Flask, Response, has_request_context, jsonify, request
from marshmallow import ValidationError as MarshmallowValidationError
from sqlalchemy.exc import IntegrityError, OperationalError
from werkzeug.exceptions import HTTPException

from memberhub.core.logger import ensure_request_id

log = logging.getLogger(__name__)

PROBLEM_MIMETYPE = "application/problem+json"


def status_code_name(status: int) -> str:
    """Stable snake_case code for an HTTP status (``405`` -> ``method_not_allowed``)."""
    try:
        return HTTPStatus(status).name.lower()
    except ValueError:
        return "error"


def problem_body(
    status: int, code: str, detail: str, details: dict[str, Any] | None = None
) -> dict[str, Any]:
    try:
        title = HTTPStatus(status).phrase
    except ValueError:
        title = "Error"
    body: dict[str, Any] = {
        "type": "about:blank",
        "title": title,
        "status": status,
        "detail": detail,
        "instance": request.path if has_request_context() else None,
        "code": code,
    }
    if details:
        body["details"] = details
    body["request_id"] = ensure_request_id()
    return body


def render_problem(
    status: int,
    code: str,
    detail: str,
    *,
    details: dict[str, Any] | None = None,
    exc_info: BaseException | None = None,
) -> tuple[Response, int]:
    """Log and serialize one problem; the single exit point for error handlers."""
    body = problem_body(status, code, detail, details)
    if status >= 500:
        log.error(
            "request failed: code=%s status=%s request_id=%s",
            code,
            status,
            body["request_id"],
            exc_info=exc_info,
        )
    else:
        log.warning(
            "request rejected: code=%s status=%s detail=%s request_id=%s",
            code,
            status,
            detail,
            body["request_id"],
        )
    response = jsonify(body)
    response.mimetype = PROBLEM_MIMETYPE
    return response, status


class APIError(Exception):
    """
    Error carrying its own HTTP rendering.

    Subclasses fix ``status_code``/``code``; both can still be overridden per
    instance for one-off statuses.
    """

    status_code: int = HTTPStatus.BAD_REQUEST
    code: str = "bad_request"
    default_message: str = "Bad request"

    def __init__(
        self,
        message: str | None = None,
        *,
        status_code: int | None = None,
        code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if status_code is not None:
            self.status_code = int(status_code)
        if code is not None:
            self.code = code
        self.details = details or {}

    def render(self) -> tuple[Response, int]:
        return render_problem(
            int(self.status_code), self.code, self.message, details=self.details or None
        )


class NotFound(APIError):
    status_code = HTTPStatus.NOT_FOUND
    code = "not_found"
    default_message = "Resource not found"


class Conflict(APIError):
    status_code = HTTPStatus.CONFLICT
    code = "conflict"
    default_message = "Conflict"


class Unauthorized(APIError):
    status_code = HTTPStatus.UNAUTHORIZED
    code = "unauthorized"
    default_message = "Unauthorized"


class Forbidden(APIError):
    status_code = HTTPStatus.FORBIDDEN
    code = "forbidden"
    default_message = "Forbidden"


def _register_jwt_handlers() -> None:
    """Missing, malformed and expired bearers all read as one 401 to clients."""
    from memberhub.core.extensions import jwt

    def _reject(reason: str) -> tuple[Response, int]:
        log.info("bearer rejected: %s", reason)
        return render_problem(HTTPStatus.UNAUTHORIZED, "unauthorized", "Authentication required")

    jwt.unauthorized_loader(_reject)
    jwt.invalid_token_loader(_reject)
    jwt.expired_token_loader(lambda _header, _payload: _reject("token expired"))


def init_app(app: Flask) -> None:
    """Install the problem handlers on ``app``."""
    from memberhub.services._shared.base import BaseService
    from memberhub.services._shared.errors import ServiceError

    _register_jwt_handlers()

    @app.errorhandler(APIError)
    def handle_api_error(err: APIError):
        return err.render()

    @app.errorhandler(ServiceError)
    def handle_service_error(err: ServiceError):
        # The domain reason is logged; clients get the translated message only.
        log.warning("service error: kind=%s reason=%s", type(err).__name__, err)
        translated = BaseService().translate_exceptions(err)
        if isinstance(translated, APIError):
            return translated.render()
        return handle_unexpected_error(translated)

    @app.errorhandler(HTTPException)
    def handle_http_exception(err: HTTPException):
        status = err.code or HTTPStatus.INTERNAL_SERVER_ERROR
        if status == HTTPStatus.NOT_FOUND:
            detail = f"Route '{request.path}' not found"
        else:
            detail = (err.description or HTTPStatus(status).phrase).strip()
        return render_problem(status, status_code_name(status), detail)

    @app.errorhandler(MarshmallowValidationError)
    def handle_validation_error(err: MarshmallowValidationError):
        return render_problem(
            HTTPStatus.UNPROCESSABLE_ENTITY,
            "validation_error",
            "Validation failed",
            details={"errors": err.messages},
        )

    @app.errorhandler(IntegrityError)
    def handle_integrity_error(err: IntegrityError):
        # Constraint names and SQL stay in the logs
        log.warning("integrity error: %s", err.orig)
        return render_problem(HTTPStatus.CONFLICT, "conflict", "Resource conflict")

    @app.errorhandler(OperationalError)
    def handle_operational_error(err: OperationalError):
        return render_problem(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "transient_error",
            "Temporary persistence failure",
            exc_info=err,
        )

    @app.errorhandler(Exception)
    def handle_unexpected_error(err: Exception):
        return render_problem(
            HTTPStatus.INTERNAL_SERVER_ERROR,
            "internal_server_error",
            "Unexpected error",
            exc_info=err,
        )
