"""
Service-layer exceptions.

Nothing here knows about HTTP. :meth:`BaseService.translate_exceptions`
decides the status each one becomes; a plain :class:`ServiceError` is a 400.

Refresh-token failures keep a precise ``reason`` for the logs while every
subclass of :class:`TokenError` reaches clients as the same 401.
"""

from __future__ import annotations


class ServiceError(Exception):
    pass


class NotFoundError(ServiceError):
    """``NotFoundError("Zone", 4)`` reads ``Zone not found: 4``."""

    def __init__(self, entity: str, key: str | int) -> None:
        self.entity = entity
        self.key = key
        super().__init__(f"{entity} not found: {key}")


class ConflictError(ServiceError):
    """Duplicate value or a delete blocked by dependent rows."""

    def __init__(self, entity: str, detail: str) -> None:
        self.entity = entity
        self.detail = detail
        super().__init__(f"Conflict on {entity}: {detail}")


class AuthorizationError(ServiceError):
    def __init__(self, message: str = "Insufficient permissions") -> None:
        super().__init__(message)


class AuthenticationError(ServiceError):
    """Identity could not be established."""


class InvalidCredentialsError(AuthenticationError):
    def __init__(self, message: str = "Invalid credentials") -> None:
        super().__init__(message)


class TokenError(AuthenticationError):
    reason = "refresh token rejected"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.reason)


class InvalidTokenError(TokenError):
    reason = "refresh token not found"


class RevokedTokenError(TokenError):
    reason = "refresh token revoked"


class ExpiredTokenError(TokenError):
    reason = "refresh token expired"


class TokenReusedError(TokenError):
    """Lost a rotation race: another request rotated the token first."""

    reason = "refresh token already rotated"


class UnknownTokenOwnerError(TokenError):
    reason = "refresh token owner no longer exists"
