# memberhub/services/_shared/base.py
from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass

from memberhub.core import errors as api_errors
from memberhub.repositories.base import Pagination
from memberhub.services._shared.errors import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    InvalidCredentialsError,
    NotFoundError,
    ServiceError,
    TokenError,
)
from memberhub.uow.sqlalchemy_uow import (
    SQLAlchemyReadOnlyUnitOfWork,
    SQLAlchemyUnitOfWork,
)

GENERIC_TOKEN_MESSAGE = "Invalid or expired refresh token"
MAX_PAGE_SIZE = 100

# Most specific first: TokenError and InvalidCredentialsError are AuthenticationErrors.
_TRANSLATIONS: tuple[tuple[type[ServiceError], Callable[[ServiceError], Exception]], ...] = (
    (NotFoundError, lambda e: api_errors.NotFound(str(e))),
    (ConflictError, lambda e: api_errors.Conflict(str(e))),
    (AuthorizationError, lambda e: api_errors.Forbidden(str(e))),
    (TokenError, lambda e: api_errors.Unauthorized(GENERIC_TOKEN_MESSAGE)),
    (InvalidCredentialsError, lambda e: api_errors.Unauthorized("Invalid credentials")),
    (AuthenticationError, lambda e: api_errors.Unauthorized()),
    (ServiceError, lambda e: api_errors.APIError(str(e))),
)


@dataclass(slots=True)
class ServiceContext:
    """
    Who is acting, for audit logs.

    :param actor_id: Id of the authenticated staff user, if any.
    :param request_id: Correlation id of the HTTP request.
    """

    actor_id: int | None = None
    request_id: str | None = None


class BaseService:
    """
    Shared plumbing for application services.

    Services open a Unit of Work per use-case (``rw_uow`` for commands,
    ``ro_uow`` for queries) and raise domain errors from
    :mod:`memberhub.services._shared.errors`; the HTTP layer turns those into
    problem responses through :meth:`translate_exceptions`.
    """

    read_isolation: str | None = "READ COMMITTED"

    def __init__(self, *, ctx: ServiceContext | None = None) -> None:
        self.ctx = ctx or ServiceContext()

    def rw_uow(self) -> SQLAlchemyUnitOfWork:
        return SQLAlchemyUnitOfWork()

    def ro_uow(self) -> SQLAlchemyReadOnlyUnitOfWork:
        return SQLAlchemyReadOnlyUnitOfWork(isolation_level=self.read_isolation)

    @staticmethod
    def ensure_pagination(
        *, page: int, limit: int, sort: Iterable[str] | None = None
    ) -> Pagination:
        """Clamp ``page`` to >= 1 and ``limit`` to ``1..MAX_PAGE_SIZE``."""
        return Pagination(
            page=max(1, int(page)),
            limit=min(max(1, int(limit)), MAX_PAGE_SIZE),
            sort=list(sort or []),
        )

    def translate_exceptions(self, exc: Exception) -> Exception:
        """
        Map a domain error to the :class:`~memberhub.core.errors.APIError` to render.

        Token failures of every kind share one 401 message so clients cannot
        tell an unknown token from a revoked one. Exceptions that are not
        service errors are returned untouched.
        """
        for kind, build in _TRANSLATIONS:
            if isinstance(exc, kind):
                return build(exc)
        return exc
