"""
Units of Work over the Flask-SQLAlchemy scoped session.

``SQLAlchemyUnitOfWork`` wraps one write use-case: commit on a clean exit,
roll back on any error. ``SQLAlchemyReadOnlyUnitOfWork`` wraps queries and
refuses to write at two levels, ORM flushes and raw SQL statements.
"""

from __future__ import annotations

import logging
from contextlib import suppress
from typing import Any

from sqlalchemy import event, text
from sqlalchemy.engine import Connection
from sqlalchemy.exc import InvalidRequestError, SQLAlchemyError
from sqlalchemy.orm import Session, SessionTransaction, scoped_session

from memberhub.core.extensions import db
from memberhub.repositories import (
    CellRepository,
    DepartmentRepository,
    FollowUpRepository,
    MemberRepository,
    RefreshTokenRepository,
    UserRepository,
    ZoneRepository,
)
from memberhub.uow.base import UnitOfWork

log = logging.getLogger(__name__)

WRITE_VERBS = frozenset(
    {"insert", "update", "delete", "merge", "alter", "drop", "truncate", "create", "replace"}
)
# Dialects that understand SET TRANSACTION ... READ ONLY
READ_ONLY_DIALECTS = frozenset({"postgresql", "mysql", "mariadb"})


class SQLAlchemyRepositoryContainer:
    """Every repository of the membership domain, bound to one session."""

    def __init__(self, *, session: Session) -> None:
        self.session = session
        self.users = UserRepository(session=session)
        self.refresh_tokens = RefreshTokenRepository(session=session)
        self.zones = ZoneRepository(session=session)
        self.cells = CellRepository(session=session)
        self.departments = DepartmentRepository(session=session)
        self.members = MemberRepository(session=session)
        self.follow_ups = FollowUpRepository(session=session)


class SQLAlchemyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """Read-write scope; a failing commit is rolled back before it propagates."""

    def __init__(self) -> None:
        super().__init__(session=db.session)

    def __enter__(self) -> SQLAlchemyUnitOfWork:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc_type is not None:
            self.rollback()
            return
        try:
            self.commit()
        except BaseException:
            self.rollback()
            raise

    def commit(self) -> None:
        self.session.commit()

    def rollback(self) -> None:
        self.session.rollback()


class _WriteGuard:
    """Event listeners that turn any write inside a read-only scope into an error."""

    def __init__(self, session: Session | scoped_session, connection: Connection) -> None:
        # listen on the concrete Session; a scoped_session target would hook its class
        self.session = session() if isinstance(session, scoped_session) else session
        self.connection = connection

    def _before_flush(self, session: Session, flush_context: Any, instances: Any) -> None:
        if session.new or session.dirty or session.deleted:
            raise RuntimeError("Read-only unit of work: pending ORM changes cannot be flushed.")

    def _before_cursor_execute(self, conn, cursor, statement, parameters, context, executemany):
        verb = statement.lstrip().split(None, 1)[0].lower() if statement else ""
        if verb in WRITE_VERBS:
            raise RuntimeError(f"Read-only unit of work: {verb.upper()} statement blocked.")

    def install(self) -> None:
        event.listen(self.session, "before_flush", self._before_flush)
        event.listen(self.connection, "before_cursor_execute", self._before_cursor_execute)

    def remove(self) -> None:
        with suppress(InvalidRequestError):
            event.remove(self.session, "before_flush", self._before_flush)
        with suppress(InvalidRequestError):
            event.remove(self.connection, "before_cursor_execute", self._before_cursor_execute)


class SQLAlchemyReadOnlyUnitOfWork(SQLAlchemyRepositoryContainer, UnitOfWork):
    """
    Read-only scope.

    Opens its own transaction and rolls it back on exit. When the session is
    already inside a transaction (a request that wrote earlier, or the test
    fixtures) it reads within that transaction and leaves it untouched.

    :param isolation_level: Isolation for an owned transaction on dialects in
        :data:`READ_ONLY_DIALECTS`; ``None`` keeps the server default.
    :param enforce_db_readonly: Also ask the server for ``READ ONLY``.
    """

    def __init__(
        self,
        *,
        isolation_level: str | None = "READ COMMITTED",
        enforce_db_readonly: bool = True,
    ) -> None:
        super().__init__(session=db.session)
        self.isolation_level = isolation_level
        self.enforce_db_readonly = enforce_db_readonly
        self._owned: SessionTransaction | None = None
        self._guard: _WriteGuard | None = None

    def __enter__(self) -> SQLAlchemyReadOnlyUnitOfWork:
        try:
            self._owned = self.session.begin()
        except InvalidRequestError:
            self._owned = None

        connection = self.session.connection()
        self._guard = _WriteGuard(self.session, connection)
        self._guard.install()
        if self._owned is not None and connection.dialect.name in READ_ONLY_DIALECTS:
            self._apply_server_directives()
        return self

    def _apply_server_directives(self) -> None:
        try:
            if self.isolation_level:
                level = self.isolation_level.strip().upper()
                self.session.execute(text(f"SET TRANSACTION ISOLATION LEVEL {level}"))
            if self.enforce_db_readonly:
                self.session.execute(text("SET TRANSACTION READ ONLY"))
        except SQLAlchemyError as exc:
            log.warning("read-only directives rejected, relying on guards: %s", exc)

    def __exit__(self, exc_type, exc, tb) -> None:
        try:
            if self._owned is not None:
                self._owned.rollback()
        finally:
            self._owned = None
            if self._guard is not None:
                self._guard.remove()
                self._guard = None

    def commit(self) -> None:
        """
        :raises RuntimeError: always; read-only scopes never commit.
        """
        raise RuntimeError("Read-only unit of work cannot commit.")

    def rollback(self) -> None:
        self.session.rollback()
