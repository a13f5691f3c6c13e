"""Session plumbing shared by every model factory."""

from __future__ import annotations

import factory
from sqlalchemy.orm import scoped_session


class SQLAlchemySession:
    """Holder for the per-test session installed by ``conftest._factories_session``."""

    current: scoped_session | None = None

    @classmethod
    def set(cls, session: scoped_session) -> None:
        cls.current = session

    @classmethod
    def get(cls) -> scoped_session:
        if cls.current is None:
            raise RuntimeError("No test session bound; request the 'session' fixture first.")
        return cls.current


class BaseFactory(factory.alchemy.SQLAlchemyModelFactory):
    """Flush-only factory base; rows vanish with the test's outer rollback."""

    class Meta:
        abstract = True
        # resolved per instance so each test sees its own session
        sqlalchemy_session_factory = SQLAlchemySession.get
        sqlalchemy_session_persistence = "flush"
