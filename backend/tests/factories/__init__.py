"""Model factories for the membership domain."""

from tests.factories.base import BaseFactory, SQLAlchemySession
from tests.factories.member import FollowUpFactory, MemberFactory
from tests.factories.organization import CellFactory, DepartmentFactory, ZoneFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory

__all__ = [
    "BaseFactory",
    "CellFactory",
    "DEFAULT_PASSWORD",
    "DepartmentFactory",
    "FollowUpFactory",
    "MemberFactory",
    "SQLAlchemySession",
    "UserFactory",
    "ZoneFactory",
]
