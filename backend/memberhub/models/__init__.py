from memberhub.models.member import (
    ConversionStatus,
    FollowUp,
    FollowUpStatus,
    FollowUpType,
    Member,
    MemberStatus,
)
from memberhub.models.organization import Cell, Department, Zone
from memberhub.models.refresh_token import RefreshToken
from memberhub.models.user import User, UserRole

__all__ = [
    "Cell",
    "ConversionStatus",
    "Department",
    "FollowUp",
    "FollowUpStatus",
    "FollowUpType",
    "Member",
    "MemberStatus",
    "RefreshToken",
    "User",
    "UserRole",
    "Zone",
]
