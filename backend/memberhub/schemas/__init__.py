"""Convenience exports for application schemas."""

from __future__ import annotations

from .auth import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    ResetPasswordSchema,
    TokenPairSchema,
    UserSchema,
)
from .common import MetaSchema, PaginationQuerySchema, build_meta
from .member import (
    FollowUpCreateSchema,
    FollowUpFilterSchema,
    FollowUpSchema,
    FollowUpUpdateSchema,
    MarkAttendanceSchema,
    MemberCreateSchema,
    MemberFilterSchema,
    MemberSchema,
    MemberSearchQuerySchema,
    MemberUpdateSchema,
)
from .organization import (
    CellCreateSchema,
    CellFilterSchema,
    CellSchema,
    DepartmentCreateSchema,
    DepartmentSchema,
    ZoneCreateSchema,
    ZoneSchema,
)
from .user import UserFilterSchema, UserUpdateSchema

__all__ = [
    "ChangePasswordSchema",
    "ForgotPasswordSchema",
    "LoginResponseSchema",
    "LoginSchema",
    "RefreshTokenSchema",
    "RegisterSchema",
    "ResetPasswordSchema",
    "TokenPairSchema",
    "UserSchema",
    "UserFilterSchema",
    "UserUpdateSchema",
    "MetaSchema",
    "PaginationQuerySchema",
    "build_meta",
    "ZoneCreateSchema",
    "ZoneSchema",
    "CellCreateSchema",
    "CellFilterSchema",
    "CellSchema",
    "DepartmentCreateSchema",
    "DepartmentSchema",
    "MarkAttendanceSchema",
    "MemberCreateSchema",
    "MemberFilterSchema",
    "MemberSchema",
    "MemberSearchQuerySchema",
    "MemberUpdateSchema",
    "FollowUpCreateSchema",
    "FollowUpFilterSchema",
    "FollowUpSchema",
    "FollowUpUpdateSchema",
]
