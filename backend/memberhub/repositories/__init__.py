"""Persistence access for every domain model; one repository per aggregate."""

from __future__ import annotations

from memberhub.repositories.base import BaseRepository, Page, Pagination
from memberhub.repositories.member import FollowUpRepository, MemberRepository
from memberhub.repositories.organization import (
    CellRepository,
    DepartmentRepository,
    ZoneRepository,
)
from memberhub.repositories.refresh_token import RefreshTokenRepository
from memberhub.repositories.user import UserRepository

__all__ = [
    "BaseRepository",
    "Page",
    "Pagination",
    "CellRepository",
    "DepartmentRepository",
    "FollowUpRepository",
    "MemberRepository",
    "RefreshTokenRepository",
    "UserRepository",
    "ZoneRepository",
]
