# memberhub/services/users/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from memberhub.models.user import UserRole


@dataclass(frozen=True, slots=True)
class UserListIn:
    page: int = 1
    limit: int = 20
    sort: list[str] = field(default_factory=list)
    role: UserRole | None = None


@dataclass(frozen=True, slots=True)
class UserUpdateIn:
    """
    Administrative update.

    :param changes: Profile fields (``name``, ``email``, ``phone``).
    :param role: Optional new role.
    """

    user_id: int
    changes: dict[str, Any] = field(default_factory=dict)
    role: UserRole | None = None
