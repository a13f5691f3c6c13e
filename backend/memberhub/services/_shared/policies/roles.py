"""Role policies: which roles may act on which resource."""

from __future__ import annotations

from collections.abc import Iterable

from memberhub.models.user import UserRole

# Role sets per resource action
ADMINS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN})
SUPER_ADMIN_ONLY = frozenset({UserRole.SUPER_ADMIN})
ZONE_EDITORS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.ZONAL_COORDINATOR})
FOLLOW_UP_EDITORS = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.FOLLOW_UP_TEAM})


def parse_role(raw: object) -> UserRole | None:
    """Return the :class:`UserRole` named by ``raw`` or ``None`` when unknown."""
    if isinstance(raw, UserRole):
        return raw
    try:
        return UserRole(str(raw))
    except ValueError:
        return None


def has_role(role: UserRole | None, allowed: Iterable[UserRole]) -> bool:
    """Return True if ``role`` is one of ``allowed``; unknown roles never match."""
    return role is not None and role in frozenset(allowed)
