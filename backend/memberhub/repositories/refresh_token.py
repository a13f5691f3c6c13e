"""Refresh token repository: token-keyed reads and set-based writes."""

from __future__ import annotations

from datetime import datetime
from typing import cast

from sqlalchemy import delete, or_, select, update

from memberhub.models.refresh_token import RefreshToken
from memberhub.repositories.base import BaseRepository


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    """Persistence for :class:`RefreshToken` rows.

    Writes are issued as single ``UPDATE``/``DELETE`` statements so their
    row counts reflect what the database actually changed.
    """

    model = RefreshToken

    def get_by_token(self, token: str) -> RefreshToken | None:
        stmt = select(RefreshToken).where(RefreshToken.token == token)
        return cast(RefreshToken | None, self.session.execute(stmt).scalars().first())

    def list_for_user(self, user_id: int) -> list[RefreshToken]:
        stmt = (
            select(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .order_by(RefreshToken.id.asc())
        )
        return list(self.session.execute(stmt).scalars().all())

    def revoke(self, token: str, *, only_active: bool = False) -> int:
        """Set ``is_revoked``; with ``only_active`` the row must not be revoked yet."""
        stmt = update(RefreshToken).where(RefreshToken.token == token)
        if only_active:
            stmt = stmt.where(RefreshToken.is_revoked.is_(False))
        result = self.session.execute(
            stmt.values(is_revoked=True).execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    def revoke_all_for_user(self, user_id: int) -> int:
        result = self.session.execute(
            update(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .values(is_revoked=True)
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)

    def delete_expired_or_revoked(self, user_id: int, now: datetime) -> int:
        result = self.session.execute(
            delete(RefreshToken)
            .where(RefreshToken.user_id == user_id)
            .where(or_(RefreshToken.expires_at <= now, RefreshToken.is_revoked.is_(True)))
            .execution_options(synchronize_session=False)
        )
        return int(result.rowcount or 0)
