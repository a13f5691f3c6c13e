# memberhub/infra/sqlalchemy/refresh_token_store.py
from __future__ import annotations

from datetime import datetime

from memberhub.models.base import as_utc
from memberhub.models.refresh_token import RefreshToken
from memberhub.services._shared.ports import (
    RefreshTokenRecord,
    RefreshTokenStore,
    generate_token,
)
from memberhub.uow.sqlalchemy_uow import SQLAlchemyUnitOfWork


def _to_record(row: RefreshToken) -> RefreshTokenRecord:
    return RefreshTokenRecord(
        token=row.token,
        user_id=row.user_id,
        expires_at=as_utc(row.expires_at),
        is_revoked=bool(row.is_revoked),
    )


class SQLAlchemyRefreshTokenStore(RefreshTokenStore):
    """
    Relational refresh token store (default backend).

    Each call runs in its own read-write Unit of Work and commits before
    returning. ``revoke_if_active`` is a single conditional ``UPDATE``, so
    among concurrent callers exactly one observes an affected row.
    """

    def new_token(self) -> str:
        return generate_token()

    def insert(self, *, token: str, user_id: int, expires_at: datetime) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            uow.refresh_tokens.add(
                RefreshToken(token=token, user_id=user_id, expires_at=expires_at, is_revoked=False)
            )

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        with SQLAlchemyUnitOfWork() as uow:
            row = uow.refresh_tokens.get_by_token(token)
            return _to_record(row) if row is not None else None

    def set_revoked(self, token: str) -> None:
        with SQLAlchemyUnitOfWork() as uow:
            uow.refresh_tokens.revoke(token)

    def revoke_if_active(self, token: str) -> bool:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.revoke(token, only_active=True) == 1

    def delete_expired_or_revoked(self, user_id: int, now: datetime) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.delete_expired_or_revoked(user_id, now)

    def set_all_revoked_for_user(self, user_id: int) -> int:
        with SQLAlchemyUnitOfWork() as uow:
            return uow.refresh_tokens.revoke_all_for_user(user_id)

    def list_for_user(self, user_id: int) -> list[RefreshTokenRecord]:
        with SQLAlchemyUnitOfWork() as uow:
            return [_to_record(row) for row in uow.refresh_tokens.list_for_user(user_id)]
