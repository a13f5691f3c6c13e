"""Persisted refresh token rows backing session renewal."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from memberhub.core.extensions import db

from .base import PKMixin, ReprMixin


class RefreshToken(PKMixin, ReprMixin, db.Model):
    """
    Opaque long-lived credential exchanged for new access tokens.

    A row is usable iff ``is_revoked`` is false and ``expires_at`` lies in the
    future. ``is_revoked`` only ever moves from false to true; rows that are
    expired or revoked are deleted lazily when the owner is issued a new one.
    """

    __tablename__ = "refresh_tokens"

    token: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    is_revoked: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now()
    )

    __table_args__ = (
        UniqueConstraint("token", name="uq_refresh_tokens_token"),
        Index("ix_refresh_tokens_user_id", "user_id"),
    )
