"""Staff accounts."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import NoReturn

from sqlalchemy import Boolean, DateTime, Index, String, UniqueConstraint
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, validates
from werkzeug.security import check_password_hash, generate_password_hash

from memberhub.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, required_text


class UserRole(str, Enum):
    SUPER_ADMIN = "SUPER_ADMIN"
    ADMIN = "ADMIN"
    ZONAL_COORDINATOR = "ZONAL_COORDINATOR"
    CELL_LEADER = "CELL_LEADER"
    FOLLOW_UP_TEAM = "FOLLOW_UP_TEAM"


class User(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    A staff member who can sign in.

    ``email`` is stored trimmed and lower-cased. The plain password is never
    kept: assigning ``user.password`` stores a werkzeug hash in
    ``password_hash`` and reading it back raises. ``role`` is copied into
    access-token claims at login.

    ``must_change_password`` marks accounts created with a generated
    password until their owner sets one. ``reset_token`` and
    ``reset_token_expires_at`` hold a single outstanding reset link.
    """

    __tablename__ = "users"
    __table_args__ = (
        UniqueConstraint("email", name="uq_users_email"),
        UniqueConstraint("reset_token", name="uq_users_reset_token"),
        Index("ix_users_email", "email"),
    )

    email: Mapped[str] = mapped_column(String(254), nullable=False)
    password_hash: Mapped[str] = mapped_column(String(254), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    phone: Mapped[str | None] = mapped_column(String(32))
    role: Mapped[UserRole] = mapped_column(
        SAEnum(UserRole, name="enum_user_role", native_enum=True, create_constraint=True),
        nullable=False,
        default=UserRole.CELL_LEADER,
    )
    must_change_password: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=False, server_default="0"
    )
    reset_token: Mapped[str | None] = mapped_column(String(128))
    reset_token_expires_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True))

    @property
    def password(self) -> NoReturn:
        raise AttributeError("password is write-only; use verify_password()")

    @password.setter
    def password(self, raw: str) -> None:
        if not isinstance(raw, str) or not raw:
            raise ValueError("Password is required.")
        self.password_hash = generate_password_hash(raw)

    def verify_password(self, raw: str) -> bool:
        if not raw or not self.password_hash:
            return False
        return check_password_hash(self.password_hash, raw)

    @validates("email")
    def _clean_email(self, key: str, value: str) -> str:
        email = required_text(value, "Email").lower()
        local, _, domain = email.rpartition("@")
        # Schemas do the real validation; this only keeps junk out of the table
        if not local or "." not in domain:
            raise ValueError(f"Invalid email address: {email!r}")
        return email

    @validates("name")
    def _clean_name(self, key: str, value: str) -> str:
        return required_text(value)

    @validates("role")
    def _coerce_role(self, key: str, value: UserRole | str) -> UserRole:
        return UserRole(value)
