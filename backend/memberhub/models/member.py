"""Member and follow-up models."""

from __future__ import annotations

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from memberhub.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin

if TYPE_CHECKING:
    from .organization import Cell, Zone
    from .user import User


class MemberStatus(str, Enum):
    """Attendance-based membership stage."""

    FIRST_TIMER = "FIRST_TIMER"
    SECOND_TIMER = "SECOND_TIMER"
    FULL_MEMBER = "FULL_MEMBER"


class ConversionStatus(str, Enum):
    NOT_CONVERTED = "NOT_CONVERTED"
    CONVERTED = "CONVERTED"


class FollowUpType(str, Enum):
    CALL = "CALL"
    VISIT = "VISIT"
    MESSAGE = "MESSAGE"
    PRAYER = "PRAYER"


class FollowUpStatus(str, Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    CANCELLED = "CANCELLED"


class Member(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """
    Person attending the organization's meetings.

    ``email`` is optional but unique when present. ``status`` is derived at
    creation from ``first_visit`` and ``sunday_attendance`` (see
    :class:`memberhub.services.members.service.MemberService`).
    """

    __tablename__ = "members"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    email: Mapped[str | None] = mapped_column(String(254), nullable=True)
    phone: Mapped[str] = mapped_column(String(32), nullable=False)
    address: Mapped[str] = mapped_column(String(255), nullable=False)
    gender: Mapped[str] = mapped_column(String(16), nullable=False)
    zone_id: Mapped[int] = mapped_column(
        ForeignKey("zones.id", ondelete="RESTRICT"), nullable=False
    )
    cell_id: Mapped[int] = mapped_column(
        ForeignKey("cells.id", ondelete="RESTRICT"), nullable=False
    )
    status: Mapped[MemberStatus] = mapped_column(
        SAEnum(MemberStatus, name="enum_member_status", native_enum=True, create_constraint=True),
        nullable=False,
        default=MemberStatus.FIRST_TIMER,
    )
    conversion_status: Mapped[ConversionStatus] = mapped_column(
        SAEnum(
            ConversionStatus,
            name="enum_conversion_status",
            native_enum=True,
            create_constraint=True,
        ),
        nullable=False,
        default=ConversionStatus.NOT_CONVERTED,
    )
    sunday_attendance: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    first_visit: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    last_visit: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    prayer_request: Mapped[str | None] = mapped_column(Text, nullable=True)

    zone: Mapped[Zone] = relationship("Zone", lazy="joined")
    cell: Mapped[Cell] = relationship("Cell", lazy="joined")
    follow_ups: Mapped[list[FollowUp]] = relationship(
        "FollowUp",
        back_populates="member",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (
        UniqueConstraint("email", name="uq_members_email"),
        CheckConstraint("sunday_attendance >= 0", name="sunday_attendance_nonneg"),
        Index("ix_members_zone_id", "zone_id"),
        Index("ix_members_cell_id", "cell_id"),
    )

    @validates("email")
    def _normalize_email(self, key: str, value: str | None) -> str | None:
        if value is None:
            return None
        v = value.strip().lower()
        return v or None


class FollowUp(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Pastoral contact with a member, assigned to a staff user."""

    __tablename__ = "follow_ups"

    member_id: Mapped[int] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False
    )
    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    type: Mapped[FollowUpType] = mapped_column(
        SAEnum(FollowUpType, name="enum_follow_up_type", native_enum=True, create_constraint=True),
        nullable=False,
    )
    status: Mapped[FollowUpStatus] = mapped_column(
        SAEnum(
            FollowUpStatus, name="enum_follow_up_status", native_enum=True, create_constraint=True
        ),
        nullable=False,
        default=FollowUpStatus.PENDING,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    next_follow_up_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    member: Mapped[Member] = relationship("Member", back_populates="follow_ups")
    user: Mapped[User] = relationship("User", lazy="joined")

    __table_args__ = (
        Index("ix_follow_ups_member_id", "member_id"),
        Index("ix_follow_ups_user_id", "user_id"),
    )
