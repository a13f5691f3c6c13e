"""Zones, cells and departments: the organization's structural units."""

from __future__ import annotations

from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship, validates

from memberhub.core.extensions import db

from .base import PKMixin, ReprMixin, TimestampMixin, required_text

if TYPE_CHECKING:
    from .user import User


class Zone(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Geographic grouping of cells, led by a zonal coordinator."""

    __tablename__ = "zones"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    coordinator_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    coordinator: Mapped[User | None] = relationship("User", lazy="joined")
    cells: Mapped[list[Cell]] = relationship(
        "Cell",
        back_populates="zone",
        cascade="all, delete-orphan",
        passive_deletes=True,
        lazy="selectin",
    )

    __table_args__ = (Index("ix_zones_coordinator_id", "coordinator_id"),)

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        return required_text(value)


class Cell(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Small fellowship group inside a zone, led by a cell leader."""

    __tablename__ = "cells"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    zone_id: Mapped[int] = mapped_column(
        ForeignKey("zones.id", ondelete="CASCADE"), nullable=False
    )
    leader_id: Mapped[int | None] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    zone: Mapped[Zone] = relationship("Zone", back_populates="cells")
    leader: Mapped[User | None] = relationship("User", lazy="joined")

    __table_args__ = (
        Index("ix_cells_zone_id", "zone_id"),
        Index("ix_cells_leader_id", "leader_id"),
    )

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        return required_text(value)


class Department(PKMixin, ReprMixin, TimestampMixin, db.Model):
    """Service department; names are unique."""

    __tablename__ = "departments"

    name: Mapped[str] = mapped_column(String(120), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    __table_args__ = (UniqueConstraint("name", name="uq_departments_name"),)

    @validates("name")
    def _normalize_name(self, key: str, value: str) -> str:
        return required_text(value)
