"""Zones, cells and departments."""

from __future__ import annotations

from sqlalchemy import func, select

from memberhub.models.organization import Cell, Department, Zone
from memberhub.repositories.base import BaseRepository


class ZoneRepository(BaseRepository[Zone]):
    model = Zone
    sortable = ("id", "name", "created_at")
    filterable = ("coordinator_id",)
    updatable = frozenset({"name", "description", "coordinator_id"})


class CellRepository(BaseRepository[Cell]):
    model = Cell
    sortable = ("id", "name", "created_at")
    filterable = ("zone_id", "leader_id")
    updatable = frozenset({"name", "zone_id", "leader_id"})


class DepartmentRepository(BaseRepository[Department]):
    model = Department
    sortable = ("id", "name")
    updatable = frozenset({"name", "description"})

    def name_taken(self, name: str, *, exclude_id: int | None = None) -> bool:
        """Case-insensitive; ``exclude_id`` skips the department being renamed."""
        stmt = select(Department.id).where(func.lower(Department.name) == name.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Department.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None
