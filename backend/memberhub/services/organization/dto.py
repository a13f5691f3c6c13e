# memberhub/services/organization/dto.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from memberhub.models.base import as_utc
from memberhub.models.organization import Cell, Department, Zone

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ZoneCreateIn:
    name: str
    description: str | None = None
    coordinator_id: int | None = None


@dataclass(frozen=True, slots=True)
class CellCreateIn:
    name: str
    zone_id: int
    leader_id: int | None = None


@dataclass(frozen=True, slots=True)
class DepartmentCreateIn:
    name: str
    description: str | None = None


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class ZoneOut:
    """
    Zone summary.

    :param cell_count: Number of cells currently attached to the zone.
    """

    id: int
    name: str
    description: str | None
    coordinator_id: int | None
    coordinator_name: str | None
    cell_count: int
    created_at: datetime

    @classmethod
    def from_model(cls, zone: Zone) -> ZoneOut:
        return cls(
            id=zone.id,
            name=zone.name,
            description=zone.description,
            coordinator_id=zone.coordinator_id,
            coordinator_name=zone.coordinator.name if zone.coordinator else None,
            cell_count=len(zone.cells),
            created_at=as_utc(zone.created_at),
        )


@dataclass(frozen=True, slots=True)
class CellOut:
    id: int
    name: str
    zone_id: int
    leader_id: int | None
    leader_name: str | None
    created_at: datetime

    @classmethod
    def from_model(cls, cell: Cell) -> CellOut:
        return cls(
            id=cell.id,
            name=cell.name,
            zone_id=cell.zone_id,
            leader_id=cell.leader_id,
            leader_name=cell.leader.name if cell.leader else None,
            created_at=as_utc(cell.created_at),
        )


@dataclass(frozen=True, slots=True)
class DepartmentOut:
    id: int
    name: str
    description: str | None

    @classmethod
    def from_model(cls, department: Department) -> DepartmentOut:
        return cls(id=department.id, name=department.name, description=department.description)
