"""
Organization services
=====================

CRUD for the structural units of the organization: zones, the cells inside
them, and departments. Role checks happen at the HTTP layer; these services
only enforce referential and uniqueness rules.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any

from memberhub.models.organization import Cell, Department, Zone
from memberhub.services._shared.base import BaseService
from memberhub.services._shared.dto import ListOut, PageMeta
from memberhub.services._shared.errors import ConflictError, NotFoundError, ServiceError
from memberhub.services.organization.dto import (
    CellCreateIn,
    CellOut,
    DepartmentCreateIn,
    DepartmentOut,
    ZoneCreateIn,
    ZoneOut,
)
from memberhub.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer

log = logging.getLogger(__name__)


def _ensure_user(uow: SQLAlchemyRepositoryContainer, user_id: int | None) -> None:
    if user_id is not None and uow.users.get(user_id) is None:
        raise NotFoundError("User", user_id)


def _require_name(value: Any) -> None:
    if value is not None and not str(value).strip():
        raise ServiceError("Name is required.")


class ZoneService(BaseService):
    """Zones and their coordinators."""

    def list_zones(
        self, *, page: int = 1, limit: int = 20, sort: list[str] | None = None
    ) -> ListOut[ZoneOut]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            result = uow.zones.paginate(pagination)
            items = [ZoneOut.from_model(z) for z in result.items]
        return ListOut(items=items, meta=PageMeta.from_page(result))

    def get_zone(self, zone_id: int) -> ZoneOut:
        with self.ro_uow() as uow:
            zone = uow.zones.get(zone_id)
            if zone is None:
                raise NotFoundError("Zone", zone_id)
            return ZoneOut.from_model(zone)

    def create_zone(self, dto: ZoneCreateIn) -> ZoneOut:
        """
        :raises NotFoundError: When the coordinator does not exist.
        """
        _require_name(dto.name)
        with self.rw_uow() as uow:
            _ensure_user(uow, dto.coordinator_id)
            zone = uow.zones.add(
                Zone(
                    name=dto.name,
                    description=dto.description,
                    coordinator_id=dto.coordinator_id,
                )
            )
            out = ZoneOut.from_model(uow.zones.refresh(zone))
        log.info("zone created id=%s actor=%s", out.id, self.ctx.actor_id)
        return out

    def update_zone(self, zone_id: int, changes: Mapping[str, Any]) -> ZoneOut:
        _require_name(changes.get("name"))
        with self.rw_uow() as uow:
            zone = uow.zones.get(zone_id)
            if zone is None:
                raise NotFoundError("Zone", zone_id)
            _ensure_user(uow, changes.get("coordinator_id"))
            uow.zones.update(zone, **changes)
            out = ZoneOut.from_model(uow.zones.refresh(zone))
        log.info("zone updated id=%s actor=%s", zone_id, self.ctx.actor_id)
        return out

    def delete_zone(self, zone_id: int) -> None:
        """
        Delete a zone together with its cells.

        :raises ConflictError: While members are still assigned to the zone.
        """
        with self.rw_uow() as uow:
            zone = uow.zones.get(zone_id)
            if zone is None:
                raise NotFoundError("Zone", zone_id)
            if uow.members.exists(zone_id=zone_id):
                raise ConflictError("Zone", "zone still has members")
            uow.zones.delete(zone)
        log.info("zone deleted id=%s actor=%s", zone_id, self.ctx.actor_id)


class CellService(BaseService):
    """Cells: small groups inside a zone."""

    def list_cells(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        sort: list[str] | None = None,
        zone_id: int | None = None,
    ) -> ListOut[CellOut]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort)
        with self.ro_uow() as uow:
            result = uow.cells.paginate(pagination, filters={"zone_id": zone_id})
            items = [CellOut.from_model(c) for c in result.items]
        return ListOut(items=items, meta=PageMeta.from_page(result))

    def get_cell(self, cell_id: int) -> CellOut:
        with self.ro_uow() as uow:
            cell = uow.cells.get(cell_id)
            if cell is None:
                raise NotFoundError("Cell", cell_id)
            return CellOut.from_model(cell)

    def create_cell(self, dto: CellCreateIn) -> CellOut:
        _require_name(dto.name)
        with self.rw_uow() as uow:
            if uow.zones.get(dto.zone_id) is None:
                raise NotFoundError("Zone", dto.zone_id)
            _ensure_user(uow, dto.leader_id)
            cell = uow.cells.add(Cell(name=dto.name, zone_id=dto.zone_id, leader_id=dto.leader_id))
            out = CellOut.from_model(uow.cells.refresh(cell))
        log.info("cell created id=%s zone=%s actor=%s", out.id, out.zone_id, self.ctx.actor_id)
        return out

    def update_cell(self, cell_id: int, changes: Mapping[str, Any]) -> CellOut:
        _require_name(changes.get("name"))
        with self.rw_uow() as uow:
            cell = uow.cells.get(cell_id)
            if cell is None:
                raise NotFoundError("Cell", cell_id)
            new_zone = changes.get("zone_id")
            if new_zone is not None and uow.zones.get(new_zone) is None:
                raise NotFoundError("Zone", new_zone)
            _ensure_user(uow, changes.get("leader_id"))
            uow.cells.update(cell, **changes)
            out = CellOut.from_model(uow.cells.refresh(cell))
        log.info("cell updated id=%s actor=%s", cell_id, self.ctx.actor_id)
        return out

    def delete_cell(self, cell_id: int) -> None:
        """
        :raises ConflictError: While members are still assigned to the cell.
        """
        with self.rw_uow() as uow:
            cell = uow.cells.get(cell_id)
            if cell is None:
                raise NotFoundError("Cell", cell_id)
            if uow.members.exists(cell_id=cell_id):
                raise ConflictError("Cell", "cell still has members")
            uow.cells.delete(cell)
        log.info("cell deleted id=%s actor=%s", cell_id, self.ctx.actor_id)


class DepartmentService(BaseService):
    def list_departments(
        self, *, page: int = 1, limit: int = 20, sort: list[str] | None = None
    ) -> ListOut[DepartmentOut]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort or ["name"])
        with self.ro_uow() as uow:
            result = uow.departments.paginate(pagination)
            items = [DepartmentOut.from_model(d) for d in result.items]
        return ListOut(items=items, meta=PageMeta.from_page(result))

    def get_department(self, department_id: int) -> DepartmentOut:
        with self.ro_uow() as uow:
            department = uow.departments.get(department_id)
            if department is None:
                raise NotFoundError("Department", department_id)
            return DepartmentOut.from_model(department)

    def create_department(self, dto: DepartmentCreateIn) -> DepartmentOut:
        """
        :raises ConflictError: When the name is already taken (case-insensitive).
        """
        _require_name(dto.name)
        with self.rw_uow() as uow:
            if uow.departments.name_taken(dto.name):
                raise ConflictError("Department", "name already exists")
            department = uow.departments.add(
                Department(name=dto.name, description=dto.description)
            )
            out = DepartmentOut.from_model(department)
        log.info("department created id=%s actor=%s", out.id, self.ctx.actor_id)
        return out

    def update_department(self, department_id: int, changes: Mapping[str, Any]) -> DepartmentOut:
        _require_name(changes.get("name"))
        with self.rw_uow() as uow:
            department = uow.departments.get(department_id)
            if department is None:
                raise NotFoundError("Department", department_id)
            new_name = changes.get("name")
            if new_name and uow.departments.name_taken(new_name, exclude_id=department_id):
                raise ConflictError("Department", "name already exists")
            uow.departments.update(department, **changes)
            out = DepartmentOut.from_model(department)
        log.info("department updated id=%s actor=%s", department_id, self.ctx.actor_id)
        return out

    def delete_department(self, department_id: int) -> None:
        with self.rw_uow() as uow:
            department = uow.departments.get(department_id)
            if department is None:
                raise NotFoundError("Department", department_id)
            uow.departments.delete(department)
        log.info("department deleted id=%s actor=%s", department_id, self.ctx.actor_id)
