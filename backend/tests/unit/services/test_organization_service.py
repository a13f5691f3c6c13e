# tests/unit/services/test_organization_service.py
from __future__ import annotations

import pytest

from memberhub.models.organization import Cell, Zone
from memberhub.models.user import UserRole
from memberhub.services._shared.base import ServiceContext
from memberhub.services._shared.errors import ConflictError, NotFoundError, ServiceError
from memberhub.services.organization.dto import CellCreateIn, DepartmentCreateIn, ZoneCreateIn
from memberhub.services.organization.service import CellService, DepartmentService, ZoneService
from tests.factories.member import MemberFactory
from tests.factories.organization import CellFactory, DepartmentFactory, ZoneFactory
from tests.factories.user import UserFactory

CTX = ServiceContext(actor_id=1)


# --------------------------------- Zones ----------------------------------- #
def test_create_zone_with_coordinator():
    coordinator = UserFactory(role=UserRole.ZONAL_COORDINATOR, name="Grace Hopper")

    out = ZoneService(ctx=CTX).create_zone(
        ZoneCreateIn(name="  North ", description="Uptown", coordinator_id=coordinator.id)
    )

    assert out.name == "North"
    assert out.coordinator_id == coordinator.id
    assert out.coordinator_name == "Grace Hopper"
    assert out.cell_count == 0


def test_create_zone_unknown_coordinator():
    with pytest.raises(NotFoundError):
        ZoneService(ctx=CTX).create_zone(ZoneCreateIn(name="South", coordinator_id=4242))


@pytest.mark.parametrize("name", ["", "   "])
def test_create_zone_requires_name(name):
    with pytest.raises(ServiceError):
        ZoneService(ctx=CTX).create_zone(ZoneCreateIn(name=name))


def test_update_zone_swaps_coordinator():
    zone = ZoneFactory()
    new_coordinator = UserFactory(name="Alan Turing")

    out = ZoneService(ctx=CTX).update_zone(zone.id, {"coordinator_id": new_coordinator.id})

    assert out.coordinator_name == "Alan Turing"


def test_zone_cell_count_and_listing():
    zone = ZoneFactory(name="A zone")
    CellFactory.create_batch(2, zone=zone)
    ZoneFactory(name="B zone")

    page = ZoneService(ctx=CTX).list_zones(sort=["name"])

    assert [z.name for z in page.items] == ["A zone", "B zone"]
    assert page.items[0].cell_count == 2


def test_delete_zone_cascades_to_cells(session):
    cell = CellFactory()
    zone_id, cell_id = cell.zone_id, cell.id

    ZoneService(ctx=CTX).delete_zone(zone_id)

    session.expire_all()
    assert session.get(Zone, zone_id) is None
    assert session.get(Cell, cell_id) is None


def test_delete_zone_with_members_conflicts():
    member = MemberFactory()
    with pytest.raises(ConflictError):
        ZoneService(ctx=CTX).delete_zone(member.zone_id)


# --------------------------------- Cells ----------------------------------- #
def test_create_cell_requires_existing_zone():
    with pytest.raises(NotFoundError):
        CellService(ctx=CTX).create_cell(CellCreateIn(name="Lonely", zone_id=31337))


def test_create_cell_with_leader():
    zone = ZoneFactory()
    leader = UserFactory(role=UserRole.CELL_LEADER, name="Cell Boss")

    out = CellService(ctx=CTX).create_cell(
        CellCreateIn(name="Alpha", zone_id=zone.id, leader_id=leader.id)
    )

    assert out.zone_id == zone.id
    assert out.leader_name == "Cell Boss"


def test_list_cells_filters_by_zone():
    zone = ZoneFactory()
    CellFactory.create_batch(2, zone=zone)
    CellFactory()

    page = CellService(ctx=CTX).list_cells(zone_id=zone.id)

    assert page.meta.total == 2
    assert {c.zone_id for c in page.items} == {zone.id}


def test_move_cell_to_unknown_zone():
    cell = CellFactory()
    with pytest.raises(NotFoundError):
        CellService(ctx=CTX).update_cell(cell.id, {"zone_id": 999})


def test_delete_cell_with_members_conflicts():
    member = MemberFactory()
    with pytest.raises(ConflictError):
        CellService(ctx=CTX).delete_cell(member.cell_id)


# ------------------------------ Departments -------------------------------- #
def test_department_names_are_unique_case_insensitively():
    DepartmentFactory(name="Choir")
    with pytest.raises(ConflictError):
        DepartmentService(ctx=CTX).create_department(DepartmentCreateIn(name="choir"))


def test_rename_department_to_own_name_is_allowed():
    dept = DepartmentFactory(name="Ushers")
    out = DepartmentService(ctx=CTX).update_department(dept.id, {"name": "USHERS"})
    assert out.name == "USHERS"


def test_rename_department_to_taken_name_conflicts():
    DepartmentFactory(name="Media")
    dept = DepartmentFactory(name="Protocol")
    with pytest.raises(ConflictError):
        DepartmentService(ctx=CTX).update_department(dept.id, {"name": "media"})


def test_departments_list_sorted_by_name_by_default():
    for name in ("Welfare", "Choir", "Media"):
        DepartmentFactory(name=name)

    page = DepartmentService(ctx=CTX).list_departments()

    assert [d.name for d in page.items] == ["Choir", "Media", "Welfare"]


def test_delete_unknown_department():
    with pytest.raises(NotFoundError):
        DepartmentService(ctx=CTX).delete_department(12345)
