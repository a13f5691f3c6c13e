"""CRUD flows for zones, cells and departments over HTTP."""

from __future__ import annotations

from memberhub.models.user import UserRole
from tests.factories.member import MemberFactory
from tests.factories.organization import CellFactory, DepartmentFactory, ZoneFactory
from tests.helpers.assertions import assert_envelope, assert_problem
from tests.helpers.http import build_url


def test_zone_lifecycle(client, staff, auth_header) -> None:
    coordinator = staff(UserRole.ZONAL_COORDINATOR, name="Zena Coord")

    created = client.post(
        build_url("/zones"),
        json={"name": "East", "description": "East side", "coordinatorId": coordinator.id},
        headers=auth_header,
    )
    assert created.status_code == 201
    zone = created.get_json()["data"]
    assert zone["coordinatorName"] == "Zena Coord"
    assert zone["cellCount"] == 0

    listing = client.get(build_url("/zones", limit=5), headers=auth_header).get_json()
    assert_envelope(listing)
    assert [z["id"] for z in listing["data"]] == [zone["id"]]
    assert listing["meta"]["limit"] == 5

    patched = client.patch(
        build_url(f"/zones/{zone['id']}"), json={"name": "East Side"}, headers=auth_header
    )
    assert patched.get_json()["data"]["name"] == "East Side"
    assert patched.get_json()["data"]["description"] == "East side"

    assert client.delete(build_url(f"/zones/{zone['id']}"), headers=auth_header).status_code == 204
    assert_problem(client.get(build_url(f"/zones/{zone['id']}"), headers=auth_header), 404)


def test_zone_with_members_cannot_be_deleted(client, session, auth_header) -> None:
    member = MemberFactory()
    session.commit()

    resp = client.delete(build_url(f"/zones/{member.zone_id}"), headers=auth_header)

    assert_problem(resp, 409, "conflict")


def test_zone_create_validation(client, auth_header) -> None:
    body = assert_problem(
        client.post(build_url("/zones"), json={"name": ""}, headers=auth_header), 422
    )
    assert "name" in body["details"]["errors"]


def test_zone_unknown_coordinator_is_404(client, auth_header) -> None:
    resp = client.post(
        build_url("/zones"), json={"name": "West", "coordinatorId": 987654}, headers=auth_header
    )
    assert_problem(resp, 404, "not_found")


def test_cells_filtered_by_zone(client, session, auth_header) -> None:
    zone = ZoneFactory()
    CellFactory.create_batch(2, zone=zone)
    CellFactory()
    session.commit()

    resp = client.get(build_url("/cells", zoneId=zone.id), headers=auth_header)

    body = resp.get_json()
    assert_envelope(body)
    assert body["meta"]["total"] == 2
    assert {c["zoneId"] for c in body["data"]} == {zone.id}


def test_create_cell_in_missing_zone(client, auth_header) -> None:
    resp = client.post(
        build_url("/cells"), json={"name": "Orphan", "zoneId": 4040}, headers=auth_header
    )
    assert_problem(resp, 404)


def test_create_and_move_cell(client, session, auth_header) -> None:
    first, second = ZoneFactory(), ZoneFactory()
    session.commit()

    created = client.post(
        build_url("/cells"), json={"name": "Bethel", "zoneId": first.id}, headers=auth_header
    )
    assert created.status_code == 201
    cell_id = created.get_json()["data"]["id"]

    moved = client.patch(
        build_url(f"/cells/{cell_id}"), json={"zoneId": second.id}, headers=auth_header
    )
    assert moved.get_json()["data"]["zoneId"] == second.id


def test_department_crud(client, session, auth_header) -> None:
    DepartmentFactory(name="Choir")
    session.commit()

    dup = client.post(build_url("/departments"), json={"name": "CHOIR"}, headers=auth_header)
    assert_problem(dup, 409)

    created = client.post(
        build_url("/departments"), json={"name": "Media", "description": "AV"}, headers=auth_header
    )
    assert created.status_code == 201
    dept_id = created.get_json()["data"]["id"]

    listing = client.get(build_url("/departments"), headers=auth_header).get_json()
    assert [d["name"] for d in listing["data"]] == ["Choir", "Media"]

    assert (
        client.delete(build_url(f"/departments/{dept_id}"), headers=auth_header).status_code
        == 204
    )
    assert_problem(client.get(build_url(f"/departments/{dept_id}"), headers=auth_header), 404)


def test_pagination_query_is_validated(client, auth_header) -> None:
    body = assert_problem(client.get(build_url("/zones", page=0), headers=auth_header), 422)
    assert "page" in body["details"]["errors"]


def test_oversized_limit_is_capped(client, auth_header) -> None:
    body = client.get(build_url("/zones", limit=1000), headers=auth_header).get_json()
    assert body["meta"]["limit"] == 100
