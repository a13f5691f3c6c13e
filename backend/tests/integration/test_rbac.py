"""Role checks on protected endpoints."""

from __future__ import annotations

import pytest

from memberhub.models.user import UserRole
from tests.factories.organization import ZoneFactory
from tests.helpers.assertions import assert_problem
from tests.helpers.http import build_url


@pytest.mark.parametrize(
    "role",
    [UserRole.ADMIN, UserRole.ZONAL_COORDINATOR, UserRole.CELL_LEADER, UserRole.FOLLOW_UP_TEAM],
)
def test_only_super_admin_registers_staff(client, staff, headers_for, role) -> None:
    actor = staff(role)
    payload = {"name": "X", "email": "x@example.com", "role": "ADMIN"}

    resp = client.post(build_url("/auth/register"), json=payload, headers=headers_for(actor))

    body = assert_problem(resp, 403, "forbidden")
    assert body["detail"] == "Insufficient role"


def test_unknown_role_claim_is_forbidden(client, staff, headers_for) -> None:
    actor = staff(UserRole.SUPER_ADMIN)
    resp = client.post(
        build_url("/zones"), json={"name": "Zone"}, headers=headers_for(actor, role="GOD_MODE")
    )
    assert_problem(resp, 403, "forbidden")


def test_missing_token_is_401_not_403(client) -> None:
    assert_problem(client.post(build_url("/zones"), json={"name": "Zone"}), 401, "unauthorized")


def test_malformed_token_is_401(client) -> None:
    resp = client.get(build_url("/zones"), headers={"Authorization": "Bearer not.a.jwt"})
    assert_problem(resp, 401, "unauthorized")


@pytest.mark.parametrize(
    "role,expected",
    [
        (UserRole.SUPER_ADMIN, 200),
        (UserRole.ADMIN, 200),
        (UserRole.ZONAL_COORDINATOR, 200),
        (UserRole.CELL_LEADER, 403),
        (UserRole.FOLLOW_UP_TEAM, 403),
    ],
)
def test_zone_editors(client, session, staff, headers_for, role, expected) -> None:
    zone = ZoneFactory()
    session.commit()

    resp = client.patch(
        build_url(f"/zones/{zone.id}"), json={"description": "x"}, headers=headers_for(staff(role))
    )

    assert resp.status_code == expected


@pytest.mark.parametrize("role", list(UserRole))
def test_every_role_can_read(client, staff, headers_for, role) -> None:
    headers = headers_for(staff(role))
    for path in ("/users", "/zones", "/cells", "/departments", "/members", "/followups"):
        assert client.get(build_url(path), headers=headers).status_code == 200, path


def test_cell_leader_cannot_create_members(client, staff, headers_for) -> None:
    headers = headers_for(staff(UserRole.CELL_LEADER))
    resp = client.post(build_url("/members"), json={}, headers=headers)
    assert_problem(resp, 403)
