"""Integration tests for authentication endpoints."""

from __future__ import annotations

import pytest

from memberhub.models.user import UserRole
from tests.factories.user import DEFAULT_PASSWORD
from tests.helpers.assertions import assert_json_keys, assert_problem
from tests.helpers.auth import expired_token
from tests.helpers.http import build_url


def _login(client, email: str, password: str = DEFAULT_PASSWORD):
    return client.post(build_url("/auth/login"), json={"email": email, "password": password})


def test_login_returns_tokens_and_user(client, staff) -> None:
    user = staff(UserRole.CELL_LEADER)

    resp = _login(client, user.email.upper())

    assert resp.status_code == 200
    body = resp.get_json()
    assert_json_keys(body, {"accessToken", "refreshToken", "user"})
    assert body["user"]["id"] == user.id
    assert body["user"]["role"] == "CELL_LEADER"
    assert body["user"]["mustChangePassword"] is False
    assert "passwordHash" not in body["user"]


def test_login_wrong_password_is_generic_401(client, staff) -> None:
    user = staff()
    wrong = assert_problem(_login(client, user.email, "nope-nope"), 401, "unauthorized")
    unknown = assert_problem(_login(client, "ghost@example.com"), 401, "unauthorized")
    assert wrong["detail"] == unknown["detail"] == "Invalid credentials"


def test_login_validation_error(client) -> None:
    body = assert_problem(
        client.post(build_url("/auth/login"), json={"email": "not-an-email"}),
        422,
        "validation_error",
    )
    assert set(body["details"]["errors"]) == {"email", "password"}


def test_refresh_rotates_and_old_token_dies(client, staff) -> None:
    user = staff()
    first = _login(client, user.email).get_json()["refreshToken"]

    resp = client.post(build_url("/auth/refresh"), json={"refreshToken": first})
    assert resp.status_code == 200
    pair = resp.get_json()
    assert set(pair) == {"accessToken", "refreshToken"}
    assert pair["refreshToken"] != first

    replay = client.post(build_url("/auth/refresh"), json={"refreshToken": first})
    body = assert_problem(replay, 401, "unauthorized")
    assert body["detail"] == "Invalid or expired refresh token"

    again = client.post(build_url("/auth/refresh"), json={"refreshToken": pair["refreshToken"]})
    assert again.status_code == 200


def test_losing_a_concurrent_rotation_is_the_generic_401(
    app, client, staff, monkeypatch
) -> None:
    user = staff()
    token = _login(client, user.email).get_json()["refreshToken"]
    store = app.extensions["refresh_token_manager"].store
    # another request revoked the token between validation and the conditional revoke
    monkeypatch.setattr(store, "revoke_if_active", lambda _token: False)

    resp = client.post(build_url("/auth/refresh"), json={"refreshToken": token})

    body = assert_problem(resp, 401, "unauthorized")
    assert body["detail"] == "Invalid or expired refresh token"
    assert "reuse" not in resp.get_data(as_text=True).lower()


@pytest.mark.parametrize("token", ["garbage", "x" * 43])
def test_refresh_unknown_token(client, token) -> None:
    resp = client.post(build_url("/auth/refresh"), json={"refreshToken": token})
    body = assert_problem(resp, 401)
    assert body["detail"] == "Invalid or expired refresh token"


def test_logout_then_refresh_fails(client, staff) -> None:
    user = staff()
    token = _login(client, user.email).get_json()["refreshToken"]

    resp = client.post(build_url("/auth/logout"), json={"refreshToken": token})
    assert resp.status_code == 200
    assert resp.get_json() == {"message": "Logged out successfully"}

    assert_problem(client.post(build_url("/auth/refresh"), json={"refreshToken": token}), 401)
    # logging out twice stays quiet
    assert client.post(build_url("/auth/logout"), json={"refreshToken": token}).status_code == 200


def test_me_endpoint_requires_auth(client, auth_header, super_admin) -> None:
    resp = client.get(build_url("/auth/me"), headers=auth_header)
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["id"] == super_admin.id
    assert data["email"] == super_admin.email

    assert_problem(client.get(build_url("/auth/me")), 401, "unauthorized")


def test_expired_access_token_is_rejected(client, app, super_admin) -> None:
    with app.app_context():
        token = expired_token(super_admin)
    resp = client.get(build_url("/auth/me"), headers={"Authorization": f"Bearer {token}"})
    body = assert_problem(resp, 401, "unauthorized")
    assert body["detail"] == "Authentication required"


def test_register_sends_setup_link_and_new_user_logs_in(client, auth_header, outbox) -> None:
    payload = {
        "name": "New Leader",
        "email": "leader@example.com",
        "role": "CELL_LEADER",
        "password": "Initial-pass1",
    }

    resp = client.post(build_url("/auth/register"), json=payload, headers=auth_header)

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["message"] == "User registered successfully"
    assert body["user"]["mustChangePassword"] is True
    assert [m.to for m in outbox.outbox] == ["leader@example.com"]
    assert "http://frontend.test/reset-password?token=" in outbox.outbox[0].html

    login = _login(client, "leader@example.com", "Initial-pass1")
    assert login.get_json()["user"]["mustChangePassword"] is True


def test_register_duplicate_email_conflicts(client, auth_header, super_admin) -> None:
    payload = {"name": "Dup", "email": super_admin.email, "role": "ADMIN"}
    assert_problem(
        client.post(build_url("/auth/register"), json=payload, headers=auth_header),
        409,
        "conflict",
    )


def test_register_blank_name_is_400(client, auth_header, outbox) -> None:
    payload = {"name": "   ", "email": "blank@example.com", "role": "ADMIN"}

    body = assert_problem(
        client.post(build_url("/auth/register"), json=payload, headers=auth_header),
        400,
        "bad_request",
    )

    assert body["detail"] == "Name is required."
    assert outbox.outbox == []


def test_register_rejects_unknown_role(client, auth_header) -> None:
    payload = {"name": "X", "email": "x@example.com", "role": "PASTOR"}
    body = assert_problem(
        client.post(build_url("/auth/register"), json=payload, headers=auth_header), 422
    )
    assert "role" in body["details"]["errors"]


def test_change_password_flow(client, staff, headers_for) -> None:
    user = staff(must_change_password=True)
    headers = headers_for(user)

    bad = client.post(
        build_url("/auth/change-password"),
        json={"currentPassword": "wrong", "newPassword": "Another-pass1"},
        headers=headers,
    )
    assert_problem(bad, 401)

    ok = client.post(
        build_url("/auth/change-password"),
        json={"currentPassword": DEFAULT_PASSWORD, "newPassword": "Another-pass1"},
        headers=headers,
    )
    assert ok.status_code == 200

    login = _login(client, user.email, "Another-pass1")
    assert login.status_code == 200
    assert login.get_json()["user"]["mustChangePassword"] is False


def test_forgot_and_reset_password(client, staff, outbox) -> None:
    user = staff()
    refresh_token = _login(client, user.email).get_json()["refreshToken"]

    known = client.post(build_url("/auth/forgot-password"), json={"email": user.email})
    unknown = client.post(build_url("/auth/forgot-password"), json={"email": "who@example.com"})
    assert known.status_code == unknown.status_code == 200
    assert known.get_json() == unknown.get_json()
    assert len(outbox.outbox) == 1

    link = outbox.outbox[0].html.split('href="', 1)[1].split('"', 1)[0]
    token = link.split("token=", 1)[1]

    resp = client.post(
        build_url("/auth/reset-password"), json={"token": token, "newPassword": "Fresh-pass-2"}
    )
    assert resp.status_code == 200

    assert_problem(
        client.post(build_url("/auth/refresh"), json={"refreshToken": refresh_token}), 401
    )
    assert _login(client, user.email, "Fresh-pass-2").status_code == 200

    reused = client.post(
        build_url("/auth/reset-password"), json={"token": token, "newPassword": "Fresh-pass-3"}
    )
    assert_problem(reused, 400, "bad_request")
