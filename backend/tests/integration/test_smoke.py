"""Smoke tests for the API blueprint wiring."""

from __future__ import annotations

from tests.helpers.assertions import assert_problem
from tests.helpers.http import build_url


def test_health_endpoint(client) -> None:
    resp = client.get(build_url("/health"))
    assert resp.status_code == 200
    payload = resp.get_json()
    assert payload["status"] == "ok"
    assert payload["db"] == "ok"


def test_unknown_route_is_problem_json(client) -> None:
    body = assert_problem(client.get(build_url("/nope")), 404, "not_found")
    assert body["detail"] == "Route '/api/v1/nope' not found"


def test_method_not_allowed(client) -> None:
    assert_problem(client.delete(build_url("/health")), 405, "method_not_allowed")


def test_responses_carry_request_id_header(client) -> None:
    resp = client.get(build_url("/health"))
    assert resp.headers.get("X-Request-ID")


def test_cors_allows_configured_frontend(client) -> None:
    resp = client.options(
        build_url("/auth/login"),
        headers={
            "Origin": "http://frontend.test",
            "Access-Control-Request-Method": "POST",
        },
    )
    assert resp.headers.get("Access-Control-Allow-Origin") == "http://frontend.test"
    assert resp.headers.get("Access-Control-Allow-Credentials") == "true"


def test_cors_ignores_unknown_origin(client) -> None:
    resp = client.get(build_url("/health"), headers={"Origin": "http://evil.test"})
    assert "Access-Control-Allow-Origin" not in resp.headers
