"""Fixtures for HTTP-level tests: staff accounts and auth headers."""

from __future__ import annotations

from collections.abc import Callable

import pytest

from memberhub.models.user import User, UserRole
from tests.factories.user import UserFactory
from tests.helpers.auth import issue_token
from tests.helpers.http import json_headers


@pytest.fixture()
def staff(session) -> Callable[[UserRole], User]:
    """Create a committed user with the given role."""

    def _make(role: UserRole = UserRole.ADMIN, **kwargs) -> User:
        user = UserFactory(role=role, **kwargs)
        session.commit()
        return user

    return _make


@pytest.fixture()
def headers_for(app) -> Callable[..., dict[str, str]]:
    """Return JSON headers carrying an access token for a user."""

    def _headers(user: User, **kwargs) -> dict[str, str]:
        # the session-wide app context from ``db`` is already pushed; a nested
        # one would remove the test session on teardown and detach objects
        return json_headers(issue_token(user, **kwargs))

    return _headers


@pytest.fixture()
def super_admin(staff) -> User:
    return staff(UserRole.SUPER_ADMIN)


@pytest.fixture()
def auth_header(super_admin, headers_for) -> dict[str, str]:
    return headers_for(super_admin)
