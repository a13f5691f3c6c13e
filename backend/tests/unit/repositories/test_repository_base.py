# tests/unit/repositories/test_repository_base.py
from __future__ import annotations

import pytest

from memberhub.models.member import MemberStatus
from memberhub.repositories import MemberRepository, UserRepository, ZoneRepository
from memberhub.repositories.base import Pagination, parse_sort_tokens
from tests.factories.member import MemberFactory
from tests.factories.organization import ZoneFactory
from tests.factories.user import DEFAULT_PASSWORD, UserFactory


def test_parse_sort_tokens():
    assert parse_sort_tokens(["-created_at", "name", "-", ""]) == [
        ("created_at", True),
        ("name", False),
    ]


def test_paginate_sorts_with_whitelist_and_counts(session):
    for name in ("Charlie", "Alpha", "Bravo"):
        ZoneFactory(name=name)
    repo = ZoneRepository(session=session)

    page = repo.paginate(Pagination(page=1, limit=2, sort=["-name", "password"]))

    assert [z.name for z in page.items] == ["Charlie", "Bravo"]
    assert page.total == 3

    second = repo.paginate(Pagination(page=2, limit=2, sort=["-name"]))
    assert [z.name for z in second.items] == ["Alpha"]


def test_unsorted_pages_fall_back_to_primary_key(session):
    zones = [ZoneFactory() for _ in range(3)]
    repo = ZoneRepository(session=session)

    page = repo.paginate(Pagination(page=1, limit=10, sort=[]))

    assert [z.id for z in page.items] == sorted(z.id for z in zones)


def test_equality_filters_skip_none_and_unknown_keys(session):
    MemberFactory(status=MemberStatus.FULL_MEMBER)
    MemberFactory()
    repo = MemberRepository(session=session)

    assert len(repo.list(filters={"status": MemberStatus.FULL_MEMBER})) == 1
    assert len(repo.list(filters={"status": None, "phone": "ignored"})) == 2


def test_update_rejects_non_whitelisted_fields(session):
    user = UserFactory()
    repo = UserRepository(session=session)

    with pytest.raises(ValueError):
        repo.update(user, role="SUPER_ADMIN")

    repo.update(user, name="  Trimmed  ")
    assert user.name == "Trimmed"


def test_user_lookup_is_case_insensitive(session):
    user = UserFactory(email="case@example.com")
    repo = UserRepository(session=session)

    assert repo.get_by_email("  CASE@example.com ") is user
    assert repo.exists_by_email("Case@Example.com")
    assert repo.authenticate("case@example.com", DEFAULT_PASSWORD) is user
    assert repo.authenticate("case@example.com", "wrong") is None


def test_member_email_taken_excludes_self(session):
    member = MemberFactory(email="m@example.com")
    repo = MemberRepository(session=session)

    assert repo.email_taken("M@example.com")
    assert not repo.email_taken("m@example.com", exclude_id=member.id)
