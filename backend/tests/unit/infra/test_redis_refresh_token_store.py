# tests/unit/infra/test_redis_refresh_token_store.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import fakeredis
import pytest

from memberhub.infra.redis.refresh_token_store import RETENTION, RedisRefreshTokenStore
from memberhub.services._shared.ports import RefreshTokenState

NOW = datetime.now(UTC).replace(microsecond=0)


@pytest.fixture()
def r():
    return fakeredis.FakeRedis()


@pytest.fixture()
def store(r) -> RedisRefreshTokenStore:
    return RedisRefreshTokenStore(r=r)


def test_insert_writes_hash_index_and_ttl(store, r):
    token = store.new_token()
    store.insert(token=token, user_id=5, expires_at=NOW + timedelta(hours=2))

    assert r.hget(f"rt:{token}", "user_id") == b"5"
    assert r.sismember("rt:u:5", token)
    ttl = r.ttl(f"rt:{token}")
    assert timedelta(hours=2) < timedelta(seconds=ttl) <= timedelta(hours=2) + RETENTION

    record = store.find_by_token(token)
    assert record.user_id == 5
    assert record.expires_at == NOW + timedelta(hours=2)
    assert record.state(NOW) is RefreshTokenState.ACTIVE


def test_set_revoked_does_not_create_keys(store, r):
    store.set_revoked("ghost")
    assert not r.exists("rt:ghost")


def test_revoke_if_active_is_single_shot(store):
    token = store.new_token()
    store.insert(token=token, user_id=1, expires_at=NOW + timedelta(days=1))

    assert store.revoke_if_active(token) is True
    assert store.revoke_if_active(token) is False
    assert store.revoke_if_active("ghost") is False
    assert store.find_by_token(token).state(NOW) is RefreshTokenState.REVOKED


def test_delete_expired_or_revoked(store, r):
    active, revoked = store.new_token(), store.new_token()
    store.insert(token=active, user_id=3, expires_at=NOW + timedelta(days=1))
    store.insert(token=revoked, user_id=3, expires_at=NOW + timedelta(days=1))
    store.set_revoked(revoked)
    later = NOW + timedelta(hours=1)

    assert store.delete_expired_or_revoked(3, later) == 1
    assert [rec.token for rec in store.list_for_user(3)] == [active]
    assert not r.exists(f"rt:{revoked}")

    # the remaining token expires while its key is still retained
    assert store.delete_expired_or_revoked(3, NOW + timedelta(days=1)) == 1
    assert store.list_for_user(3) == []


def test_stale_index_entries_are_dropped(store, r):
    token = store.new_token()
    store.insert(token=token, user_id=9, expires_at=NOW + timedelta(days=1))
    r.delete(f"rt:{token}")

    assert store.delete_expired_or_revoked(9, NOW) == 0
    assert not r.sismember("rt:u:9", token)


def test_set_all_revoked_for_user(store):
    for _ in range(2):
        store.insert(token=store.new_token(), user_id=4, expires_at=NOW + timedelta(days=1))
    store.insert(token=store.new_token(), user_id=8, expires_at=NOW + timedelta(days=1))

    assert store.set_all_revoked_for_user(4) == 2
    assert all(rec.is_revoked for rec in store.list_for_user(4))
    assert not any(rec.is_revoked for rec in store.list_for_user(8))
