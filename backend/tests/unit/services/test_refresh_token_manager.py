# tests/unit/services/test_refresh_token_manager.py
from __future__ import annotations

from datetime import UTC, datetime, timedelta

import pytest
from freezegun import freeze_time

from memberhub.core.config import AuthSettings
from memberhub.models.user import UserRole
from memberhub.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    RevokedTokenError,
    TokenError,
    TokenReusedError,
    UnknownTokenOwnerError,
)
from memberhub.services._shared.ports import (
    InMemoryRefreshTokenStore,
    RefreshTokenState,
    StubTokenProvider,
)
from memberhub.services.auth.refresh_tokens import RefreshTokenManager
from tests.factories.user import UserFactory
from tests.helpers.utils import MutableClock, not_raises

T0 = datetime(2025, 3, 1, 12, 0, tzinfo=UTC)


def _settings(refresh: str = "7d") -> AuthSettings:
    return AuthSettings(
        jwt_secret="unit-test-secret",
        access_expires=timedelta(minutes=15),
        refresh_expiration=refresh,
    )


# ------------------------------ Fixtures ---------------------------------- #
@pytest.fixture()
def clock() -> MutableClock:
    return MutableClock(T0)


@pytest.fixture()
def store() -> InMemoryRefreshTokenStore:
    return InMemoryRefreshTokenStore()


@pytest.fixture()
def tokens() -> StubTokenProvider:
    return StubTokenProvider()


@pytest.fixture()
def manager(store, tokens, clock) -> RefreshTokenManager:
    return RefreshTokenManager(
        store=store, token_provider=tokens, settings=_settings(), clock=clock
    )


@pytest.fixture()
def user(session):
    u = UserFactory(role=UserRole.CELL_LEADER)
    session.flush()
    return u


# -------------------------------- Tests ----------------------------------- #
def test_validate_returns_owner_of_created_token(manager, user):
    token = manager.create_refresh_token(user.id)
    assert manager.validate_refresh_token(token) == user.id


def test_created_token_expires_after_configured_ttl(manager, store, user):
    token = manager.create_refresh_token(user.id)
    record = store.find_by_token(token)
    assert record is not None
    assert record.expires_at == T0 + timedelta(days=7)
    assert record.state(T0) is RefreshTokenState.ACTIVE


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("12h", timedelta(hours=12)),
        ("2d", timedelta(days=2)),
        ("garbage", timedelta(days=7)),
        ("xh", timedelta(hours=168)),
    ],
)
def test_refresh_ttl_follows_duration_string(store, tokens, clock, user, raw, expected):
    manager = RefreshTokenManager(
        store=store, token_provider=tokens, settings=_settings(raw), clock=clock
    )
    token = manager.create_refresh_token(user.id)
    assert store.find_by_token(token).expires_at == T0 + expected


def test_token_is_expired_exactly_at_expires_at(manager, clock, user):
    token = manager.create_refresh_token(user.id)
    clock.advance(timedelta(days=7) - timedelta(microseconds=1))
    assert manager.validate_refresh_token(token) == user.id

    clock.advance(timedelta(microseconds=1))
    with pytest.raises(ExpiredTokenError):
        manager.validate_refresh_token(token)


def test_expiry_boundary_with_wall_clock(store, tokens, user):
    """Default clock reads the real time; freezegun drives it across the boundary."""
    manager = RefreshTokenManager(store=store, token_provider=tokens, settings=_settings("1h"))
    with freeze_time("2025-03-01 12:00:00") as frozen:
        token = manager.create_refresh_token(user.id)
        frozen.tick(timedelta(hours=1))
        with pytest.raises(ExpiredTokenError):
            manager.validate_refresh_token(token)


def test_unknown_token_is_invalid(manager):
    with pytest.raises(InvalidTokenError):
        manager.validate_refresh_token("does-not-exist")


def test_revocation_is_terminal_for_validate_and_rotate(manager, user):
    token = manager.create_refresh_token(user.id)
    manager.revoke_refresh_token(token)

    with pytest.raises(RevokedTokenError):
        manager.validate_refresh_token(token)
    with pytest.raises(RevokedTokenError):
        manager.rotate_refresh_token(token)


def test_revoking_twice_or_unknown_token_is_noop(manager, user):
    token = manager.create_refresh_token(user.id)
    with not_raises(Exception):
        manager.revoke_refresh_token(token)
        manager.revoke_refresh_token(token)
        manager.revoke_refresh_token("never-issued")


def test_rotate_invalidates_old_and_returns_usable_new(manager, tokens, user):
    old = manager.create_refresh_token(user.id)

    pair = manager.rotate_refresh_token(old)

    assert pair.refresh_token != old
    assert manager.validate_refresh_token(pair.refresh_token) == user.id
    with pytest.raises(RevokedTokenError):
        manager.validate_refresh_token(old)
    claims = tokens.decode(pair.access_token)
    assert claims["sub"] == str(user.id)
    assert claims["email"] == user.email


def test_rotation_reads_current_role(manager, tokens, user, session):
    token = manager.create_refresh_token(user.id)
    user.role = UserRole.ZONAL_COORDINATOR
    session.flush()

    pair = manager.rotate_refresh_token(token)

    assert tokens.decode(pair.access_token)["role"] == "ZONAL_COORDINATOR"


def test_rotate_for_deleted_owner_fails(manager, store, clock):
    store.insert(token="orphan", user_id=987654, expires_at=clock() + timedelta(days=1))
    with pytest.raises(UnknownTokenOwnerError):
        manager.rotate_refresh_token("orphan")


def test_issuance_purges_expired_and_revoked_rows(manager, store, clock, user):
    for i in range(3):
        store.insert(token=f"old-{i}", user_id=user.id, expires_at=clock() - timedelta(hours=i))
    store.insert(token="revoked", user_id=user.id, expires_at=clock() + timedelta(days=1))
    store.set_revoked("revoked")
    store.insert(token="active", user_id=user.id, expires_at=clock() + timedelta(days=1))

    newest = manager.create_refresh_token(user.id)

    remaining = {r.token for r in store.list_for_user(user.id)}
    assert remaining == {"active", newest}


def test_cleanup_only_touches_the_issuing_user(manager, store, clock, user, session):
    other = UserFactory()
    session.flush()
    store.insert(token="other-expired", user_id=other.id, expires_at=clock() - timedelta(days=1))

    manager.create_refresh_token(user.id)

    assert store.find_by_token("other-expired") is not None


class _LosingRaceStore(InMemoryRefreshTokenStore):
    """Simulates a concurrent rotation landing between validate and revoke."""

    def revoke_if_active(self, token: str) -> bool:
        super().revoke_if_active(token)  # the other request wins
        return super().revoke_if_active(token)


def test_concurrent_rotation_loser_gets_reuse_error(tokens, clock, user):
    store = _LosingRaceStore()
    manager = RefreshTokenManager(
        store=store, token_provider=tokens, settings=_settings(), clock=clock
    )
    old = manager.create_refresh_token(user.id)

    with pytest.raises(TokenReusedError) as excinfo:
        manager.rotate_refresh_token(old)

    assert isinstance(excinfo.value, TokenError)
    states = {r.token: r.state(clock()) for r in store.list_for_user(user.id)}
    # old + discarded replacement, both revoked
    assert len(states) == 2
    assert set(states.values()) == {RefreshTokenState.REVOKED}


class _BrokenSigner(StubTokenProvider):
    """Fails to sign until ``healthy`` is set."""

    healthy = False

    def create_access_token(self, **kwargs):
        if not self.healthy:
            raise RuntimeError("signing key unavailable")
        return super().create_access_token(**kwargs)


def test_signing_failure_during_rotation_keeps_old_token(store, clock, user):
    signer = _BrokenSigner()
    manager = RefreshTokenManager(
        store=store, token_provider=signer, settings=_settings(), clock=clock
    )
    old = manager.create_refresh_token(user.id)

    with pytest.raises(RuntimeError, match="signing key unavailable"):
        manager.rotate_refresh_token(old)

    # the replacement was already stored when signing failed
    assert len(store.list_for_user(user.id)) == 2
    assert manager.validate_refresh_token(old) == user.id

    signer.healthy = True
    pair = manager.rotate_refresh_token(old)
    assert manager.validate_refresh_token(pair.refresh_token) == user.id
    with pytest.raises(RevokedTokenError):
        manager.validate_refresh_token(old)


def test_only_first_of_two_sequential_rotations_succeeds(manager, user):
    old = manager.create_refresh_token(user.id)
    manager.rotate_refresh_token(old)
    with pytest.raises(RevokedTokenError):
        manager.rotate_refresh_token(old)


def test_revoke_all_user_tokens(manager, store, user):
    a = manager.create_refresh_token(user.id)
    b = manager.create_refresh_token(user.id)

    assert manager.revoke_all_user_tokens(user.id) == 2

    for token in (a, b):
        with pytest.raises(RevokedTokenError):
            manager.validate_refresh_token(token)
