from __future__ import annotations

import secrets
import threading
from dataclasses import dataclass, replace
from datetime import datetime
from enum import Enum
from typing import Protocol

# 32 random bytes -> 43 url-safe characters
TOKEN_BYTES = 32


class RefreshTokenState(Enum):
    """Lifecycle state of a refresh token; EXPIRED and REVOKED are absorbing."""

    ACTIVE = "active"
    EXPIRED = "expired"
    REVOKED = "revoked"


@dataclass(frozen=True, slots=True)
class RefreshTokenRecord:
    """
    Read-model for a stored refresh token.

    :ivar token: Opaque lookup key handed to the client.
    :ivar user_id: Owner user id.
    :ivar expires_at: Absolute expiration (UTC, timezone-aware).
    :ivar is_revoked: Whether the token was revoked.
    """

    token: str
    user_id: int
    expires_at: datetime
    is_revoked: bool = False

    def state(self, now: datetime) -> RefreshTokenState:
        """Classify the record at ``now``; revocation wins over expiry."""
        if self.is_revoked:
            return RefreshTokenState.REVOKED
        if self.expires_at <= now:
            return RefreshTokenState.EXPIRED
        return RefreshTokenState.ACTIVE


def generate_token() -> str:
    """Return a fresh 256-bit url-safe token."""
    return secrets.token_urlsafe(TOKEN_BYTES)


class RefreshTokenStore(Protocol):
    """
    Persistence port for refresh tokens.

    Every operation is keyed by the unique token string or by the user id.
    Failures of the underlying backend propagate unchanged.
    """

    def insert(self, *, token: str, user_id: int, expires_at: datetime) -> None:
        """Persist a new ACTIVE token."""

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        """Return the record for ``token`` or ``None``."""

    def set_revoked(self, token: str) -> None:
        """Mark ``token`` revoked; unknown tokens and repeated calls are no-ops."""

    def revoke_if_active(self, token: str) -> bool:
        """
        Revoke ``token`` only if it is not revoked yet.

        :returns: ``True`` if this call flipped the flag.
        """

    def delete_expired_or_revoked(self, user_id: int, now: datetime) -> int:
        """Delete the user's rows that are revoked or expired at ``now``."""

    def set_all_revoked_for_user(self, user_id: int) -> int:
        """Revoke every token of the user. :returns: rows affected."""

    def list_for_user(self, user_id: int) -> list[RefreshTokenRecord]:
        """Return all stored records of the user (any state)."""

    def new_token(self) -> str:
        """Generate a new random refresh token."""


class InMemoryRefreshTokenStore(RefreshTokenStore):
    """
    Dictionary-backed store for unit tests.

    .. note::
       Uses a threading lock so conditional revocation is atomic.
    """

    def __init__(self) -> None:
        self._by_token: dict[str, RefreshTokenRecord] = {}
        self._lock = threading.Lock()

    def new_token(self) -> str:
        return generate_token()

    def insert(self, *, token: str, user_id: int, expires_at: datetime) -> None:
        with self._lock:
            if token in self._by_token:
                raise ValueError("duplicate refresh token")
            self._by_token[token] = RefreshTokenRecord(
                token=token, user_id=int(user_id), expires_at=expires_at
            )

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        with self._lock:
            return self._by_token.get(token)

    def set_revoked(self, token: str) -> None:
        with self._lock:
            rec = self._by_token.get(token)
            if rec is not None:
                self._by_token[token] = replace(rec, is_revoked=True)

    def revoke_if_active(self, token: str) -> bool:
        with self._lock:
            rec = self._by_token.get(token)
            if rec is None or rec.is_revoked:
                return False
            self._by_token[token] = replace(rec, is_revoked=True)
            return True

    def delete_expired_or_revoked(self, user_id: int, now: datetime) -> int:
        with self._lock:
            doomed = [
                t
                for t, rec in self._by_token.items()
                if rec.user_id == user_id
                and rec.state(now) is not RefreshTokenState.ACTIVE
            ]
            for t in doomed:
                del self._by_token[t]
            return len(doomed)

    def set_all_revoked_for_user(self, user_id: int) -> int:
        with self._lock:
            touched = 0
            for t, rec in list(self._by_token.items()):
                if rec.user_id == user_id:
                    self._by_token[t] = replace(rec, is_revoked=True)
                    touched += 1
            return touched

    def list_for_user(self, user_id: int) -> list[RefreshTokenRecord]:
        with self._lock:
            return [rec for rec in self._by_token.values() if rec.user_id == user_id]
