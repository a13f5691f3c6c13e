# comments in English; reST docstrings
from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import redis

from memberhub.services._shared.ports import (
    RefreshTokenRecord,
    RefreshTokenState,
    RefreshTokenStore,
    generate_token,
)

# Keys outlive expiry so an expired token still reads as EXPIRED until cleanup.
RETENTION = timedelta(days=1)


def _s(value: bytes | str | None, default: str = "") -> str:
    if value is None:
        return default
    return value.decode() if isinstance(value, bytes | bytearray) else str(value)


@dataclass(slots=True)
class RedisRefreshTokenStore(RefreshTokenStore):
    """
    Redis-backed refresh token store.

    Layout: one hash per token (``rt:<token>`` with ``user_id``,
    ``expires_at`` as epoch seconds and ``revoked``) plus a per-user set
    (``rt:u:<user_id>``) indexing the user's tokens.

    :param r: A Redis client (already connected).
    """

    r: redis.Redis

    # -------------------- helpers --------------------

    @staticmethod
    def _k(token: str) -> str:
        return f"rt:{token}"

    @staticmethod
    def _ku(user_id: int) -> str:
        return f"rt:u:{user_id}"

    @staticmethod
    def _to_ts(dt: datetime) -> float:
        if dt.tzinfo is None:
            dt = dt.replace(tzinfo=UTC)
        return dt.timestamp()

    def _record(self, token: str, h: dict) -> RefreshTokenRecord:
        return RefreshTokenRecord(
            token=token,
            user_id=int(_s(h.get(b"user_id"), "0")),
            expires_at=datetime.fromtimestamp(float(_s(h.get(b"expires_at"), "0")), tz=UTC),
            is_revoked=_s(h.get(b"revoked"), "0") == "1",
        )

    def _members(self, user_id: int) -> list[str]:
        return sorted(_s(m) for m in self.r.smembers(self._ku(user_id)))

    # -------------------- API ------------------------

    def new_token(self) -> str:
        return generate_token()

    def insert(self, *, token: str, user_id: int, expires_at: datetime) -> None:
        key = self._k(token)
        ttl = int(self._to_ts(expires_at) - datetime.now(UTC).timestamp())
        ttl = max(1, ttl) + int(RETENTION.total_seconds())

        pipe = self.r.pipeline(transaction=True)
        pipe.hset(
            key,
            mapping={
                "user_id": str(user_id),
                "expires_at": repr(self._to_ts(expires_at)),
                "revoked": "0",
            },
        )
        pipe.expire(key, ttl)
        pipe.sadd(self._ku(user_id), token)
        pipe.execute()

    def find_by_token(self, token: str) -> RefreshTokenRecord | None:
        h = self.r.hgetall(self._k(token))
        if not h:
            return None
        return self._record(token, h)

    def set_revoked(self, token: str) -> None:
        key = self._k(token)
        # HSET on a missing key would create a stub hash; only touch existing ones.
        if self.r.exists(key):
            self.r.hset(key, "revoked", "1")

    def revoke_if_active(self, token: str) -> bool:
        """
        Flip ``revoked`` from 0 to 1 under WATCH/MULTI/EXEC.

        Retries on concurrent modification; returns ``False`` when the token
        is unknown or already revoked.
        """
        key = self._k(token)
        while True:
            try:
                with self.r.pipeline() as p:
                    p.watch(key)
                    current = p.hget(key, "revoked")
                    if current is None or _s(current) == "1":
                        p.unwatch()
                        return False
                    p.multi()
                    p.hset(key, "revoked", "1")
                    p.execute()
                    return True
            except redis.WatchError:
                continue

    def delete_expired_or_revoked(self, user_id: int, now: datetime) -> int:
        doomed: list[str] = []
        stale: list[str] = []
        for token in self._members(user_id):
            h = self.r.hgetall(self._k(token))
            if not h:
                stale.append(token)
                continue
            if self._record(token, h).state(now) is not RefreshTokenState.ACTIVE:
                doomed.append(token)

        if doomed or stale:
            pipe = self.r.pipeline(transaction=True)
            for token in doomed:
                pipe.delete(self._k(token))
            pipe.srem(self._ku(user_id), *(doomed + stale))
            pipe.execute()
        return len(doomed)

    def set_all_revoked_for_user(self, user_id: int) -> int:
        tokens = [t for t in self._members(user_id) if self.r.exists(self._k(t))]
        if not tokens:
            return 0
        pipe = self.r.pipeline(transaction=True)
        for token in tokens:
            pipe.hset(self._k(token), "revoked", "1")
        pipe.execute()
        return len(tokens)

    def list_for_user(self, user_id: int) -> list[RefreshTokenRecord]:
        records: list[RefreshTokenRecord] = []
        for token in self._members(user_id):
            h = self.r.hgetall(self._k(token))
            if h:
                records.append(self._record(token, h))
        return records
