"""Access-token signing port, plus a transparent double for service tests."""

from __future__ import annotations

from datetime import UTC, datetime, timedelta
from itertools import count
from typing import Any, Protocol

Claims = dict[str, Any]


class TokenProvider(Protocol):
    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: Claims | None = None,
        expires_delta: timedelta | None = None,
    ) -> str: ...

    def decode(self, token: str) -> Claims: ...


class StubTokenProvider:
    """
    Issues opaque ``access.<identity>.<n>`` strings and remembers their claims.

    ``decode`` returns exactly what a real JWT would carry (``sub``, ``type``,
    ``iat``, ``exp`` and the extra claims), without any signing.
    """

    default_lifetime = timedelta(minutes=15)

    def __init__(self) -> None:
        self._serial = count(1)
        self._claims: dict[str, Claims] = {}

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: Claims | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        issued = datetime.now(UTC)
        expires = issued + (expires_delta or self.default_lifetime)
        token = f"access.{identity}.{next(self._serial)}"
        self._claims[token] = {
            "sub": str(identity),
            "type": "access",
            "iat": int(issued.timestamp()),
            "exp": int(expires.timestamp()),
            **(additional_claims or {}),
        }
        return token

    def decode(self, token: str) -> Claims:
        return self._claims[token]
