"""flask-jwt-extended implementation of :class:`TokenProvider`."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import timedelta

from flask_jwt_extended import create_access_token, decode_token

from memberhub.core.config import AuthSettings
from memberhub.services._shared.ports.token_provider import Claims


@dataclass(slots=True)
class JWTTokenProvider:
    """
    HS256 access tokens signed with the app's ``JWT_SECRET_KEY``.

    Both methods need an application context. Without an explicit
    ``expires_delta`` tokens live for ``settings.access_expires``.
    """

    settings: AuthSettings

    def create_access_token(
        self,
        *,
        identity: int | str,
        additional_claims: Claims | None = None,
        expires_delta: timedelta | None = None,
    ) -> str:
        return create_access_token(
            identity=str(identity),
            additional_claims=dict(additional_claims or {}),
            expires_delta=expires_delta or self.settings.access_expires,
        )

    def decode(self, token: str) -> Claims:
        return decode_token(token)
