# tests/unit/infra/test_jwt_token_provider.py
from __future__ import annotations

from datetime import timedelta

from memberhub.core.config import AuthSettings
from memberhub.infra.jwt.flask_jwt_token_provider import JWTTokenProvider


def test_access_token_carries_identity_and_claims(app):
    provider = JWTTokenProvider(settings=AuthSettings.from_mapping(app.config))

    with app.app_context():
        token = provider.create_access_token(
            identity=12, additional_claims={"role": "ADMIN", "mustChangePassword": True}
        )
        claims = provider.decode(token)

    assert claims["sub"] == "12"
    assert claims["role"] == "ADMIN"
    assert claims["mustChangePassword"] is True
    assert claims["type"] == "access"
    assert claims["exp"] - claims["iat"] == 15 * 60


def test_explicit_lifetime_overrides_default(app):
    provider = JWTTokenProvider(settings=AuthSettings.from_mapping(app.config))

    with app.app_context():
        claims = provider.decode(
            provider.create_access_token(identity=1, expires_delta=timedelta(minutes=2))
        )

    assert claims["exp"] - claims["iat"] == 120
