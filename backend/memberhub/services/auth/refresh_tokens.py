"""Refresh token lifecycle: creation, validation, rotation and revocation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import datetime

from memberhub.core.config import AuthSettings
from memberhub.models.base import utcnow
from memberhub.services._shared.base import BaseService
from memberhub.services._shared.errors import (
    ExpiredTokenError,
    InvalidTokenError,
    RevokedTokenError,
    TokenReusedError,
    UnknownTokenOwnerError,
)
from memberhub.services._shared.ports import (
    RefreshTokenState,
    RefreshTokenStore,
    TokenProvider,
)
from memberhub.services.auth.dto import TokenPairOut, UserPublicOut

log = logging.getLogger(__name__)


class RefreshTokenManager(BaseService):
    """
    Owns the refresh token state machine.

    ``ACTIVE -> REVOKED`` happens through revocation or rotation,
    ``ACTIVE -> EXPIRED`` through time. Both end states are terminal; rows in
    them are removed the next time the owner receives a token.

    :param store: Persistence port for refresh tokens.
    :param token_provider: Signs access tokens.
    :param settings: Immutable lifetimes resolved at startup.
    :param clock: Returns the current aware UTC time.
    """

    def __init__(
        self,
        *,
        store: RefreshTokenStore,
        token_provider: TokenProvider,
        settings: AuthSettings,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__()
        self.store = store
        self.tokens = token_provider
        self.settings = settings
        self.clock = clock

    # ------------------------------------------------------------------ #
    # Issuance
    # ------------------------------------------------------------------ #

    def issue_access_token(self, user: UserPublicOut) -> str:
        return self.tokens.create_access_token(
            identity=user.id,
            additional_claims=user.access_claims(),
            expires_delta=self.settings.access_expires,
        )

    def create_refresh_token(self, user_id: int) -> str:
        """
        Persist and return a new ACTIVE token for ``user_id``.

        The user's expired and revoked rows are purged first. Store failures
        propagate unchanged.
        """
        now = self.clock()
        expires_at = now + self.settings.refresh_expires
        purged = self.store.delete_expired_or_revoked(user_id, now)
        if purged:
            log.debug("refresh tokens purged", extra={"user_id": user_id, "event": "auth.purge"})
        token = self.store.new_token()
        self.store.insert(token=token, user_id=user_id, expires_at=expires_at)
        return token

    # ------------------------------------------------------------------ #
    # Validation
    # ------------------------------------------------------------------ #

    def validate_refresh_token(self, token: str) -> int:
        """
        Return the owner id of a usable token.

        :raises InvalidTokenError: Unknown token.
        :raises RevokedTokenError: Token was revoked.
        :raises ExpiredTokenError: ``expires_at <= now``.
        """
        record = self.store.find_by_token(token)
        if record is None:
            raise InvalidTokenError()
        state = record.state(self.clock())
        if state is RefreshTokenState.REVOKED:
            raise RevokedTokenError()
        if state is RefreshTokenState.EXPIRED:
            raise ExpiredTokenError()
        return record.user_id

    # ------------------------------------------------------------------ #
    # Rotation
    # ------------------------------------------------------------------ #

    def rotate_refresh_token(self, old_token: str) -> TokenPairOut:
        """
        Exchange ``old_token`` for a new refresh token and access token.

        The replacement pair is created before ``old_token`` is revoked. If
        the conditional revoke finds the token already revoked, a concurrent
        request won the rotation: the pair minted here is discarded and
        :class:`TokenReusedError` is raised.
        """
        user_id = self.validate_refresh_token(old_token)

        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise UnknownTokenOwnerError()
            summary = UserPublicOut.from_model(user)

        new_token = self.create_refresh_token(summary.id)
        access_token = self.issue_access_token(summary)

        if not self.store.revoke_if_active(old_token):
            self.store.set_revoked(new_token)
            log.warning(
                "refresh token rotated concurrently",
                extra={"user_id": summary.id, "event": "auth.refresh.reuse_detected"},
            )
            raise TokenReusedError()

        log.info("refresh token rotated", extra={"user_id": summary.id, "event": "auth.refresh"})
        return TokenPairOut(access_token=access_token, refresh_token=new_token)

    # ------------------------------------------------------------------ #
    # Revocation
    # ------------------------------------------------------------------ #

    def revoke_refresh_token(self, token: str) -> None:
        """Revoke ``token``; unknown or already revoked tokens are a no-op."""
        self.store.set_revoked(token)

    def revoke_all_user_tokens(self, user_id: int) -> int:
        count = self.store.set_all_revoked_for_user(user_id)
        log.info(
            "refresh tokens revoked for user",
            extra={"user_id": user_id, "event": "auth.revoke_all"},
        )
        return count
