# memberhub/services/auth/service.py
from __future__ import annotations

import logging
import secrets
from urllib.parse import urlencode

from memberhub.core.config import AuthSettings
from memberhub.models.base import as_utc
from memberhub.models.user import User
from memberhub.services._shared.base import BaseService
from memberhub.services._shared.errors import (
    AuthenticationError,
    ConflictError,
    InvalidCredentialsError,
    ServiceError,
)
from memberhub.services._shared.ports import MailSender
from memberhub.services.auth.dto import (
    ChangePasswordIn,
    ForgotPasswordIn,
    LoginIn,
    LoginOut,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
    TokenPairOut,
    UserPublicOut,
)
from memberhub.services.auth.refresh_tokens import RefreshTokenManager

log = logging.getLogger(__name__)

FORGOT_PASSWORD_MESSAGE = "If that email is registered, a password reset link has been sent."


class AuthService(BaseService):
    """
    Authentication facade (register / login / refresh / logout / passwords).

    Credential checks go through :class:`UserRepository`; token lifecycle is
    delegated to :class:`RefreshTokenManager`. Password changes keep existing
    sessions alive; a password reset revokes every refresh token of the user.
    """

    def __init__(
        self,
        *,
        refresh_tokens: RefreshTokenManager,
        mail_sender: MailSender,
        settings: AuthSettings,
    ) -> None:
        super().__init__()
        self.refresh_tokens = refresh_tokens
        self.mail = mail_sender
        self.settings = settings

    # ------------------------------------------------------------------ #
    # Registration
    # ------------------------------------------------------------------ #

    def register(self, dto: RegisterIn) -> UserPublicOut:
        """
        Create a staff account that must set its own password.

        :raises ConflictError: If the email is already registered.
        """
        reset_token = secrets.token_urlsafe(32)
        now = self.refresh_tokens.clock()

        with self.rw_uow() as uow:
            if uow.users.exists_by_email(dto.email):
                raise ConflictError("User", "email already registered")
            try:
                user = User(
                    name=dto.name,
                    email=dto.email,
                    phone=dto.phone,
                    role=dto.role,
                    must_change_password=True,
                    reset_token=reset_token,
                    reset_token_expires_at=now + self.settings.welcome_link_ttl,
                )
                user.password = dto.password or secrets.token_urlsafe(12)
            except ValueError as exc:
                # model validators, e.g. a whitespace-only name
                raise ServiceError(str(exc)) from exc
            uow.users.add(user)
            out = UserPublicOut.from_model(user)

        self.mail.send_mail(
            out.email,
            "Welcome to MemberHub",
            (
                f"<p>Hello {out.name},</p>"
                "<p>An account has been created for you. Choose your password here:</p>"
                f'<p><a href="{self._reset_link(reset_token)}">Set your password</a></p>'
            ),
        )
        log.info("user registered", extra={"user_id": out.id, "event": "auth.register"})
        return out

    # ------------------------------------------------------------------ #
    # Sessions
    # ------------------------------------------------------------------ #

    def login(self, dto: LoginIn) -> LoginOut:
        """
        Verify credentials and issue an access/refresh pair.

        :raises InvalidCredentialsError: Unknown email or wrong password.
        """
        with self.ro_uow() as uow:
            user = uow.users.authenticate(dto.email, dto.password)
            if user is None:
                raise InvalidCredentialsError()
            summary = UserPublicOut.from_model(user)

        refresh_token = self.refresh_tokens.create_refresh_token(summary.id)
        access_token = self.refresh_tokens.issue_access_token(summary)
        log.info("login succeeded", extra={"user_id": summary.id, "event": "auth.login"})
        return LoginOut(access_token=access_token, refresh_token=refresh_token, user=summary)

    def refresh(self, dto: RefreshIn) -> TokenPairOut:
        return self.refresh_tokens.rotate_refresh_token(dto.refresh_token)

    def logout(self, dto: LogoutIn) -> None:
        self.refresh_tokens.revoke_refresh_token(dto.refresh_token)
        log.info("logout", extra={"event": "auth.logout"})

    def whoami(self, user_id: int) -> UserPublicOut:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise AuthenticationError("Authenticated user no longer exists")
            return UserPublicOut.from_model(user)

    # ------------------------------------------------------------------ #
    # Passwords
    # ------------------------------------------------------------------ #

    def change_password(self, dto: ChangePasswordIn) -> None:
        """
        Replace the password after verifying the current one.

        Clears ``must_change_password``. Existing refresh tokens stay valid.

        :raises InvalidCredentialsError: If ``current_password`` is wrong.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                raise AuthenticationError("Authenticated user no longer exists")
            if not user.verify_password(dto.current_password):
                raise InvalidCredentialsError("Current password is incorrect")
            uow.users.set_password(user, dto.new_password)
        log.info("password changed", extra={"user_id": dto.user_id, "event": "auth.password"})

    def forgot_password(self, dto: ForgotPasswordIn) -> str:
        """
        Issue a one-shot reset token and mail it.

        The returned message is identical whether or not the email exists.
        """
        token = secrets.token_urlsafe(32)
        expires_at = self.refresh_tokens.clock() + self.settings.password_reset_ttl

        with self.rw_uow() as uow:
            user = uow.users.get_by_email(dto.email)
            recipient = user.email if user is not None else None
            if user is not None:
                uow.users.set_reset_token(user, token, expires_at)

        if recipient is not None:
            self.mail.send_mail(
                recipient,
                "Reset your password",
                (
                    "<p>We received a request to reset your password.</p>"
                    f'<p><a href="{self._reset_link(token)}">Reset password</a></p>'
                    "<p>This link expires in one hour.</p>"
                ),
            )
        return FORGOT_PASSWORD_MESSAGE

    def reset_password(self, dto: ResetPasswordIn) -> None:
        """
        Consume a reset token, set the new password and end all sessions.

        :raises ServiceError: If the token is unknown or expired.
        """
        now = self.refresh_tokens.clock()
        with self.rw_uow() as uow:
            user = uow.users.get_by_reset_token(dto.token)
            if (
                user is None
                or user.reset_token_expires_at is None
                or as_utc(user.reset_token_expires_at) <= now
            ):
                raise ServiceError("Invalid or expired reset token")
            uow.users.set_password(user, dto.new_password)
            uow.users.set_reset_token(user, None, None)
            user_id = user.id

        self.refresh_tokens.revoke_all_user_tokens(user_id)
        log.info("password reset", extra={"user_id": user_id, "event": "auth.password_reset"})

    # ------------------------------------------------------------------ #
    # Utilities
    # ------------------------------------------------------------------ #

    def _reset_link(self, token: str) -> str:
        return f"{self.settings.frontend_url}/reset-password?{urlencode({'token': token})}"
