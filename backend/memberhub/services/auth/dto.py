# memberhub/services/auth/dto.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from memberhub.models.user import User, UserRole

# ---------------------------- Input DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class RegisterIn:
    """
    Input DTO for staff registration.

    :param password: Optional initial password; a random one is generated
        when omitted.
    :type password: str | None
    """

    name: str
    email: str
    role: UserRole
    phone: str | None = None
    password: str | None = None


@dataclass(frozen=True, slots=True)
class LoginIn:
    """
    Input DTO for login.

    :param email: User email.
    :type email: str
    :param password: Raw password (to be verified).
    :type password: str
    """

    email: str
    password: str


@dataclass(frozen=True, slots=True)
class RefreshIn:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LogoutIn:
    refresh_token: str


@dataclass(frozen=True, slots=True)
class ChangePasswordIn:
    user_id: int
    current_password: str
    new_password: str


@dataclass(frozen=True, slots=True)
class ForgotPasswordIn:
    email: str


@dataclass(frozen=True, slots=True)
class ResetPasswordIn:
    token: str
    new_password: str


# --------------------------- Output DTOs ---------------------------------- #


@dataclass(frozen=True, slots=True)
class UserPublicOut:
    """
    Public user summary (never includes hashes or reset tokens).
    """

    id: int
    email: str
    name: str
    phone: str | None
    role: UserRole
    must_change_password: bool

    @classmethod
    def from_model(cls, user: User) -> UserPublicOut:
        return cls(
            id=user.id,
            email=user.email,
            name=user.name,
            phone=user.phone,
            role=UserRole(user.role),
            must_change_password=bool(user.must_change_password),
        )

    def access_claims(self) -> dict[str, Any]:
        """Claims embedded in access tokens, read from the record at issuance time."""
        return {
            "email": self.email,
            "role": self.role.value,
            "mustChangePassword": self.must_change_password,
        }


@dataclass(frozen=True, slots=True)
class TokenPairOut:
    """
    Output DTO with access and refresh tokens.

    :param access_token: Encoded access JWT.
    :type access_token: str
    :param refresh_token: Opaque refresh token.
    :type refresh_token: str
    """

    access_token: str
    refresh_token: str


@dataclass(frozen=True, slots=True)
class LoginOut:
    access_token: str
    refresh_token: str
    user: UserPublicOut
