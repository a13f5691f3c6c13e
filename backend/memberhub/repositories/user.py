"""Staff accounts: lookups, credential checks and password state."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import select

from memberhub.models.user import User, UserRole
from memberhub.repositories.base import BaseRepository


def _normalise_email(email: str) -> str:
    return email.strip().lower()


class UserRepository(BaseRepository[User]):
    """
    Persistence for :class:`User`. Issues no tokens.

    ``role`` and ``password`` are deliberately absent from ``updatable``;
    they change through :meth:`change_role` and :meth:`set_password`.
    """

    model = User
    sortable = ("id", "email", "name", "role", "created_at")
    filterable = ("email", "role")
    updatable = frozenset({"name", "email", "phone"})

    def _first(self, *criteria) -> User | None:
        return self.session.execute(select(User).where(*criteria)).scalars().first()

    def get_by_email(self, email: str) -> User | None:
        return self._first(User.email == _normalise_email(email))

    def exists_by_email(self, email: str) -> bool:
        return self.exists(email=_normalise_email(email))

    def get_by_reset_token(self, token: str) -> User | None:
        return self._first(User.reset_token == token)

    def authenticate(self, email: str, password: str) -> User | None:
        """
        :returns: The user when ``password`` matches, otherwise ``None``.
            Unknown email and wrong password are indistinguishable.
        """
        user = self.get_by_email(email)
        if user is None or not user.verify_password(password):
            return None
        return user

    def set_password(self, user: User, new_password: str) -> None:
        # the model setter hashes
        user.password = new_password
        user.must_change_password = False
        self.flush()

    def set_reset_token(self, user: User, token: str | None, expires_at: datetime | None) -> None:
        user.reset_token = token
        user.reset_token_expires_at = expires_at
        self.flush()

    def change_role(self, user: User, role: UserRole) -> User:
        user.role = role
        self.flush()
        return user
