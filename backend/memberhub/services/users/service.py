"""
UserAdminService
================

Administrative operations on staff accounts: list, read, update, delete.
Creation goes through :meth:`AuthService.register` so every new account
receives its password-setup email.
"""

from __future__ import annotations

import logging

from memberhub.services._shared.base import BaseService
from memberhub.services._shared.dto import ListOut, PageMeta
from memberhub.services._shared.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ServiceError,
)
from memberhub.services.auth.dto import UserPublicOut
from memberhub.services.users.dto import UserListIn, UserUpdateIn

log = logging.getLogger(__name__)


class UserAdminService(BaseService):
    """Application service for staff accounts."""

    def list_users(self, dto: UserListIn) -> ListOut[UserPublicOut]:
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        with self.ro_uow() as uow:
            page = uow.users.paginate(pagination, filters={"role": dto.role})
            items = [UserPublicOut.from_model(u) for u in page.items]
        return ListOut(items=items, meta=PageMeta.from_page(page))

    def get_user(self, user_id: int) -> UserPublicOut:
        with self.ro_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            return UserPublicOut.from_model(user)

    def update_user(self, dto: UserUpdateIn) -> UserPublicOut:
        """
        Apply whitelisted profile changes and an optional role change.

        :raises NotFoundError: Unknown user.
        :raises ConflictError: The new email belongs to another account.
        :raises ServiceError: A field the model refuses, e.g. a blank name.
        """
        with self.rw_uow() as uow:
            user = uow.users.get(dto.user_id)
            if user is None:
                raise NotFoundError("User", dto.user_id)
            new_email = dto.changes.get("email")
            if new_email and new_email.strip().lower() != user.email:
                if uow.users.exists_by_email(new_email):
                    raise ConflictError("User", "email already registered")
            try:
                uow.users.update(user, **dto.changes)
            except ValueError as exc:
                raise ServiceError(str(exc)) from exc
            if dto.role is not None:
                uow.users.change_role(user, dto.role)
            out = UserPublicOut.from_model(user)
        log.info("user updated", extra={"user_id": out.id, "event": "users.update"})
        return out

    def delete_user(self, user_id: int) -> None:
        """
        Delete an account; its refresh tokens go with it (``ON DELETE CASCADE``).

        :raises AuthorizationError: When the actor targets their own account.
        """
        if self.ctx.actor_id is not None and self.ctx.actor_id == user_id:
            raise AuthorizationError("You cannot delete your own account")
        with self.rw_uow() as uow:
            user = uow.users.get(user_id)
            if user is None:
                raise NotFoundError("User", user_id)
            uow.users.delete(user)
        log.info("user deleted", extra={"user_id": user_id, "event": "users.delete"})
