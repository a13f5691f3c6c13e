"""Staff user administration endpoints."""

from __future__ import annotations

from flask import Blueprint, request

from memberhub.api.deps import (
    json_body,
    json_response,
    parse_pagination,
    require_auth,
    require_roles,
    service_context,
    timing,
)
from memberhub.models.user import UserRole
from memberhub.schemas import UserFilterSchema, UserSchema, UserUpdateSchema, build_meta
from memberhub.services.users.dto import UserListIn, UserUpdateIn
from memberhub.services.users.service import UserAdminService

bp = Blueprint("users", __name__, url_prefix="/users")

user_schema = UserSchema()
user_list_schema = UserSchema(many=True)
user_update_schema = UserUpdateSchema()
user_filter_schema = UserFilterSchema()


@bp.get("")
@require_auth
@timing
def list_users():
    """Return paginated users, optionally filtered by ``role``."""

    filters = user_filter_schema.load(request.args)
    pagination = parse_pagination()
    result = UserAdminService(ctx=service_context()).list_users(
        UserListIn(role=filters["role"], **pagination)
    )
    data = user_list_schema.dump(result.items)
    return json_response({"data": data, "meta": build_meta(result.meta)})


@bp.get("/<int:user_id>")
@require_auth
@timing
def get_user(user_id: int):
    user = UserAdminService(ctx=service_context()).get_user(user_id)
    return json_response({"data": user_schema.dump(user)})


@bp.patch("/<int:user_id>")
@require_roles(UserRole.SUPER_ADMIN)
@timing
def update_user(user_id: int):
    changes = user_update_schema.load(json_body())
    role = changes.pop("role", None)
    user = UserAdminService(ctx=service_context()).update_user(
        UserUpdateIn(user_id=user_id, changes=changes, role=role)
    )
    return json_response({"data": user_schema.dump(user)})


@bp.delete("/<int:user_id>")
@require_roles(UserRole.SUPER_ADMIN)
@timing
def delete_user(user_id: int):
    UserAdminService(ctx=service_context()).delete_user(user_id)
    return "", 204
