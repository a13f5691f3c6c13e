"""Department endpoints."""

from __future__ import annotations

from flask import Blueprint

from memberhub.api.deps import (
    json_body,
    json_response,
    parse_pagination,
    require_auth,
    require_roles,
    service_context,
    timing,
)
from memberhub.schemas import DepartmentCreateSchema, DepartmentSchema, build_meta
from memberhub.services._shared.policies.roles import ADMINS
from memberhub.services.organization.dto import DepartmentCreateIn
from memberhub.services.organization.service import DepartmentService

bp = Blueprint("departments", __name__, url_prefix="/departments")

department_schema = DepartmentSchema()
department_list_schema = DepartmentSchema(many=True)
department_create_schema = DepartmentCreateSchema()
department_update_schema = DepartmentCreateSchema(partial=True)


@bp.get("")
@require_auth
@timing
def list_departments():
    pagination = parse_pagination()
    result = DepartmentService(ctx=service_context()).list_departments(**pagination)
    data = department_list_schema.dump(result.items)
    return json_response({"data": data, "meta": build_meta(result.meta)})


@bp.get("/<int:department_id>")
@require_auth
@timing
def get_department(department_id: int):
    department = DepartmentService(ctx=service_context()).get_department(department_id)
    return json_response({"data": department_schema.dump(department)})


@bp.post("")
@require_roles(*ADMINS)
@timing
def create_department():
    data = department_create_schema.load(json_body())
    department = DepartmentService(ctx=service_context()).create_department(
        DepartmentCreateIn(**data)
    )
    return json_response({"data": department_schema.dump(department)}, status=201)


@bp.patch("/<int:department_id>")
@require_roles(*ADMINS)
@timing
def update_department(department_id: int):
    changes = department_update_schema.load(json_body())
    department = DepartmentService(ctx=service_context()).update_department(
        department_id, changes
    )
    return json_response({"data": department_schema.dump(department)})


@bp.delete("/<int:department_id>")
@require_roles(*ADMINS)
@timing
def delete_department(department_id: int):
    DepartmentService(ctx=service_context()).delete_department(department_id)
    return "", 204
