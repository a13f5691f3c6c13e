"""Cell endpoints."""

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
from memberhub.schemas import CellCreateSchema, CellFilterSchema, CellSchema, build_meta
from memberhub.services._shared.policies.roles import ADMINS
from memberhub.services.organization.dto import CellCreateIn
from memberhub.services.organization.service import CellService

bp = Blueprint("cells", __name__, url_prefix="/cells")

cell_schema = CellSchema()
cell_list_schema = CellSchema(many=True)
cell_create_schema = CellCreateSchema()
cell_update_schema = CellCreateSchema(partial=True)
cell_filter_schema = CellFilterSchema()


@bp.get("")
@require_auth
@timing
def list_cells():
    """Return paginated cells, optionally restricted to one ``zoneId``."""

    filters = cell_filter_schema.load(request.args)
    pagination = parse_pagination()
    result = CellService(ctx=service_context()).list_cells(**pagination, **filters)
    data = cell_list_schema.dump(result.items)
    return json_response({"data": data, "meta": build_meta(result.meta)})


@bp.get("/<int:cell_id>")
@require_auth
@timing
def get_cell(cell_id: int):
    cell = CellService(ctx=service_context()).get_cell(cell_id)
    return json_response({"data": cell_schema.dump(cell)})


@bp.post("")
@require_roles(*ADMINS)
@timing
def create_cell():
    data = cell_create_schema.load(json_body())
    cell = CellService(ctx=service_context()).create_cell(CellCreateIn(**data))
    return json_response({"data": cell_schema.dump(cell)}, status=201)


@bp.patch("/<int:cell_id>")
@require_roles(*ADMINS)
@timing
def update_cell(cell_id: int):
    changes = cell_update_schema.load(json_body())
    cell = CellService(ctx=service_context()).update_cell(cell_id, changes)
    return json_response({"data": cell_schema.dump(cell)})


@bp.delete("/<int:cell_id>")
@require_roles(*ADMINS)
@timing
def delete_cell(cell_id: int):
    CellService(ctx=service_context()).delete_cell(cell_id)
    return "", 204
