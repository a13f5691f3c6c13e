"""Zone endpoints."""

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
from memberhub.schemas import ZoneCreateSchema, ZoneSchema, build_meta
from memberhub.services._shared.policies.roles import SUPER_ADMIN_ONLY, ZONE_EDITORS
from memberhub.services.organization.dto import ZoneCreateIn
from memberhub.services.organization.service import ZoneService

bp = Blueprint("zones", __name__, url_prefix="/zones")

zone_schema = ZoneSchema()
zone_list_schema = ZoneSchema(many=True)
zone_create_schema = ZoneCreateSchema()
zone_update_schema = ZoneCreateSchema(partial=True)


@bp.get("")
@require_auth
@timing
def list_zones():
    pagination = parse_pagination()
    result = ZoneService(ctx=service_context()).list_zones(**pagination)
    data = zone_list_schema.dump(result.items)
    return json_response({"data": data, "meta": build_meta(result.meta)})


@bp.get("/<int:zone_id>")
@require_auth
@timing
def get_zone(zone_id: int):
    zone = ZoneService(ctx=service_context()).get_zone(zone_id)
    return json_response({"data": zone_schema.dump(zone)})


@bp.post("")
@require_roles(*SUPER_ADMIN_ONLY)
@timing
def create_zone():
    data = zone_create_schema.load(json_body())
    zone = ZoneService(ctx=service_context()).create_zone(ZoneCreateIn(**data))
    return json_response({"data": zone_schema.dump(zone)}, status=201)


@bp.patch("/<int:zone_id>")
@require_roles(*ZONE_EDITORS)
@timing
def update_zone(zone_id: int):
    changes = zone_update_schema.load(json_body())
    zone = ZoneService(ctx=service_context()).update_zone(zone_id, changes)
    return json_response({"data": zone_schema.dump(zone)})


@bp.delete("/<int:zone_id>")
@require_roles(*SUPER_ADMIN_ONLY)
@timing
def delete_zone(zone_id: int):
    ZoneService(ctx=service_context()).delete_zone(zone_id)
    return "", 204
