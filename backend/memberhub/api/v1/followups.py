"""Follow-up endpoints."""

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
from memberhub.schemas import (
    FollowUpCreateSchema,
    FollowUpFilterSchema,
    FollowUpSchema,
    FollowUpUpdateSchema,
    build_meta,
)
from memberhub.services._shared.policies.roles import ADMINS, FOLLOW_UP_EDITORS
from memberhub.services.members.dto import FollowUpCreateIn
from memberhub.services.members.service import FollowUpService

bp = Blueprint("followups", __name__, url_prefix="/followups")

follow_up_schema = FollowUpSchema()
follow_up_list_schema = FollowUpSchema(many=True)
follow_up_create_schema = FollowUpCreateSchema()
follow_up_update_schema = FollowUpUpdateSchema()
follow_up_filter_schema = FollowUpFilterSchema()


@bp.get("")
@require_auth
@timing
def list_follow_ups():
    filters = follow_up_filter_schema.load(request.args)
    pagination = parse_pagination()
    result = FollowUpService(ctx=service_context()).list_follow_ups(**pagination, **filters)
    data = follow_up_list_schema.dump(result.items)
    return json_response({"data": data, "meta": build_meta(result.meta)})


@bp.get("/<int:follow_up_id>")
@require_auth
@timing
def get_follow_up(follow_up_id: int):
    follow_up = FollowUpService(ctx=service_context()).get_follow_up(follow_up_id)
    return json_response({"data": follow_up_schema.dump(follow_up)})


@bp.post("")
@require_roles(*FOLLOW_UP_EDITORS)
@timing
def create_follow_up():
    data = follow_up_create_schema.load(json_body())
    follow_up = FollowUpService(ctx=service_context()).create_follow_up(FollowUpCreateIn(**data))
    return json_response({"data": follow_up_schema.dump(follow_up)}, status=201)


@bp.patch("/<int:follow_up_id>")
@require_roles(*FOLLOW_UP_EDITORS)
@timing
def update_follow_up(follow_up_id: int):
    changes = follow_up_update_schema.load(json_body())
    follow_up = FollowUpService(ctx=service_context()).update_follow_up(follow_up_id, changes)
    return json_response({"data": follow_up_schema.dump(follow_up)})


@bp.delete("/<int:follow_up_id>")
@require_roles(*ADMINS)
@timing
def delete_follow_up(follow_up_id: int):
    FollowUpService(ctx=service_context()).delete_follow_up(follow_up_id)
    return "", 204
