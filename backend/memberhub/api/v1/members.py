"""Member endpoints."""

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
    MarkAttendanceSchema,
    MemberCreateSchema,
    MemberFilterSchema,
    MemberSchema,
    MemberSearchQuerySchema,
    MemberUpdateSchema,
    build_meta,
)
from memberhub.services._shared.policies.roles import ADMINS
from memberhub.services.members.dto import MemberCreateIn, MemberListIn
from memberhub.services.members.service import MemberService

bp = Blueprint("members", __name__, url_prefix="/members")

member_schema = MemberSchema()
member_list_schema = MemberSchema(many=True)
member_create_schema = MemberCreateSchema()
member_update_schema = MemberUpdateSchema()
member_filter_schema = MemberFilterSchema()
member_search_schema = MemberSearchQuerySchema()
mark_attendance_schema = MarkAttendanceSchema()


@bp.get("")
@require_auth
@timing
def list_members():
    """
    Return paginated members.

    Filters: ``zoneId``, ``cellId``, ``status``, ``conversionStatus`` and
    ``search`` (substring of name, email or phone).
    """

    filters = member_filter_schema.load(request.args)
    pagination = parse_pagination()
    result = MemberService(ctx=service_context()).list_members(
        MemberListIn(**pagination, **filters)
    )
    data = member_list_schema.dump(result.items)
    return json_response({"data": data, "meta": build_meta(result.meta)})


@bp.get("/search")
@require_auth
@timing
def search_members():
    """Members already registered with ``?phone=`` or ``?email=``, newest first."""

    query = member_search_schema.load(request.args)
    members = MemberService(ctx=service_context()).search_existing(**query)
    return json_response(
        {"data": member_list_schema.dump(members), "meta": {"matchCount": len(members)}}
    )


@bp.get("/<int:member_id>")
@require_auth
@timing
def get_member(member_id: int):
    member = MemberService(ctx=service_context()).get_member(member_id)
    return json_response({"data": member_schema.dump(member)})


@bp.post("")
@require_roles(*ADMINS)
@timing
def create_member():
    data = member_create_schema.load(json_body())
    member = MemberService(ctx=service_context()).create_member(MemberCreateIn(**data))
    return json_response({"data": member_schema.dump(member)}, status=201)


@bp.patch("/<int:member_id>")
@require_auth
@timing
def update_member(member_id: int):
    changes = member_update_schema.load(json_body())
    member = MemberService(ctx=service_context()).update_member(member_id, changes)
    return json_response({"data": member_schema.dump(member)})


@bp.delete("/<int:member_id>")
@require_roles(*ADMINS)
@timing
def delete_member(member_id: int):
    MemberService(ctx=service_context()).delete_member(member_id)
    return "", 204


@bp.post("/<int:member_id>/attendance")
@require_auth
@timing
def mark_attendance(member_id: int):
    data = mark_attendance_schema.load(json_body())
    member = MemberService(ctx=service_context()).mark_attendance(member_id, **data)
    return json_response({"data": member_schema.dump(member)})
