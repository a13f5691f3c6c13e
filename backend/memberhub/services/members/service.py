"""
Member services
===============

Members (people attending meetings) and the follow-ups assigned to staff.

Status rules at registration:

* a first visit more than seven whole days in the past -> ``SECOND_TIMER``;
* ``sunday_attendance >= 3`` -> ``FULL_MEMBER`` (applied last, so it wins).

On update, raising ``sunday_attendance`` re-evaluates the status (2 ->
``SECOND_TIMER``, 3+ -> ``FULL_MEMBER``) and stamps ``last_visit``. Marking
attendance applies the same rule to the incremented count, once per day.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from datetime import datetime, timedelta
from typing import Any

from memberhub.models.base import as_utc, utcnow
from memberhub.models.member import (
    ConversionStatus,
    FollowUp,
    FollowUpStatus,
    Member,
    MemberStatus,
)
from memberhub.services._shared.base import BaseService, ServiceContext
from memberhub.services._shared.dto import ListOut, PageMeta
from memberhub.services._shared.errors import ConflictError, NotFoundError, ServiceError
from memberhub.services.members.dto import (
    FollowUpCreateIn,
    FollowUpOut,
    MemberCreateIn,
    MemberListIn,
    MemberOut,
)
from memberhub.uow.sqlalchemy_uow import SQLAlchemyRepositoryContainer

log = logging.getLogger(__name__)

SECOND_TIMER_AFTER = timedelta(days=7)
SECOND_TIMER_ATTENDANCE = 2
FULL_MEMBER_ATTENDANCE = 3


def status_for_attendance(count: int, current: MemberStatus) -> MemberStatus:
    """2 attendances -> ``SECOND_TIMER``, 3 or more -> ``FULL_MEMBER``, else ``current``."""
    if count >= FULL_MEMBER_ATTENDANCE:
        return MemberStatus.FULL_MEMBER
    if count == SECOND_TIMER_ATTENDANCE:
        return MemberStatus.SECOND_TIMER
    return current


def derive_initial_status(
    *,
    first_visit: datetime,
    sunday_attendance: int,
    requested: MemberStatus | None,
    now: datetime,
    historical: bool,
) -> MemberStatus:
    """
    Compute the status of a newly registered member.

    :param historical: ``True`` when ``first_visit`` was supplied by the caller.
    """
    status = requested or MemberStatus.FIRST_TIMER
    if historical and (now - as_utc(first_visit)).days > SECOND_TIMER_AFTER.days:
        status = MemberStatus.SECOND_TIMER
    if sunday_attendance >= FULL_MEMBER_ATTENDANCE:
        status = MemberStatus.FULL_MEMBER
    return status


def _ensure_placement(
    uow: SQLAlchemyRepositoryContainer, *, zone_id: int, cell_id: int
) -> None:
    if uow.zones.get(zone_id) is None:
        raise NotFoundError("Zone", zone_id)
    cell = uow.cells.get(cell_id)
    if cell is None:
        raise NotFoundError("Cell", cell_id)
    if cell.zone_id != zone_id:
        raise ServiceError("Cell does not belong to the given zone.")


class MemberService(BaseService):
    """Application service for members."""

    def __init__(
        self,
        *,
        ctx: ServiceContext | None = None,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        super().__init__(ctx=ctx)
        self._clock = clock

    def list_members(self, dto: MemberListIn) -> ListOut[MemberOut]:
        pagination = self.ensure_pagination(page=dto.page, limit=dto.limit, sort=dto.sort)
        filters = {
            "zone_id": dto.zone_id,
            "cell_id": dto.cell_id,
            "status": dto.status,
            "conversion_status": dto.conversion_status,
            "search": dto.search,
        }
        with self.ro_uow() as uow:
            result = uow.members.paginate(pagination, filters=filters)
            items = [MemberOut.from_model(m) for m in result.items]
        return ListOut(items=items, meta=PageMeta.from_page(result))

    def get_member(self, member_id: int) -> MemberOut:
        with self.ro_uow() as uow:
            member = uow.members.get(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)
            return MemberOut.from_model(member)

    def search_existing(
        self, *, phone: str | None = None, email: str | None = None
    ) -> list[MemberOut]:
        """
        Members already registered with ``phone`` or ``email``, newest first.

        Used before registration to spot duplicates and shared family contacts.

        :raises ServiceError: Neither ``phone`` nor ``email`` was given.
        """
        phone = (phone or "").strip() or None
        email = (email or "").strip() or None
        if phone is None and email is None:
            raise ServiceError("Either phone or email must be provided")
        with self.ro_uow() as uow:
            return [
                MemberOut.from_model(m)
                for m in uow.members.find_by_contact(phone=phone, email=email)
            ]

    def mark_attendance(self, member_id: int, attended_at: datetime | None = None) -> MemberOut:
        """
        Count one Sunday attendance, stamp ``last_visit`` and re-evaluate the status.

        Days are compared in UTC. Registration stamps ``last_visit`` too, so a
        member cannot be marked present on the day they were registered.

        :param attended_at: Day of the meeting; defaults to now.
        :raises NotFoundError: Unknown member.
        :raises ServiceError: Attendance was already marked for that day.
        """
        attended_at = as_utc(attended_at) if attended_at is not None else self._clock()
        with self.rw_uow() as uow:
            member = uow.members.get(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)
            if as_utc(member.last_visit).date() == attended_at.date():
                raise ServiceError("Attendance already marked for this date")
            count = member.sunday_attendance + 1
            uow.members.update(
                member,
                sunday_attendance=count,
                last_visit=attended_at,
                status=status_for_attendance(count, MemberStatus(member.status)),
            )
            out = MemberOut.from_model(member)
        log.info(
            "attendance marked id=%s count=%s status=%s actor=%s",
            member_id,
            out.sunday_attendance,
            out.status.value,
            self.ctx.actor_id,
        )
        return out

    def create_member(self, dto: MemberCreateIn) -> MemberOut:
        """
        Register a member and derive the initial status.

        :raises ConflictError: Email already used by another member.
        :raises NotFoundError: Unknown zone or cell.
        """
        if dto.sunday_attendance < 0:
            raise ServiceError("sunday_attendance must be >= 0.")
        now = self._clock()
        first_visit = dto.first_visit or now
        status = derive_initial_status(
            first_visit=first_visit,
            sunday_attendance=dto.sunday_attendance,
            requested=dto.status,
            now=now,
            historical=dto.first_visit is not None,
        )

        with self.rw_uow() as uow:
            if dto.email and uow.members.email_taken(dto.email):
                raise ConflictError("Member", "email already registered")
            _ensure_placement(uow, zone_id=dto.zone_id, cell_id=dto.cell_id)
            member = uow.members.add(
                Member(
                    name=dto.name,
                    email=dto.email,
                    phone=dto.phone,
                    address=dto.address,
                    gender=dto.gender,
                    zone_id=dto.zone_id,
                    cell_id=dto.cell_id,
                    status=status,
                    conversion_status=dto.conversion_status or ConversionStatus.NOT_CONVERTED,
                    sunday_attendance=dto.sunday_attendance,
                    first_visit=first_visit,
                    last_visit=first_visit,
                    prayer_request=dto.prayer_request,
                )
            )
            out = MemberOut.from_model(member)
        log.info(
            "member created id=%s status=%s actor=%s", out.id, out.status.value, self.ctx.actor_id
        )
        return out

    def update_member(self, member_id: int, changes: Mapping[str, Any]) -> MemberOut:
        updates = dict(changes)
        with self.rw_uow() as uow:
            member = uow.members.get(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)

            email = updates.get("email")
            if email and uow.members.email_taken(email, exclude_id=member_id):
                raise ConflictError("Member", "email already registered")

            if "zone_id" in updates or "cell_id" in updates:
                _ensure_placement(
                    uow,
                    zone_id=updates.get("zone_id", member.zone_id),
                    cell_id=updates.get("cell_id", member.cell_id),
                )

            attendance = updates.pop("sunday_attendance", None)
            if attendance is not None:
                if attendance < 0:
                    raise ServiceError("sunday_attendance must be >= 0.")
                updates["last_visit"] = self._clock()
                if attendance > member.sunday_attendance:
                    updates["sunday_attendance"] = attendance
                    updates["status"] = status_for_attendance(
                        attendance, updates.get("status", MemberStatus(member.status))
                    )

            uow.members.update(member, **updates)
            out = MemberOut.from_model(member)
        log.info("member updated id=%s actor=%s", member_id, self.ctx.actor_id)
        return out

    def delete_member(self, member_id: int) -> None:
        """Delete a member; their follow-ups are removed with them."""
        with self.rw_uow() as uow:
            member = uow.members.get(member_id)
            if member is None:
                raise NotFoundError("Member", member_id)
            uow.members.delete(member)
        log.info("member deleted id=%s actor=%s", member_id, self.ctx.actor_id)


class FollowUpService(BaseService):
    """Follow-ups: pastoral contacts assigned to staff users."""

    def list_follow_ups(
        self,
        *,
        page: int = 1,
        limit: int = 20,
        sort: list[str] | None = None,
        member_id: int | None = None,
        user_id: int | None = None,
        status: FollowUpStatus | None = None,
    ) -> ListOut[FollowUpOut]:
        pagination = self.ensure_pagination(page=page, limit=limit, sort=sort or ["-created_at"])
        filters = {"member_id": member_id, "user_id": user_id, "status": status}
        with self.ro_uow() as uow:
            result = uow.follow_ups.paginate(pagination, filters=filters)
            items = [FollowUpOut.from_model(f) for f in result.items]
        return ListOut(items=items, meta=PageMeta.from_page(result))

    def get_follow_up(self, follow_up_id: int) -> FollowUpOut:
        with self.ro_uow() as uow:
            follow_up = uow.follow_ups.get(follow_up_id)
            if follow_up is None:
                raise NotFoundError("FollowUp", follow_up_id)
            return FollowUpOut.from_model(follow_up)

    def create_follow_up(self, dto: FollowUpCreateIn) -> FollowUpOut:
        with self.rw_uow() as uow:
            if uow.members.get(dto.member_id) is None:
                raise NotFoundError("Member", dto.member_id)
            if uow.users.get(dto.user_id) is None:
                raise NotFoundError("User", dto.user_id)
            follow_up = uow.follow_ups.add(
                FollowUp(
                    member_id=dto.member_id,
                    user_id=dto.user_id,
                    type=dto.type,
                    status=FollowUpStatus.PENDING,
                    notes=dto.notes,
                    next_follow_up_date=dto.next_follow_up_date,
                )
            )
            out = FollowUpOut.from_model(uow.follow_ups.refresh(follow_up))
        log.info(
            "follow-up created id=%s member=%s actor=%s", out.id, out.member_id, self.ctx.actor_id
        )
        return out

    def update_follow_up(self, follow_up_id: int, changes: Mapping[str, Any]) -> FollowUpOut:
        with self.rw_uow() as uow:
            follow_up = uow.follow_ups.get(follow_up_id)
            if follow_up is None:
                raise NotFoundError("FollowUp", follow_up_id)
            assignee = changes.get("user_id")
            if assignee is not None and uow.users.get(assignee) is None:
                raise NotFoundError("User", assignee)
            uow.follow_ups.update(follow_up, **changes)
            out = FollowUpOut.from_model(uow.follow_ups.refresh(follow_up))
        log.info("follow-up updated id=%s actor=%s", follow_up_id, self.ctx.actor_id)
        return out

    def delete_follow_up(self, follow_up_id: int) -> None:
        with self.rw_uow() as uow:
            follow_up = uow.follow_ups.get(follow_up_id)
            if follow_up is None:
                raise NotFoundError("FollowUp", follow_up_id)
            uow.follow_ups.delete(follow_up)
        log.info("follow-up deleted id=%s actor=%s", follow_up_id, self.ctx.actor_id)
