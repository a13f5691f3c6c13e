# memberhub/services/members/dto.py
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime

from memberhub.models.base import as_utc
from memberhub.models.member import (
    ConversionStatus,
    FollowUp,
    FollowUpStatus,
    FollowUpType,
    Member,
    MemberStatus,
)


@dataclass(frozen=True, slots=True)
class MemberCreateIn:
    """
    Input DTO for member registration.

    :param first_visit: Historical first visit; defaults to now.
    :param status: Initial status before derivation rules apply.
    """

    name: str
    phone: str
    address: str
    gender: str
    zone_id: int
    cell_id: int
    email: str | None = None
    first_visit: datetime | None = None
    status: MemberStatus | None = None
    conversion_status: ConversionStatus | None = None
    sunday_attendance: int = 0
    prayer_request: str | None = None


@dataclass(frozen=True, slots=True)
class MemberListIn:
    page: int = 1
    limit: int = 20
    sort: list[str] = field(default_factory=list)
    zone_id: int | None = None
    cell_id: int | None = None
    status: MemberStatus | None = None
    conversion_status: ConversionStatus | None = None
    search: str | None = None


@dataclass(frozen=True, slots=True)
class MemberOut:
    id: int
    name: str
    email: str | None
    phone: str
    address: str
    gender: str
    zone_id: int
    cell_id: int
    status: MemberStatus
    conversion_status: ConversionStatus
    sunday_attendance: int
    first_visit: datetime
    last_visit: datetime
    prayer_request: str | None

    @classmethod
    def from_model(cls, m: Member) -> MemberOut:
        return cls(
            id=m.id,
            name=m.name,
            email=m.email,
            phone=m.phone,
            address=m.address,
            gender=m.gender,
            zone_id=m.zone_id,
            cell_id=m.cell_id,
            status=MemberStatus(m.status),
            conversion_status=ConversionStatus(m.conversion_status),
            sunday_attendance=m.sunday_attendance,
            first_visit=as_utc(m.first_visit),
            last_visit=as_utc(m.last_visit),
            prayer_request=m.prayer_request,
        )


@dataclass(frozen=True, slots=True)
class FollowUpCreateIn:
    member_id: int
    user_id: int
    type: FollowUpType
    notes: str | None = None
    next_follow_up_date: datetime | None = None


@dataclass(frozen=True, slots=True)
class FollowUpOut:
    id: int
    member_id: int
    user_id: int
    type: FollowUpType
    status: FollowUpStatus
    notes: str | None
    next_follow_up_date: datetime | None
    created_at: datetime

    @classmethod
    def from_model(cls, f: FollowUp) -> FollowUpOut:
        return cls(
            id=f.id,
            member_id=f.member_id,
            user_id=f.user_id,
            type=FollowUpType(f.type),
            status=FollowUpStatus(f.status),
            notes=f.notes,
            next_follow_up_date=as_utc(f.next_follow_up_date) if f.next_follow_up_date else None,
            created_at=as_utc(f.created_at),
        )
