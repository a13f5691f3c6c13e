"""Members and the follow-up log attached to them."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from sqlalchemy import Select, or_, select

from memberhub.models.member import FollowUp, Member
from memberhub.repositories.base import BaseRepository


class MemberRepository(BaseRepository[Member]):
    model = Member
    sortable = ("id", "name", "first_visit", "last_visit", "created_at")
    filterable = ("zone_id", "cell_id", "status", "conversion_status")
    updatable = frozenset(
        {
            "name",
            "email",
            "phone",
            "address",
            "gender",
            "zone_id",
            "cell_id",
            "status",
            "conversion_status",
            "sunday_attendance",
            "last_visit",
            "prayer_request",
        }
    )

    def email_taken(self, email: str, *, exclude_id: int | None = None) -> bool:
        stmt = select(Member.id).where(Member.email == email.strip().lower())
        if exclude_id is not None:
            stmt = stmt.where(Member.id != exclude_id)
        return self.session.execute(stmt.limit(1)).first() is not None

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any] | None) -> Select[Any]:
        # ``search`` matches name, email or phone, case-insensitively
        stmt = super()._where(stmt, filters)
        term = ((filters or {}).get("search") or "").strip()
        if term:
            stmt = stmt.where(
                or_(
                    Member.name.icontains(term, autoescape=True),
                    Member.email.icontains(term, autoescape=True),
                    Member.phone.icontains(term, autoescape=True),
                )
            )
        return stmt

    def find_by_contact(
        self, *, phone: str | None = None, email: str | None = None
    ) -> list[Member]:
        """Members sharing ``phone`` or ``email``, newest registration first."""
        clauses = []
        if phone:
            clauses.append(Member.phone == phone.strip())
        if email:
            clauses.append(Member.email == email.strip().lower())
        if not clauses:
            return []
        stmt = (
            select(Member)
            .where(or_(*clauses))
            .order_by(Member.created_at.desc(), Member.id.desc())
        )
        return self._scalars(stmt)


class FollowUpRepository(BaseRepository[FollowUp]):
    model = FollowUp
    sortable = ("id", "created_at", "next_follow_up_date")
    filterable = ("member_id", "user_id", "status")
    updatable = frozenset({"type", "status", "notes", "next_follow_up_date", "user_id"})
