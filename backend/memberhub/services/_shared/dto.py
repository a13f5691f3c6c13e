"""Result containers every list use-case returns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, TypeVar

from memberhub.repositories.base import Page

T = TypeVar("T")


@dataclass(frozen=True, slots=True)
class PageMeta:
    """Position of one page in a result set; ``page`` is 1-based."""

    page: int
    limit: int
    total: int
    has_prev: bool
    has_next: bool

    @classmethod
    def from_page(cls, page: Page[Any]) -> PageMeta:
        seen = page.page * page.limit
        return cls(
            page=page.page,
            limit=page.limit,
            total=page.total,
            has_prev=page.page > 1,
            has_next=seen < page.total,
        )


@dataclass(frozen=True, slots=True)
class ListOut(Generic[T]):
    items: list[T]
    meta: PageMeta
