"""
Repository base for SQLAlchemy 2.x models.

Subclasses name their model and three whitelists of column names:

``sortable``
    columns clients may order by (``?sort=-name,created_at``);
``filterable``
    columns accepted as equality filters;
``updatable``
    columns :meth:`BaseRepository.update` may assign.

Anything outside a whitelist is ignored (sorting, filtering) or refused
(updates). Repositories flush but never commit; the Unit of Work does.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar, cast

from sqlalchemy import Select, func, select
from sqlalchemy.orm import Session

from memberhub.core.extensions import db

E = TypeVar("E")


@dataclass(slots=True)
class Pagination:
    """Requested page: 1-based ``page``, page size ``limit``, raw sort tokens."""

    page: int
    limit: int
    sort: list[str]

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


@dataclass(slots=True)
class Page(Generic[E]):
    items: Sequence[E]
    total: int
    page: int
    limit: int


def parse_sort_tokens(raw: Iterable[str]) -> list[tuple[str, bool]]:
    """
    Split ``["-created_at", "name"]`` into ``[("created_at", True), ("name", False)]``.

    Blank tokens and a lone ``-`` are dropped.
    """
    parsed: list[tuple[str, bool]] = []
    for token in raw:
        descending = token.startswith("-")
        name = token.removeprefix("-").strip()
        if name:
            parsed.append((name, descending))
    return parsed


class BaseRepository(Generic[E]):
    model: type[E]
    sortable: ClassVar[tuple[str, ...]] = ("id",)
    filterable: ClassVar[tuple[str, ...]] = ()
    updatable: ClassVar[frozenset[str]] = frozenset()

    def __init__(self, session: Session | None = None) -> None:
        self._session = session

    @property
    def session(self) -> Session:
        """The Unit of Work's session, or the Flask-scoped one when none was given."""
        return self._session if self._session is not None else cast(Session, db.session)

    def _column(self, name: str) -> Any:
        return getattr(self.model, name)

    def _where(self, stmt: Select[Any], filters: Mapping[str, Any] | None) -> Select[Any]:
        for name, value in (filters or {}).items():
            if value is not None and name in self.filterable:
                stmt = stmt.where(self._column(name) == value)
        return stmt

    def _order(self, stmt: Select[Any], tokens: Iterable[str]) -> Select[Any]:
        for name, descending in parse_sort_tokens(tokens):
            if name in self.sortable:
                column = self._column(name)
                stmt = stmt.order_by(column.desc() if descending else column.asc())
        # id last keeps equal sort keys in a stable order across pages
        return stmt.order_by(self._column("id").asc())

    def _scalars(self, stmt: Select[Any]) -> list[E]:
        # unique() is required once a model eager-joins a collection
        return cast(list[E], list(self.session.execute(stmt).unique().scalars().all()))

    # -- reads ---------------------------------------------------------------

    def get(self, entity_id: Any) -> E | None:
        return cast(E | None, self.session.get(self.model, entity_id))

    def exists(self, **filters: Any) -> bool:
        stmt = self._where(select(self._column("id")), filters).limit(1)
        return self.session.execute(stmt).first() is not None

    def list(
        self,
        *,
        filters: Mapping[str, Any] | None = None,
        sort: Iterable[str] | None = None,
    ) -> list[E]:
        return self._scalars(self._order(self._where(select(self.model), filters), sort or ()))

    def paginate(
        self, pagination: Pagination, *, filters: Mapping[str, Any] | None = None
    ) -> Page[E]:
        """Return one page plus the total row count for the same filters."""
        filtered = self._where(select(self.model), filters)
        total = self.session.execute(
            select(func.count()).select_from(filtered.subquery())
        ).scalar_one()
        stmt = self._order(filtered, pagination.sort)
        items = self._scalars(stmt.limit(pagination.limit).offset(pagination.offset))
        return Page(items=items, total=int(total), page=pagination.page, limit=pagination.limit)

    # -- writes --------------------------------------------------------------

    def add(self, instance: E) -> E:
        """Stage ``instance`` and flush so its primary key is assigned."""
        self.session.add(instance)
        self.session.flush()
        return instance

    def update(self, instance: E, **fields: Any) -> E:
        """
        Assign ``fields`` through ``setattr`` so model validators run, then flush.

        :raises ValueError: A key is not in ``updatable``.
        """
        refused = sorted(set(fields) - self.updatable)
        if refused:
            raise ValueError(f"Fields not updatable on {self.model.__name__}: {refused}")
        for name, value in fields.items():
            setattr(instance, name, value)
        self.session.flush()
        return instance

    def delete(self, instance: E) -> None:
        self.session.delete(instance)
        self.session.flush()

    def flush(self) -> None:
        self.session.flush()

    def refresh(self, instance: E) -> E:
        """Reload columns and eager relationships, e.g. after a foreign key changed."""
        self.session.refresh(instance)
        return instance
