"""Query-string and envelope schemas used by every list endpoint."""

from __future__ import annotations

from typing import Any

from marshmallow import EXCLUDE, Schema, fields, post_load, validate

from memberhub.services._shared.dto import PageMeta


def split_csv(raw: str | None) -> list[str]:
    """``"-name, created_at,"`` -> ``["-name", "created_at"]``."""
    return [part.strip() for part in (raw or "").split(",") if part.strip()]


class PaginationQuerySchema(Schema):
    """
    ``?page=2&limit=50&sort=-created_at,name``.

    ``limit`` defaults to ``default_limit`` and is capped at ``max_limit``;
    other query parameters are ignored so list filters can share the string.
    """

    class Meta:
        unknown = EXCLUDE

    page = fields.Integer(load_default=1, validate=validate.Range(min=1))
    limit = fields.Integer(validate=validate.Range(min=1))
    sort = fields.String(load_default="")

    def __init__(self, *, default_limit: int = 20, max_limit: int = 100, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.default_limit = default_limit
        self.max_limit = max_limit

    @post_load
    def _normalise(self, data: dict[str, Any], **_: Any) -> dict[str, Any]:
        data["limit"] = min(data.get("limit", self.default_limit), self.max_limit)
        data["sort"] = split_csv(data.get("sort"))
        return data


class MetaSchema(Schema):
    total = fields.Integer(required=True)
    page = fields.Integer(required=True)
    limit = fields.Integer(required=True)
    has_prev = fields.Boolean(data_key="hasPrev")
    has_next = fields.Boolean(data_key="hasNext")


_META = MetaSchema()


def build_meta(meta: PageMeta) -> dict[str, Any]:
    return _META.dump(meta)
