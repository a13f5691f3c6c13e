"""User administration schemas."""

from __future__ import annotations

from marshmallow import EXCLUDE, Schema, fields, validate

from memberhub.models.user import UserRole


class UserUpdateSchema(Schema):
    """Partial update payload; every field is optional."""

    name = fields.String(validate=validate.Length(min=1, max=120))
    email = fields.Email(validate=validate.Length(max=254))
    phone = fields.String(allow_none=True, validate=validate.Length(max=32))
    role = fields.Enum(UserRole, by_value=True)


class UserFilterSchema(Schema):
    """Supported query parameters for listing users."""

    class Meta:
        unknown = EXCLUDE

    role = fields.Enum(UserRole, by_value=True, load_default=None)
