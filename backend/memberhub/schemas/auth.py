"""Authentication-related Marshmallow schemas (camelCase on the wire)."""

from __future__ import annotations

from marshmallow import Schema, fields, validate

from memberhub.models.user import UserRole

_password = validate.Length(min=8, max=128)


class RegisterSchema(Schema):
    """Input payload for staff registration (password optional)."""

    name = fields.String(required=True, validate=validate.Length(min=1, max=120))
    email = fields.Email(required=True, validate=validate.Length(max=254))
    phone = fields.String(load_default=None, allow_none=True, validate=validate.Length(max=32))
    role = fields.Enum(UserRole, by_value=True, required=True)
    password = fields.String(load_default=None, allow_none=True, validate=_password)


class LoginSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))
    password = fields.String(required=True, validate=validate.Length(min=1, max=128))


class RefreshTokenSchema(Schema):
    """Body carrying an opaque refresh token (refresh and logout)."""

    refresh_token = fields.String(
        required=True, data_key="refreshToken", validate=validate.Length(min=1)
    )


class ChangePasswordSchema(Schema):
    current_password = fields.String(required=True, data_key="currentPassword")
    new_password = fields.String(required=True, data_key="newPassword", validate=_password)


class ForgotPasswordSchema(Schema):
    email = fields.Email(required=True, validate=validate.Length(max=254))


class ResetPasswordSchema(Schema):
    token = fields.String(required=True, validate=validate.Length(min=1))
    new_password = fields.String(required=True, data_key="newPassword", validate=_password)


class UserSchema(Schema):
    """Public representation of a staff user."""

    id = fields.Integer(required=True)
    email = fields.Email(required=True)
    name = fields.String(required=True)
    phone = fields.String(allow_none=True)
    role = fields.Enum(UserRole, by_value=True)
    must_change_password = fields.Boolean(data_key="mustChangePassword")


class TokenPairSchema(Schema):
    access_token = fields.String(required=True, data_key="accessToken")
    refresh_token = fields.String(required=True, data_key="refreshToken")


class LoginResponseSchema(TokenPairSchema):
    user = fields.Nested(UserSchema)
