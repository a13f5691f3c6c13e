"""Authentication endpoints: login, token rotation, logout and passwords."""

from __future__ import annotations

from flask import Blueprint

from memberhub.api.deps import (
    auth_service,
    current_user_id,
    json_body,
    json_response,
    require_auth,
    require_roles,
    timing,
)
from memberhub.models.user import UserRole
from memberhub.schemas import (
    ChangePasswordSchema,
    ForgotPasswordSchema,
    LoginResponseSchema,
    LoginSchema,
    RefreshTokenSchema,
    RegisterSchema,
    ResetPasswordSchema,
    TokenPairSchema,
    UserSchema,
)
from memberhub.services.auth.dto import (
    ChangePasswordIn,
    ForgotPasswordIn,
    LoginIn,
    LogoutIn,
    RefreshIn,
    RegisterIn,
    ResetPasswordIn,
)

bp = Blueprint("auth", __name__, url_prefix="/auth")

register_schema = RegisterSchema()
login_schema = LoginSchema()
refresh_schema = RefreshTokenSchema()
change_password_schema = ChangePasswordSchema()
forgot_password_schema = ForgotPasswordSchema()
reset_password_schema = ResetPasswordSchema()
user_schema = UserSchema()
login_response_schema = LoginResponseSchema()
token_pair_schema = TokenPairSchema()


@bp.post("/register")
@require_roles(UserRole.SUPER_ADMIN)
@timing
def register():
    """Create a staff account and send its password-setup email."""

    data = register_schema.load(json_body())
    user = auth_service().register(RegisterIn(**data))
    body = {"message": "User registered successfully", "user": user_schema.dump(user)}
    return json_response(body, status=201)


@bp.post("/login")
@timing
def login():
    data = login_schema.load(json_body())
    result = auth_service().login(LoginIn(**data))
    return json_response(login_response_schema.dump(result))


@bp.post("/refresh")
@timing
def refresh():
    """Rotate a refresh token into a new access/refresh pair."""

    data = refresh_schema.load(json_body())
    pair = auth_service().refresh(RefreshIn(**data))
    return json_response(token_pair_schema.dump(pair))


@bp.post("/logout")
@timing
def logout():
    data = refresh_schema.load(json_body())
    auth_service().logout(LogoutIn(**data))
    return json_response({"message": "Logged out successfully"})


@bp.post("/change-password")
@require_auth
@timing
def change_password():
    data = change_password_schema.load(json_body())
    auth_service().change_password(ChangePasswordIn(user_id=current_user_id(), **data))
    return json_response({"message": "Password changed successfully"})


@bp.post("/forgot-password")
@timing
def forgot_password():
    """Always answers with the same message, whether or not the email exists."""

    data = forgot_password_schema.load(json_body())
    message = auth_service().forgot_password(ForgotPasswordIn(**data))
    return json_response({"message": message})


@bp.post("/reset-password")
@timing
def reset_password():
    data = reset_password_schema.load(json_body())
    auth_service().reset_password(ResetPasswordIn(**data))
    return json_response({"message": "Password has been reset successfully"})


@bp.get("/me")
@require_auth
@timing
def me():
    """Return the authenticated user profile."""

    user = auth_service().whoami(current_user_id())
    return json_response(user_schema.dump(user))
