from __future__ import annotations

from flask import Flask, current_app, request

from ..common.request_parsing import parse_body
from ..common.serialization import json_response
from ..container import Container
from ..core.constants import REFRESH_TOKEN_COOKIE
from ..core.enums import PEOPLE_ADMIN_ROLES
from ..users.model import SsoProfile, public_user
from ..users.schemas import (
    ChangePasswordBody,
    FirstTimePasswordBody,
    ForgotPasswordBody,
    LoginBody,
    ProfileUpdate,
    RefreshBody,
    RegisterBody,
    ResetPasswordBody,
    SsoCallbackBody,
    VerifyResetTokenBody,
)
from .cookies import clear_auth_cookies, set_auth_cookies
from .decorators import current_user


def register(app: Flask, container: Container) -> None:
    guard = container.auth_guard
    auth = container.auth_service

    def _secure() -> bool:
        return bool(current_app.config.get("COOKIE_SECURE", False))

    @app.route("/api/auth/login", methods=["POST"], endpoint="auth_login")
    def login():
        body = parse_body(LoginBody)
        result = auth.login(body.email, body.password)
        response, status = json_response(
            {
                "user": public_user(result.user),
                "access_token": result.tokens.access_token,
                "requires_password_change": result.requires_password_change,
            }
        )
        set_auth_cookies(
            response,
            settings=container.tokens.settings,
            access_token=result.tokens.access_token,
            refresh_token=result.tokens.refresh_token,
            secure=_secure(),
        )
        return response, status

    @app.route("/api/auth/refresh", methods=["POST"], endpoint="auth_refresh")
    def refresh():
        body = parse_body(RefreshBody)
        access_token = auth.refresh(body.refresh_token or request.cookies.get(REFRESH_TOKEN_COOKIE))
        response, status = json_response({"access_token": access_token})
        set_auth_cookies(response, settings=container.tokens.settings, access_token=access_token, secure=_secure())
        return response, status

    @app.route("/api/auth/logout", methods=["POST"], endpoint="auth_logout")
    @guard.login_required
    def logout():
        response, status = json_response({"message": "Logged out successfully"})
        clear_auth_cookies(response, secure=_secure())
        return response, status

    @app.route("/api/auth/me", methods=["GET"], endpoint="auth_me")
    @guard.login_required
    def me():
        return json_response(current_user())

    @app.route("/api/auth/register", methods=["POST"], endpoint="auth_register")
    @guard.roles_required(*PEOPLE_ADMIN_ROLES)
    def register_user():
        body = parse_body(RegisterBody)
        user = auth.register(
            name=body.name,
            email=body.email,
            password=body.password,
            role=body.role,
            employee_code=body.employee_code,
        )
        return json_response(public_user(user), 201)

    @app.route("/api/auth/profile", methods=["GET"], endpoint="auth_profile")
    @guard.login_required
    def profile():
        return json_response(public_user(auth.get_profile(current_user().user_id)))

    @app.route("/api/auth/profile", methods=["PUT"], endpoint="auth_update_profile")
    @guard.login_required
    def update_profile():
        body = parse_body(ProfileUpdate)
        user = auth.update_profile(current_user().user_id, name=body.name, email=body.email, phone=body.phone)
        return json_response(public_user(user))

    @app.route("/api/auth/change-password", methods=["POST"], endpoint="auth_change_password")
    @guard.login_required
    def change_password():
        body = parse_body(ChangePasswordBody)
        auth.change_password(
            current_user().user_id,
            current_password=body.current_password,
            new_password=body.new_password,
        )
        return json_response({"message": "Password changed successfully"})

    @app.route("/api/auth/first-time-password", methods=["POST"], endpoint="auth_first_time_password")
    def first_time_password():
        body = parse_body(FirstTimePasswordBody)
        auth.first_time_password(email=body.email, new_password=body.new_password)
        return json_response({"message": "Password set successfully"})

    @app.route("/api/auth/forgot-password", methods=["POST"], endpoint="auth_forgot_password")
    def forgot_password():
        body = parse_body(ForgotPasswordBody)
        auth.forgot_password(body.email)
        return json_response({"message": "If the email is registered, a reset code has been sent"})

    @app.route("/api/auth/verify-reset-token", methods=["POST"], endpoint="auth_verify_reset_token")
    def verify_reset_token():
        body = parse_body(VerifyResetTokenBody)
        auth.verify_reset_token(body.otp)
        return json_response({"message": "OTP verified", "valid": True})

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="auth_reset_password")
    def reset_password():
        body = parse_body(ResetPasswordBody)
        auth.reset_password(token=body.otp, new_password=body.new_password)
        return json_response({"message": "Password reset successfully"})

    @app.route("/api/sso/callback", methods=["POST"], endpoint="sso_callback")
    def sso_callback():
        body = parse_body(SsoCallbackBody)
        user = container.sso_service.resolve_user(
            SsoProfile(subject_id=body.subject_id, email=body.email, display_name=body.display_name)
        )
        tokens = container.tokens.issue_pair(user_id=user.user_id, role=user.role)
        response, status = json_response({"user": public_user(user), "access_token": tokens.access_token})
        set_auth_cookies(
            response,
            settings=container.tokens.settings,
            access_token=tokens.access_token,
            refresh_token=tokens.refresh_token,
            secure=_secure(),
        )
        return response, status
