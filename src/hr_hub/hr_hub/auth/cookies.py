from __future__ import annotations

from typing import Optional

from flask import Response

from ..core.constants import ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE
from .tokens import TokenSettings


def set_auth_cookies(
    response: Response,
    *,
    settings: TokenSettings,
    access_token: str,
    refresh_token: Optional[str] = None,
    secure: bool = False,
) -> Response:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        access_token,
        max_age=settings.access_minutes * 60,
        httponly=True,
        secure=secure,
        samesite="Lax",
    )
    if refresh_token:
        response.set_cookie(
            REFRESH_TOKEN_COOKIE,
            refresh_token,
            max_age=settings.refresh_days * 24 * 60 * 60,
            httponly=True,
            secure=secure,
            samesite="Lax",
        )
    return response


def clear_auth_cookies(response: Response, *, secure: bool = False) -> Response:
    for name in (ACCESS_TOKEN_COOKIE, REFRESH_TOKEN_COOKIE):
        response.delete_cookie(name, httponly=True, secure=secure, samesite="Lax")
    return response
