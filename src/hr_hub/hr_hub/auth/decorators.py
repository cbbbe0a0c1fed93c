from __future__ import annotations

from dataclasses import dataclass
from functools import wraps
from typing import Optional

from flask import g, request

from ..core.constants import ACCESS_TOKEN_COOKIE
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, AuthorizationError
from ..users.repository import UserRepository
from .tokens import TokenService


@dataclass(frozen=True)
class CurrentUser:
    """Authenticated principal attached to flask.g for one request."""

    user_id: int
    role: Role
    name: str
    email: str


def current_user() -> CurrentUser:
    return g.current_user


def _extract_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if header.startswith("Bearer "):
        return header.split(" ", 1)[1].strip() or None
    return request.cookies.get(ACCESS_TOKEN_COOKIE)


class AuthGuard:
    """Builds the `login_required` / `roles_required` decorators used by controllers."""

    def __init__(self, tokens: TokenService, users: UserRepository):
        self._tokens = tokens
        self._users = users

    def authenticate(self, token: Optional[str]) -> CurrentUser:
        if not token:
            raise AuthenticationError("Not authorized, no token")
        user = self._users.get_by_id(self._tokens.decode_access(token))
        if not user:
            raise AuthenticationError("User not found")
        if not user.is_active:
            raise AuthenticationError("User is inactive")
        return CurrentUser(user_id=user.user_id, role=user.role, name=user.name, email=user.email)

    def login_required(self, view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            g.current_user = self.authenticate(_extract_token())
            return view(*args, **kwargs)

        return wrapper

    def roles_required(self, *roles: Role):
        allowed = frozenset(roles)

        def decorator(view):
            @wraps(view)
            def wrapper(*args, **kwargs):
                g.current_user = self.authenticate(_extract_token())
                if g.current_user.role not in allowed:
                    raise AuthorizationError("Forbidden: insufficient role")
                return view(*args, **kwargs)

            return wrapper

        return decorator
