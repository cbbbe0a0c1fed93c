from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Dict

from jose import JWTError, jwt

from ..core.enums import Role
from ..core.exceptions import AuthenticationError

ACCESS = "access"
REFRESH = "refresh"


@dataclass(frozen=True)
class TokenSettings:
    access_secret: str
    refresh_secret: str
    algorithm: str = "HS256"
    access_minutes: int = 15
    refresh_days: int = 7


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


class TokenService:
    """Issue and verify JWT access/refresh tokens."""

    def __init__(self, settings: TokenSettings):
        self._settings = settings

    @property
    def settings(self) -> TokenSettings:
        return self._settings

    def _encode(self, claims: Dict[str, Any], *, secret: str, ttl: timedelta) -> str:
        payload = dict(claims)
        payload["exp"] = datetime.now(timezone.utc) + ttl
        return jwt.encode(payload, secret, algorithm=self._settings.algorithm)

    def issue_access(self, *, user_id: int, role: Role) -> str:
        return self._encode(
            {"id": int(user_id), "role": role.value, "type": ACCESS},
            secret=self._settings.access_secret,
            ttl=timedelta(minutes=self._settings.access_minutes),
        )

    def issue_refresh(self, *, user_id: int) -> str:
        return self._encode(
            {"id": int(user_id), "type": REFRESH},
            secret=self._settings.refresh_secret,
            ttl=timedelta(days=self._settings.refresh_days),
        )

    def issue_pair(self, *, user_id: int, role: Role) -> TokenPair:
        return TokenPair(
            access_token=self.issue_access(user_id=user_id, role=role),
            refresh_token=self.issue_refresh(user_id=user_id),
        )

    def _decode(self, token: str, *, secret: str, expected_type: str) -> Dict[str, Any]:
        try:
            claims = jwt.decode(token, secret, algorithms=[self._settings.algorithm])
        except JWTError:
            raise AuthenticationError("Not authorized, token failed")
        if claims.get("type") != expected_type or "id" not in claims:
            raise AuthenticationError("Not authorized, token failed")
        return claims

    def decode_access(self, token: str) -> int:
        """Return the user id carried by a valid access token."""
        return int(self._decode(token, secret=self._settings.access_secret, expected_type=ACCESS)["id"])

    def decode_refresh(self, token: str) -> int:
        return int(self._decode(token, secret=self._settings.refresh_secret, expected_type=REFRESH)["id"])
