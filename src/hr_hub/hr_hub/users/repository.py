from __future__ import annotations

from datetime import date, datetime
from typing import Any, Mapping, Optional, Protocol, Sequence

from ..core.enums import Role
from .model import User

# Columns an update may touch through update_fields()
UPDATABLE_COLUMNS = frozenset(
    {
        "name",
        "email",
        "phone",
        "employee_code",
        "role",
        "department",
        "position",
        "location",
        "date_of_join",
        "is_active",
    }
)


class UserRepository(Protocol):
    """Repository interface for user accounts.

    Services depend on this protocol, never on a concrete database.
    """

    def get_by_id(self, user_id: int) -> Optional[User]:
        raise NotImplementedError

    def get_by_email(self, email: str) -> Optional[User]:
        raise NotImplementedError

    def email_taken(self, email: str, *, exclude_user_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def create_user(
        self,
        *,
        name: str,
        email: str,
        password_hash: str,
        role: Role,
        employee_code: Optional[str] = None,
        is_active: bool = True,
        phone: Optional[str] = None,
        department: Optional[str] = None,
        position: Optional[str] = None,
        location: Optional[str] = None,
        date_of_join: Optional[date] = None,
    ) -> int:
        raise NotImplementedError

    def update_fields(self, user_id: int, fields: Mapping[str, Any]) -> bool:
        raise NotImplementedError

    def list_users(self, *, role: Optional[Role] = None, active: Optional[bool] = None) -> Sequence[User]:
        raise NotImplementedError

    def employee_code_taken(self, employee_code: str, *, exclude_user_id: Optional[int] = None) -> bool:
        raise NotImplementedError

    def touch_last_login(self, user_id: int) -> None:
        raise NotImplementedError

    def set_password(self, user_id: int, *, password_hash: str, first_login: bool = False) -> None:
        """Store a new hash, stamp password_changed_at and clear any reset token."""
        raise NotImplementedError

    def set_reset_token(self, user_id: int, *, token: str, expires_at: datetime) -> None:
        raise NotImplementedError

    def get_by_reset_token(self, token: str, *, now: datetime) -> Optional[User]:
        raise NotImplementedError

    def get_by_sso_identity(self, *, provider_id: int, subject_id: str) -> Optional[User]:
        raise NotImplementedError

    def upsert_sso_identity(
        self,
        *,
        user_id: int,
        provider_id: int,
        subject_id: str,
        email: Optional[str],
        display_name: Optional[str],
    ) -> None:
        raise NotImplementedError
