from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.enums import Role


@dataclass(frozen=True)
class User:
    """Domain entity: a row of user_account.

    Note: plain data object, no DB access here.
    """

    user_id: int
    name: str
    email: str
    password_hash: str
    role: Role
    is_active: bool = True
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    date_of_join: Optional[date] = None
    last_login_at: Optional[datetime] = None
    password_changed_at: Optional[datetime] = None
    created_at: Optional[datetime] = None

    @property
    def requires_password_change(self) -> bool:
        return self.last_login_at is None or self.password_changed_at is None


@dataclass(frozen=True)
class SsoProfile:
    """Claims already extracted from the identity provider's assertion."""

    subject_id: str
    email: Optional[str]
    display_name: Optional[str]


def default_employee_code(user_id: int) -> str:
    """Code given to accounts created without one, derived from the row id."""
    return f"EMP{int(user_id):04d}"


def public_user(user: User) -> dict:
    return {
        "id": user.user_id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "employee_code": user.employee_code,
        "phone": user.phone,
        "department": user.department,
        "position": user.position,
        "location": user.location,
        "date_of_join": user.date_of_join,
        "status": "active" if user.is_active else "inactive",
        "last_login_at": user.last_login_at,
        "created_at": user.created_at,
    }
