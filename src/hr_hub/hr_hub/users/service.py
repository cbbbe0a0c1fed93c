from __future__ import annotations

import logging
import secrets
import string
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Any, Optional

from werkzeug.security import check_password_hash, generate_password_hash

from ..auth.tokens import TokenPair, TokenService
from ..common.datetime_utils import now_local
from ..common.validators import normalize_email, require_min_length, require_non_empty
from ..core.constants import OTP_VALID_MINUTES, TEMP_PASSWORD_LENGTH
from ..core.enums import Role
from ..core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from ..notifications.email_sender import EmailSender, password_reset_email, welcome_email
from .model import User, default_employee_code
from .repository import UserRepository

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 8
_TEMP_PASSWORD_CHARS = string.ascii_letters + string.digits + "!@#$%^&*"


def _password_matches(password_hash: str, password: str) -> bool:
    try:
        return check_password_hash(password_hash, password)
    except (TypeError, ValueError):
        # placeholder or corrupted hashes
        return False


def _claim_employee_code(
    users: UserRepository, employee_code: Optional[str], *, exclude_user_id: Optional[int] = None
) -> Optional[str]:
    code = (employee_code or "").strip() or None
    if code and users.employee_code_taken(code, exclude_user_id=exclude_user_id):
        raise ConflictError(f"Employee code {code} already exists")
    return code


def generate_temp_password(length: int = TEMP_PASSWORD_LENGTH) -> str:
    return "".join(secrets.choice(_TEMP_PASSWORD_CHARS) for _ in range(length))


def generate_otp() -> str:
    return f"{secrets.randbelow(900000) + 100000}"


@dataclass(frozen=True)
class LoginResult:
    user: User
    tokens: TokenPair
    requires_password_change: bool


class AuthService:
    """Use cases: login, tokens, own profile and password management."""

    def __init__(self, users: UserRepository, tokens: TokenService, mailer: EmailSender):
        self._users = users
        self._tokens = tokens
        self._mailer = mailer

    def login(self, email: str, password: str) -> LoginResult:
        user = self._users.get_by_email(normalize_email(email))
        if not user:
            raise AuthenticationError("Invalid email address. Please check your email or contact administrator.")
        if not user.is_active:
            raise AuthenticationError("Your account is inactive. Please contact administrator.")
        if not _password_matches(user.password_hash, password):
            raise AuthenticationError("Incorrect password. Please try again or use Forgot Password.")

        requires_change = user.requires_password_change
        self._users.touch_last_login(user.user_id)
        logger.info("User %s logged in", user.user_id)
        return LoginResult(
            user=user,
            tokens=self._tokens.issue_pair(user_id=user.user_id, role=user.role),
            requires_password_change=requires_change,
        )

    def refresh(self, refresh_token: Optional[str]) -> str:
        if not refresh_token:
            raise AuthenticationError("No refresh token")
        user = self._users.get_by_id(self._tokens.decode_refresh(refresh_token))
        if not user or not user.is_active:
            raise AuthenticationError("User not found or inactive")
        return self._tokens.issue_access(user_id=user.user_id, role=user.role)

    def register(
        self,
        *,
        name: str,
        email: str,
        password: str,
        role: Role = Role.EMPLOYEE,
        employee_code: Optional[str] = None,
    ) -> User:
        name = require_non_empty(name, "Name")
        email = normalize_email(email)
        require_min_length(password, "Password", MIN_PASSWORD_LENGTH)

        if self._users.email_taken(email):
            raise ConflictError("User with this email already exists")
        employee_code = _claim_employee_code(self._users, employee_code)

        user_id = self._users.create_user(
            name=name,
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            employee_code=employee_code,
        )
        return self.get_profile(user_id)

    def get_profile(self, user_id: int) -> User:
        user = self._users.get_by_id(int(user_id))
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(
        self,
        user_id: int,
        *,
        name: Optional[str] = None,
        email: Optional[str] = None,
        phone: Optional[str] = None,
    ) -> User:
        fields: dict[str, Any] = {}
        if name:
            fields["name"] = require_non_empty(name, "Name")
        if email:
            email = normalize_email(email)
            if self._users.email_taken(email, exclude_user_id=int(user_id)):
                raise ConflictError("Email already exists")
            fields["email"] = email
        if phone is not None:
            fields["phone"] = phone.strip() or None
        if not fields:
            raise ValidationError("No valid fields to update")

        self._users.update_fields(int(user_id), fields)
        return self.get_profile(user_id)

    def change_password(self, user_id: int, *, current_password: str, new_password: str) -> None:
        user = self.get_profile(user_id)
        if not _password_matches(user.password_hash, current_password):
            raise ValidationError("Current password is incorrect")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        self._users.set_password(user.user_id, password_hash=generate_password_hash(new_password))

    def first_time_password(self, *, email: str, new_password: str) -> None:
        user = self._users.get_by_email(normalize_email(email))
        if not user:
            raise NotFoundError("User not found")
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        self._users.set_password(user.user_id, password_hash=generate_password_hash(new_password), first_login=True)

    def forgot_password(self, email: str, *, now: Optional[datetime] = None) -> Optional[str]:
        """Send a reset OTP. Returns the OTP, or None when no active user matches."""
        user = self._users.get_by_email(normalize_email(email))
        if not user or not user.is_active:
            return None

        otp = generate_otp()
        expires_at = (now or now_local()) + timedelta(minutes=OTP_VALID_MINUTES)
        self._users.set_reset_token(user.user_id, token=otp, expires_at=expires_at)
        self._mailer.send_async(
            to=user.email,
            subject="Password reset code",
            html=password_reset_email(name=user.name, otp=otp, valid_minutes=OTP_VALID_MINUTES),
        )
        return otp

    def verify_reset_token(self, token: str, *, now: Optional[datetime] = None) -> User:
        user = self._users.get_by_reset_token(token, now=now or now_local())
        if not user:
            raise ValidationError("Invalid or expired OTP")
        return user

    def reset_password(self, *, token: str, new_password: str, now: Optional[datetime] = None) -> None:
        user = self.verify_reset_token(token, now=now)
        require_min_length(new_password, "New password", MIN_PASSWORD_LENGTH)
        self._users.set_password(user.user_id, password_hash=generate_password_hash(new_password))


@dataclass(frozen=True)
class NewEmployee:
    first_name: str
    last_name: str
    email: str
    role: Role
    date_of_join: date
    employee_code: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    position: Optional[str] = None
    location: Optional[str] = None
    is_active: bool = True


class EmployeeService:
    """Use case: employee directory managed by HR/admin."""

    def __init__(self, users: UserRepository, mailer: EmailSender, *, website_url: str = "http://localhost:3000"):
        self._users = users
        self._mailer = mailer
        self._website_url = website_url

    def list_employees(self, *, role: Optional[Role] = None, active: Optional[bool] = None):
        return self._users.list_users(role=role, active=active)

    def get_employee(self, employee_id: int) -> User:
        user = self._users.get_by_id(int(employee_id))
        if not user:
            raise NotFoundError("Employee not found")
        return user

    def create_employee(self, data: NewEmployee) -> User:
        email = normalize_email(data.email)
        if self._users.email_taken(email):
            raise ConflictError("User with this email already exists")

        employee_code = _claim_employee_code(self._users, data.employee_code)
        temp_password = generate_temp_password()
        user_id = self._users.create_user(
            name=f"{data.first_name.strip()} {data.last_name.strip()}",
            email=email,
            password_hash=generate_password_hash(temp_password),
            role=data.role,
            employee_code=employee_code,
            is_active=data.is_active,
            phone=data.phone or None,
            department=data.department or None,
            position=data.position or None,
            location=data.location or None,
            date_of_join=data.date_of_join,
        )
        if employee_code is None:
            employee_code = default_employee_code(user_id)
            self._users.update_fields(user_id, {"employee_code": employee_code})
        user = self.get_employee(user_id)

        self._mailer.send_async(
            to=user.email,
            subject="Welcome to HR Hub",
            html=welcome_email(
                name=user.name,
                email=user.email,
                employee_code=employee_code,
                temp_password=temp_password,
                website_url=self._website_url,
            ),
        )
        logger.info("Employee %s created (%s)", user.user_id, employee_code)
        return user

    def update_employee(self, employee_id: int, changes: dict[str, Any]) -> User:
        self.get_employee(employee_id)

        fields = dict(changes)
        first, last = fields.pop("first_name", None), fields.pop("last_name", None)
        if first or last:
            fields["name"] = f"{first or ''} {last or ''}".strip()
        if "email" in fields:
            fields["email"] = normalize_email(fields["email"])
            if self._users.email_taken(fields["email"], exclude_user_id=int(employee_id)):
                raise ConflictError("Email already exists")
        if "employee_code" in fields:
            fields["employee_code"] = _claim_employee_code(
                self._users, fields["employee_code"], exclude_user_id=int(employee_id)
            )
        if not fields:
            raise ValidationError("No valid fields to update")

        self._users.update_fields(int(employee_id), fields)
        return self.get_employee(employee_id)
