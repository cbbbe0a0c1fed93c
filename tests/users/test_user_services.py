from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime
from typing import Optional

import pytest
from werkzeug.security import check_password_hash, generate_password_hash

from src.hr_hub.hr_hub.auth.tokens import TokenService, TokenSettings
from src.hr_hub.hr_hub.core.enums import Role
from src.hr_hub.hr_hub.core.exceptions import AuthenticationError, ConflictError, NotFoundError, ValidationError
from src.hr_hub.hr_hub.users.model import SsoProfile, User, default_employee_code
from src.hr_hub.hr_hub.users.service import AuthService, EmployeeService, NewEmployee
from src.hr_hub.hr_hub.users.sso_service import SsoService


class InMemoryUsers:
    def __init__(self):
        self.users: dict[int, User] = {}
        self.reset_tokens: dict[str, tuple[int, datetime]] = {}
        self.identities: dict[tuple[int, str], int] = {}
        self.logins: list[int] = []
        self._next_id = 0

    def add(self, *, email, password="secret123", role=Role.EMPLOYEE, is_active=True, logged_in=True) -> User:
        user_id = self.create_user(
            name=email.split("@")[0],
            email=email,
            password_hash=generate_password_hash(password),
            role=role,
            is_active=is_active,
        )
        if logged_in:
            self.users[user_id] = replace(
                self.users[user_id], last_login_at=datetime(2026, 1, 1), password_changed_at=datetime(2026, 1, 1)
            )
        return self.users[user_id]

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self.users.get(user_id)

    def get_by_email(self, email: str) -> Optional[User]:
        return next((u for u in self.users.values() if u.email == email), None)

    def email_taken(self, email, *, exclude_user_id=None) -> bool:
        return any(u.email == email and u.user_id != exclude_user_id for u in self.users.values())

    def create_user(self, *, name, email, password_hash, role, employee_code=None, is_active=True, **extra) -> int:
        self._next_id += 1
        user_id = self._next_id
        self.users[user_id] = User(
            user_id=user_id,
            name=name,
            email=email,
            password_hash=password_hash,
            role=role,
            is_active=is_active,
            employee_code=employee_code,
            **extra,
        )
        return user_id

    def update_fields(self, user_id, fields) -> bool:
        self.users[user_id] = replace(self.users[user_id], **fields)
        return True

    def list_users(self, *, role=None, active=None):
        return [
            u
            for u in self.users.values()
            if (role is None or u.role == role) and (active is None or u.is_active == active)
        ]

    def employee_code_taken(self, employee_code, *, exclude_user_id=None) -> bool:
        return any(u.employee_code == employee_code and u.user_id != exclude_user_id for u in self.users.values())

    def touch_last_login(self, user_id) -> None:
        self.logins.append(user_id)

    def set_password(self, user_id, *, password_hash, first_login=False) -> None:
        self.users[user_id] = replace(
            self.users[user_id], password_hash=password_hash, password_changed_at=datetime(2026, 2, 1)
        )
        self.reset_tokens = {t: v for t, v in self.reset_tokens.items() if v[0] != user_id}

    def set_reset_token(self, user_id, *, token, expires_at) -> None:
        self.reset_tokens[token] = (user_id, expires_at)

    def get_by_reset_token(self, token, *, now):
        found = self.reset_tokens.get(token)
        if not found or found[1] <= now:
            return None
        return self.users.get(found[0])

    def get_by_sso_identity(self, *, provider_id, subject_id):
        user_id = self.identities.get((provider_id, subject_id))
        return self.users.get(user_id) if user_id else None

    def upsert_sso_identity(self, *, user_id, provider_id, subject_id, email, display_name) -> None:
        self.identities[(provider_id, subject_id)] = user_id


class RecordingMailer:
    def __init__(self):
        self.sent: list[dict] = []

    def send(self, *, to, subject, html) -> None:
        self.sent.append({"to": to, "subject": subject, "html": html})

    send_async = send


def _tokens() -> TokenService:
    return TokenService(TokenSettings(access_secret="a" * 32, refresh_secret="r" * 32))


def _auth(users=None):
    users = users or InMemoryUsers()
    mailer = RecordingMailer()
    return AuthService(users, _tokens(), mailer), users, mailer


# --- AuthService ---


def test_login_issues_tokens_for_user():
    svc, users, _ = _auth()
    user = users.add(email="ann@x.io")

    result = svc.login("ANN@x.io", "secret123")

    assert result.user.user_id == user.user_id
    assert _tokens().decode_access(result.tokens.access_token) == user.user_id
    assert _tokens().decode_refresh(result.tokens.refresh_token) == user.user_id
    assert result.requires_password_change is False
    assert users.logins == [user.user_id]


def test_first_login_requires_password_change():
    svc, users, _ = _auth()
    users.add(email="new@x.io", logged_in=False)

    assert svc.login("new@x.io", "secret123").requires_password_change is True


@pytest.mark.parametrize(
    "email, password, message",
    [
        ("nobody@x.io", "secret123", "Invalid email"),
        ("ann@x.io", "wrong-pass", "Incorrect password"),
        ("off@x.io", "secret123", "inactive"),
    ],
)
def test_login_failures(email, password, message):
    svc, users, _ = _auth()
    users.add(email="ann@x.io")
    users.add(email="off@x.io", is_active=False)

    with pytest.raises(AuthenticationError, match=message):
        svc.login(email, password)


def test_refresh_returns_new_access_token():
    svc, users, _ = _auth()
    user = users.add(email="ann@x.io")
    pair = _tokens().issue_pair(user_id=user.user_id, role=user.role)

    access = svc.refresh(pair.refresh_token)

    assert _tokens().decode_access(access) == user.user_id


def test_refresh_rejects_access_token():
    svc, users, _ = _auth()
    user = users.add(email="ann@x.io")
    access = _tokens().issue_access(user_id=user.user_id, role=user.role)

    with pytest.raises(AuthenticationError):
        svc.refresh(access)
    with pytest.raises(AuthenticationError, match="No refresh token"):
        svc.refresh(None)


def test_register_rejects_duplicate_email():
    svc, users, _ = _auth()
    users.add(email="ann@x.io")

    with pytest.raises(ConflictError):
        svc.register(name="Ann", email="Ann@x.io", password="password1")


def test_register_enforces_password_length():
    svc, _, _ = _auth()
    with pytest.raises(ValidationError, match="at least 8"):
        svc.register(name="Ann", email="ann@x.io", password="short")


def test_change_password_checks_current():
    svc, users, _ = _auth()
    user = users.add(email="ann@x.io")

    with pytest.raises(ValidationError, match="Current password is incorrect"):
        svc.change_password(user.user_id, current_password="nope", new_password="newsecret1")

    svc.change_password(user.user_id, current_password="secret123", new_password="newsecret1")
    assert check_password_hash(users.users[user.user_id].password_hash, "newsecret1")


def test_update_profile_requires_a_field():
    svc, users, _ = _auth()
    user = users.add(email="ann@x.io")

    with pytest.raises(ValidationError):
        svc.update_profile(user.user_id)

    assert svc.update_profile(user.user_id, phone=" 555 ").phone == "555"


def test_forgot_and_reset_password_flow():
    svc, users, mailer = _auth()
    user = users.add(email="ann@x.io")
    now = datetime(2026, 3, 2, 10, 0)

    otp = svc.forgot_password("ann@x.io", now=now)

    assert otp is not None and len(otp) == 6
    assert mailer.sent[0]["to"] == "ann@x.io"
    assert otp in mailer.sent[0]["html"]

    svc.reset_password(token=otp, new_password="brandnew1", now=now)
    assert check_password_hash(users.users[user.user_id].password_hash, "brandnew1")

    with pytest.raises(ValidationError, match="Invalid or expired OTP"):
        svc.verify_reset_token(otp, now=now)


def test_reset_token_expires():
    svc, users, _ = _auth()
    users.add(email="ann@x.io")
    otp = svc.forgot_password("ann@x.io", now=datetime(2026, 3, 2, 10, 0))

    with pytest.raises(ValidationError):
        svc.verify_reset_token(otp, now=datetime(2026, 3, 2, 10, 11))


def test_forgot_password_for_unknown_email_sends_nothing():
    svc, _, mailer = _auth()

    assert svc.forgot_password("ghost@x.io") is None
    assert mailer.sent == []


# --- EmployeeService ---


def _new_employee(**overrides):
    data = dict(
        first_name="Ann",
        last_name="Lee",
        email="ann.lee@x.io",
        role=Role.EMPLOYEE,
        date_of_join=date(2026, 1, 5),
    )
    data.update(overrides)
    return NewEmployee(**data)


def test_create_employee_generates_code_and_sends_welcome():
    users = InMemoryUsers()
    users.add(email="admin@x.io", role=Role.ADMIN)
    mailer = RecordingMailer()
    svc = EmployeeService(users, mailer, website_url="https://hr.example")

    user = svc.create_employee(_new_employee())

    assert user.employee_code == "EMP0002"
    assert user.name == "Ann Lee"
    assert user.date_of_join == date(2026, 1, 5)
    assert mailer.sent[0]["to"] == "ann.lee@x.io"
    assert "EMP0002" in mailer.sent[0]["html"]
    assert "https://hr.example" in mailer.sent[0]["html"]


def test_generated_code_follows_row_id():
    users = InMemoryUsers()
    users.add(email="a@x.io")
    kept = users.add(email="b@x.io")
    users.update_fields(kept.user_id, {"employee_code": "EMP0002"})
    del users.users[1]
    svc = EmployeeService(users, RecordingMailer())

    user = svc.create_employee(_new_employee())

    assert user.user_id == 3
    assert user.employee_code == "EMP0003" == default_employee_code(3)
    assert users.users[kept.user_id].employee_code == "EMP0002"


def test_create_employee_keeps_given_code():
    svc = EmployeeService(InMemoryUsers(), RecordingMailer())
    assert svc.create_employee(_new_employee(employee_code=" E-77 ")).employee_code == "E-77"


def test_taken_employee_code_is_a_conflict():
    users = InMemoryUsers()
    svc = EmployeeService(users, RecordingMailer())
    first = svc.create_employee(_new_employee(employee_code="E-77"))

    with pytest.raises(ConflictError, match="Employee code E-77 already exists"):
        svc.create_employee(_new_employee(email="other@x.io", employee_code=" E-77 "))
    with pytest.raises(ConflictError):
        _auth(users)[0].register(name="Bo", email="bo@x.io", password="password1", employee_code="E-77")

    other = svc.create_employee(_new_employee(email="other@x.io"))
    with pytest.raises(ConflictError):
        svc.update_employee(other.user_id, {"employee_code": "E-77"})
    assert svc.update_employee(first.user_id, {"employee_code": "E-77"}).employee_code == "E-77"


def test_create_employee_duplicate_email():
    users = InMemoryUsers()
    users.add(email="ann.lee@x.io")
    svc = EmployeeService(users, RecordingMailer())

    with pytest.raises(ConflictError):
        svc.create_employee(_new_employee())


def test_update_employee_merges_name_parts():
    users = InMemoryUsers()
    user = users.add(email="ann@x.io")
    svc = EmployeeService(users, RecordingMailer())

    updated = svc.update_employee(user.user_id, {"first_name": "Ann", "last_name": "Smith", "department": "Ops"})

    assert updated.name == "Ann Smith"
    assert updated.department == "Ops"


def test_update_unknown_employee():
    svc = EmployeeService(InMemoryUsers(), RecordingMailer())
    with pytest.raises(NotFoundError):
        svc.update_employee(3, {"department": "Ops"})


# --- SsoService ---


def test_sso_links_existing_account_by_email():
    users = InMemoryUsers()
    user = users.add(email="ann@x.io")
    svc = SsoService(users, provider_id=2)

    resolved = svc.resolve_user(SsoProfile(subject_id="sub-1", email="ann@x.io", display_name="Ann"))

    assert resolved.user_id == user.user_id
    assert users.identities[(2, "sub-1")] == user.user_id
    # second login resolves through the stored identity even if the email changed upstream
    again = svc.resolve_user(SsoProfile(subject_id="sub-1", email="other@x.io", display_name="Ann"))
    assert again.user_id == user.user_id


def test_sso_auto_provisions_employee():
    users = InMemoryUsers()
    user = SsoService(users).resolve_user(SsoProfile(subject_id="sub-9", email="New@x.io", display_name="New Hire"))

    assert user.email == "new@x.io"
    assert user.role == Role.EMPLOYEE
    assert user.name == "New Hire"


def test_sso_without_provisioning_rejects_unknown_user():
    svc = SsoService(InMemoryUsers(), auto_provision=False)
    with pytest.raises(AuthenticationError, match="user not found"):
        svc.resolve_user(SsoProfile(subject_id="sub-9", email="new@x.io", display_name=None))


def test_sso_rejects_inactive_user():
    users = InMemoryUsers()
    users.add(email="off@x.io", is_active=False)
    with pytest.raises(AuthenticationError, match="inactive"):
        SsoService(users).resolve_user(SsoProfile(subject_id="s", email="off@x.io", display_name=None))
