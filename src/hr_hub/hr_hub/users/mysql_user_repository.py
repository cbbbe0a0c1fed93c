from __future__ import annotations

from datetime import date, datetime
from typing import Any, Dict, Mapping, Optional, Sequence

from ..core.enums import Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import User
from .repository import UPDATABLE_COLUMNS, UserRepository

_COLUMNS = """
    id, name, email, password_hash, role, is_active, employee_code, phone, department,
    position, location, date_of_join, last_login_at, password_changed_at, created_at
"""


def _row_to_user(row: Dict[str, Any]) -> User:
    return User(
        user_id=int(row["id"]),
        name=row["name"],
        email=row["email"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row.get("is_active", True)),
        employee_code=row.get("employee_code"),
        phone=row.get("phone"),
        department=row.get("department"),
        position=row.get("position"),
        location=row.get("location"),
        date_of_join=row.get("date_of_join"),
        last_login_at=row.get("last_login_at"),
        password_changed_at=row.get("password_changed_at"),
        created_at=row.get("created_at"),
    )


class MySQLUserRepository(UserRepository):
    def __init__(self, conn_factory: DatabaseConnection, *, company_id: int = 1):
        self._conn_factory = conn_factory
        self._company_id = int(company_id)

    def _get_one(self, where: str, params: tuple) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM user_account WHERE {where} LIMIT 1", params)
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def get_by_id(self, user_id: int) -> Optional[User]:
        return self._get_one("id=%s", (int(user_id),))

    def get_by_email(self, email: str) -> Optional[User]:
        return self._get_one("company_id=%s AND LOWER(email)=LOWER(%s)", (self._company_id, email))

    def email_taken(self, email: str, *, exclude_user_id: Optional[int] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM user_account WHERE company_id=%s AND LOWER(email)=LOWER(%s) AND id <> %s",
                (self._company_id, email, int(exclude_user_id or 0)),
            )
            return fetchone(cur) is not None

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
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_account
                    (company_id, employee_code, name, email, password_hash, role, is_active,
                     phone, department, position, location, date_of_join)
                VALUES (%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    self._company_id,
                    employee_code,
                    name,
                    email.lower(),
                    password_hash,
                    role.value,
                    1 if is_active else 0,
                    phone,
                    department,
                    position,
                    location,
                    date_of_join,
                ),
            )
            return int(cur.lastrowid)

    def update_fields(self, user_id: int, fields: Mapping[str, Any]) -> bool:
        unknown = set(fields) - UPDATABLE_COLUMNS
        if unknown:
            raise ValueError(f"Columns not updatable: {sorted(unknown)}")
        if not fields:
            return False

        assignments = ", ".join(f"{col}=%s" for col in fields)
        params = [v.value if isinstance(v, Role) else v for v in fields.values()]
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE user_account SET {assignments}, updated_at=NOW() WHERE id=%s",
                (*params, int(user_id)),
            )
            return cur.rowcount > 0

    def list_users(self, *, role: Optional[Role] = None, active: Optional[bool] = None) -> Sequence[User]:
        where = ["company_id=%s"]
        params: list[Any] = [self._company_id]
        if role is not None:
            where.append("role=%s")
            params.append(role.value)
        if active is not None:
            where.append("is_active=%s")
            params.append(1 if active else 0)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM user_account WHERE {' AND '.join(where)} ORDER BY name",
                tuple(params),
            )
            return [_row_to_user(r) for r in fetchall(cur)]

    def employee_code_taken(self, employee_code: str, *, exclude_user_id: Optional[int] = None) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT id FROM user_account WHERE company_id=%s AND employee_code=%s AND id <> %s",
                (self._company_id, employee_code, int(exclude_user_id or 0)),
            )
            return fetchone(cur) is not None

    def touch_last_login(self, user_id: int) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("UPDATE user_account SET last_login_at=NOW() WHERE id=%s", (int(user_id),))

    def set_password(self, user_id: int, *, password_hash: str, first_login: bool = False) -> None:
        extra = ", last_login_at=NOW()" if first_login else ""
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE user_account
                SET password_hash=%s, password_changed_at=NOW(),
                    reset_token=NULL, reset_token_expiry=NULL, updated_at=NOW(){extra}
                WHERE id=%s
                """,
                (password_hash, int(user_id)),
            )

    def set_reset_token(self, user_id: int, *, token: str, expires_at: datetime) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE user_account SET reset_token=%s, reset_token_expiry=%s WHERE id=%s",
                (token, expires_at, int(user_id)),
            )

    def get_by_reset_token(self, token: str, *, now: datetime) -> Optional[User]:
        return self._get_one("reset_token=%s AND reset_token_expiry > %s", (token, now))

    def get_by_sso_identity(self, *, provider_id: int, subject_id: str) -> Optional[User]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {', '.join('ua.' + c.strip() for c in _COLUMNS.split(','))}
                FROM user_sso_identity usi
                JOIN user_account ua ON ua.id = usi.user_id
                WHERE usi.sso_provider_id=%s AND usi.subject_id=%s
                LIMIT 1
                """,
                (int(provider_id), subject_id),
            )
            row = fetchone(cur)
            return _row_to_user(row) if row else None

    def upsert_sso_identity(
        self,
        *,
        user_id: int,
        provider_id: int,
        subject_id: str,
        email: Optional[str],
        display_name: Optional[str],
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO user_sso_identity
                    (user_id, sso_provider_id, subject_id, email, display_name, last_login_at)
                VALUES (%s, %s, %s, %s, %s, NOW())
                ON DUPLICATE KEY UPDATE
                    user_id = VALUES(user_id),
                    email = VALUES(email),
                    display_name = VALUES(display_name),
                    last_login_at = VALUES(last_login_at)
                """,
                (int(user_id), int(provider_id), subject_id, email, display_name),
            )
