from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from typing import Any, List, Optional, Tuple

from ..core.enums import Role
from ..core.exceptions import ValidationError


@dataclass(frozen=True)
class ReportFilter:
    """Typed report filter compiled into a parameterized WHERE clause.

    Column names come from code, values only ever travel as `%s` params.
    """

    start: Optional[date] = None
    end: Optional[date] = None
    user_id: Optional[int] = None
    role: Optional[Role] = None
    department: Optional[str] = None

    def __post_init__(self):
        if self.start and self.end and self.end < self.start:
            raise ValidationError("End date cannot be before start date")

    def predicates(self, *, date_column: str, user_alias: str = "ua") -> Tuple[List[str], List[Any]]:
        where: List[str] = []
        params: List[Any] = []
        if self.start is not None:
            where.append(f"{date_column} >= %s")
            params.append(self.start)
        if self.end is not None:
            where.append(f"{date_column} <= %s")
            params.append(self.end)
        if self.user_id is not None:
            where.append(f"{user_alias}.id = %s")
            params.append(int(self.user_id))
        if self.role is not None:
            where.append(f"{user_alias}.role = %s")
            params.append(self.role.value)
        if self.department:
            where.append(f"{user_alias}.department = %s")
            params.append(self.department)
        return where, params

    def where_clause(self, *, date_column: str, user_alias: str = "ua") -> Tuple[str, Tuple[Any, ...]]:
        where, params = self.predicates(date_column=date_column, user_alias=user_alias)
        return " AND ".join(where) if where else "1=1", tuple(params)
