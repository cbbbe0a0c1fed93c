from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Roles used for authorization checks."""

    ADMIN = "admin"
    HR = "hr"
    MANAGER = "manager"
    EMPLOYEE = "employee"
    FINANCE = "finance"


REVIEWER_ROLES = (Role.MANAGER, Role.HR, Role.ADMIN)
PEOPLE_ADMIN_ROLES = (Role.HR, Role.ADMIN)
REPORT_ROLES = (Role.MANAGER, Role.HR, Role.ADMIN, Role.FINANCE)


class AttendanceStatus(str, Enum):
    """Attendance status stored per (user, day)."""

    NOT_CHECKED_IN = "not_checked_in"
    PRESENT = "present"
    ABSENT = "absent"


class RegularizationType(str, Enum):
    CHECK_IN = "check_in"
    CHECK_OUT = "check_out"


class RequestStatus(str, Enum):
    """Review lifecycle of a regularization request."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class TimesheetStatus(str, Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewAction(str, Enum):
    APPROVE = "approve"
    REJECT = "reject"


class ProjectStatus(str, Enum):
    ACTIVE = "active"
    ON_HOLD = "on-hold"
    COMPLETED = "completed"


class TaskStatus(str, Enum):
    TODO = "todo"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
