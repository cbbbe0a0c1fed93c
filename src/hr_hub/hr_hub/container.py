from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.repository import AttendanceRepository
from .attendance.service import AttendanceService
from .auth.decorators import AuthGuard
from .auth.tokens import TokenService, TokenSettings
from .database.connection import DBConfig, DatabaseConnection
from .notifications.email_sender import EmailSender, SmtpEmailSender, SmtpSettings
from .projects.mysql_project_repository import MySQLProjectRepository
from .projects.mysql_task_repository import MySQLTaskRepository
from .projects.repository import ProjectRepository, TaskRepository
from .projects.service import ProjectService, TaskService
from .regularizations.mysql_regularization_repository import MySQLRegularizationRepository
from .regularizations.repository import RegularizationRepository
from .regularizations.service import RegularizationService
from .reports.mysql_report_repository import MySQLReportRepository
from .reports.repository import ReportRepository
from .reports.service import ReportService
from .timesheets.mysql_timesheet_repository import MySQLTimesheetRepository
from .timesheets.repository import TimesheetRepository
from .timesheets.service import TimesheetService
from .users.mysql_user_repository import MySQLUserRepository
from .users.repository import UserRepository
from .users.service import AuthService, EmployeeService
from .users.sso_service import SsoService


@dataclass(frozen=True)
class Container:
    conn: Optional[DatabaseConnection]
    tokens: TokenService
    mailer: EmailSender
    auth_guard: AuthGuard

    users_repo: UserRepository
    attendance_repo: AttendanceRepository
    regularizations_repo: RegularizationRepository
    timesheets_repo: TimesheetRepository
    projects_repo: ProjectRepository
    tasks_repo: TaskRepository
    reports_repo: ReportRepository

    auth_service: AuthService
    employee_service: EmployeeService
    sso_service: SsoService
    attendance_service: AttendanceService
    regularization_service: RegularizationService
    timesheet_service: TimesheetService
    project_service: ProjectService
    task_service: TaskService
    report_service: ReportService


def _setting(settings: Any, name: str, default: Any = None) -> Any:
    if isinstance(settings, Mapping):
        return settings.get(name, default)
    return getattr(settings, name, default)


def token_settings_from(settings: Any) -> TokenSettings:
    return TokenSettings(
        access_secret=str(_setting(settings, "JWT_ACCESS_SECRET")),
        refresh_secret=str(_setting(settings, "JWT_REFRESH_SECRET")),
        algorithm=str(_setting(settings, "JWT_ALGORITHM", "HS256")),
        access_minutes=int(_setting(settings, "ACCESS_TOKEN_MINUTES", 15)),
        refresh_days=int(_setting(settings, "REFRESH_TOKEN_DAYS", 7)),
    )


def smtp_settings_from(settings: Any) -> SmtpSettings:
    return SmtpSettings(
        host=str(_setting(settings, "SMTP_HOST", "") or ""),
        port=int(_setting(settings, "SMTP_PORT", 587)),
        user=str(_setting(settings, "SMTP_USER", "") or ""),
        password=str(_setting(settings, "SMTP_PASSWORD", "") or ""),
        sender=str(_setting(settings, "MAIL_FROM", "") or "no-reply@hrhub.com"),
        use_tls=bool(_setting(settings, "SMTP_USE_TLS", True)),
    )


def assemble(
    *,
    conn: Optional[DatabaseConnection],
    settings: Any,
    users_repo: UserRepository,
    attendance_repo: AttendanceRepository,
    regularizations_repo: RegularizationRepository,
    timesheets_repo: TimesheetRepository,
    projects_repo: ProjectRepository,
    tasks_repo: TaskRepository,
    reports_repo: ReportRepository,
    mailer: Optional[EmailSender] = None,
) -> Container:
    """Wire services on top of the given repositories.

    build_container() passes MySQL repositories; tests pass in-memory fakes.
    """
    tokens = TokenService(token_settings_from(settings))
    mailer = mailer or SmtpEmailSender(smtp_settings_from(settings))

    return Container(
        conn=conn,
        tokens=tokens,
        mailer=mailer,
        auth_guard=AuthGuard(tokens, users_repo),
        users_repo=users_repo,
        attendance_repo=attendance_repo,
        regularizations_repo=regularizations_repo,
        timesheets_repo=timesheets_repo,
        projects_repo=projects_repo,
        tasks_repo=tasks_repo,
        reports_repo=reports_repo,
        auth_service=AuthService(users_repo, tokens, mailer),
        employee_service=EmployeeService(
            users_repo,
            mailer,
            website_url=str(_setting(settings, "WEBSITE_URL", "http://localhost:3000")),
        ),
        sso_service=SsoService(
            users_repo,
            provider_id=int(_setting(settings, "SSO_PROVIDER_ID", 1)),
            auto_provision=bool(_setting(settings, "SSO_AUTO_PROVISION", True)),
        ),
        attendance_service=AttendanceService(attendance_repo, users_repo),
        regularization_service=RegularizationService(regularizations_repo),
        timesheet_service=TimesheetService(timesheets_repo),
        project_service=ProjectService(projects_repo, tasks_repo, users_repo),
        task_service=TaskService(tasks_repo, projects_repo),
        report_service=ReportService(reports_repo),
    )


def build_container(*, db_config: dict, settings: Any) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    company_id = int(_setting(settings, "DEFAULT_COMPANY_ID", 1))

    return assemble(
        conn=conn,
        settings=settings,
        users_repo=MySQLUserRepository(conn, company_id=company_id),
        attendance_repo=MySQLAttendanceRepository(conn),
        regularizations_repo=MySQLRegularizationRepository(conn),
        timesheets_repo=MySQLTimesheetRepository(conn),
        projects_repo=MySQLProjectRepository(conn, company_id=company_id),
        tasks_repo=MySQLTaskRepository(conn),
        reports_repo=MySQLReportRepository(conn),
    )
