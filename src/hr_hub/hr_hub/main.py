from __future__ import annotations

import importlib
import logging
import traceback
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, request
from werkzeug.exceptions import HTTPException

from config import get_settings_module

from .common.logging_setup import configure_logging
from .common.serialization import json_response
from .container import Container, build_container
from .core.exceptions import DomainError
from .database.bootstrap import apply_schema, ensure_admin_user, list_tables

from .attendance.controller import register as register_attendance
from .auth.controller import register as register_auth
from .projects.controller import register as register_projects
from .regularizations.controller import register as register_regularizations
from .reports.controller import register as register_reports
from .timesheets.controller import register as register_timesheets
from .users.controller import register as register_users

logger = logging.getLogger(__name__)


def _error_body(app: Flask, message: str, exc: Optional[BaseException] = None) -> dict:
    body = {"message": message}
    if app.config.get("ENV_NAME") != "production":
        body["stack"] = "".join(traceback.format_exception(exc)) if exc else None
    return body


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def handle_domain_error(e: DomainError):
        return json_response(_error_body(app, str(e), e), e.status_code)

    @app.errorhandler(404)
    def handle_not_found(e):
        return json_response(_error_body(app, f"Not found - {request.path}", e), 404)

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return json_response(_error_body(app, e.description or e.name, e), e.code or 500)

    @app.errorhandler(Exception)
    def handle_unexpected(e: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return json_response(_error_body(app, "Internal server error", e), 500)


def _bootstrap_database(settings, db_config: dict) -> None:
    root = Path(__file__).resolve().parents[3]
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=root / "database" / "schema.sql")
        logger.debug("Schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        password = getattr(settings, "ADMIN_PASSWORD", "")
        if not password:
            logger.warning("AUTO_SEED_DB is set but ADMIN_PASSWORD is empty; admin not seeded")
            return
        ensure_admin_user(
            db_config,
            email=getattr(settings, "ADMIN_EMAIL", "admin@hrhub.com"),
            password=password,
            company_id=int(getattr(settings, "DEFAULT_COMPANY_ID", 1)),
        )


def create_app(container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["ENV_NAME"] = getattr(settings, "ENV_NAME", "development")
    app.config["COOKIE_SECURE"] = bool(getattr(settings, "COOKIE_SECURE", False))
    app.json.sort_keys = False

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.debug(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config, settings=settings)

    register_error_handlers(app)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return json_response({"status": "ok", "env": app.config["ENV_NAME"]})

    register_auth(app, container)
    register_users(app, container)
    register_attendance(app, container)
    register_regularizations(app, container)
    register_timesheets(app, container)
    register_projects(app, container)
    register_reports(app, container)

    return app
