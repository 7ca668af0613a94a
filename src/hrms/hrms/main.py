from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from config import get_settings_module

from .database.bootstrap import apply_schema, apply_seed_sql, ensure_admin_user, list_tables
from .logging_config import configure_logging, get_logger

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .departments.controller import register as register_departments
from .employees.controller import register as register_employees
from .leave.controller import register as register_leave
from .payroll.controller import register as register_payroll
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = get_logger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def _bootstrap_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_admin_user(db_config)
        logger.info("Lookup data and admin account ready")


def create_app(*, container: Optional[Container] = None) -> Flask:
    """Application factory.

    A prebuilt container (tests) skips database bootstrap entirely.
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["MAX_CONTENT_LENGTH"] = int(getattr(settings, "MAX_UPLOAD_MB", 10)) * 1024 * 1024

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _bootstrap_database(settings, db_config)
        container = build_container(db_config=db_config)

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    @app.route("/", methods=["GET"], endpoint="root")
    def root():
        return jsonify({"message": "HRMS API is running"})

    @app.route("/api", methods=["GET"], endpoint="api_index")
    def api_index():
        return jsonify(
            {
                "message": "HRMS API",
                "endpoints": [
                    "/api/auth",
                    "/api/employees",
                    "/api/departments",
                    "/api/positions",
                    "/api/attendance",
                    "/api/leave",
                    "/api/payroll",
                    "/api/users",
                    "/api/dashboard",
                    "/api/reports",
                ],
            }
        )

    @app.route("/api/health", methods=["GET"], endpoint="api_health")
    def api_health():
        return jsonify({"status": "ok"})

    register_users(app, container)
    register_employees(app, container)
    register_departments(app, container)
    register_attendance(app, container)
    register_leave(app, container)
    register_payroll(app, container)
    register_reports(app, container)

    return app
