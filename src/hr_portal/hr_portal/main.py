from __future__ import annotations

import importlib
import logging
import sys
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.http import HRJSONProvider, fail
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .dashboard.controller import register as register_dashboard
from .leave.controller import register as register_leave
from .onboarding.controller import register as register_onboarding
from .payroll.controller import register as register_payroll
from .performance.controller import register as register_performance
from .requests.controller import register as register_requests
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"
LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """One stream handler on the package logger; repeated calls only change the level."""
    package_logger = logging.getLogger(__package__)
    package_logger.setLevel(getattr(logging, str(level).upper(), logging.INFO))
    if not package_logger.handlers:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        package_logger.addHandler(handler)
    package_logger.propagate = False


def _prepare_database(settings, db_config: dict) -> None:
    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
        logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")
        ensure_demo_users(db_config)


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the JSON API.

    When ``container`` is given (tests) no database work happens at startup.
    """
    load_dotenv(override=False)
    app = Flask(__name__)
    app.json = HRJSONProvider(app)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", 7)))

    if container is None:
        db_config = dict(getattr(settings, "DB_CONFIG"))
        logger.info(
            "Starting with settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )
        _prepare_database(settings, db_config)
        container = build_container(db_config=db_config)

    register_users(app, container)
    register_requests(app, container)
    register_onboarding(app, container)
    register_payroll(app, container)
    register_attendance(app, container)
    register_leave(app, container)
    register_performance(app, container)
    register_dashboard(app, container)

    @app.errorhandler(404)
    def not_found(_e):
        return fail("Not found", 404)

    @app.errorhandler(405)
    def method_not_allowed(_e):
        return fail("Method not allowed", 405)

    return app
