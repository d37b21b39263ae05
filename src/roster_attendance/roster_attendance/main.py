from __future__ import annotations

import importlib
import logging
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, ensure_admin, list_tables

from .container import Container, build_container
from .core.constants import DEFAULT_SESSION_DAYS
from .accounts.controller import register as register_accounts
from .attendance.controller import register as register_attendance
from .classes.controller import register as register_classes
from .common.web import register_error_handlers
from .enrollments.controller import register as register_enrollments
from .reports.controller import register as register_reports
from .timetable.controller import register as register_timetable

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def _configure_logging(level_name: str) -> None:
    level = getattr(logging, str(level_name or "INFO").upper(), logging.INFO)
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s [%(name)s] %(message)s")


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    """Build the Flask app.

    Passing a prebuilt ``container`` skips every database step (used by tests).
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["SESSION_DAYS"] = int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS))
    app.permanent_session_lifetime = timedelta(days=app.config["SESSION_DAYS"])
    app.config["PUBLIC_BASE_URL"] = getattr(settings, "PUBLIC_BASE_URL", "")

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

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("Schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_admin(
                db_config,
                username=getattr(settings, "ADMIN_USERNAME", "admin"),
                email=getattr(settings, "ADMIN_EMAIL", "admin@example.com"),
                password=getattr(settings, "ADMIN_PASSWORD"),
            )

        container = build_container(db_config=db_config)

    register_error_handlers(app)
    register_accounts(app, container)
    register_classes(app, container)
    register_enrollments(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_timetable(app, container)

    return app
