from __future__ import annotations

import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import load_settings

from .attendance.controller import register as register_attendance
from .common.logging_config import configure_logging
from .container import build_container
from .database.bootstrap import apply_schema, missing_tables
from .database.connection import DBConfig
from .payroll.controller import register as register_payroll

log = logging.getLogger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings = load_settings()
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))

    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))
    log.info("settings=%s db=%s", settings.__name__, DBConfig.from_mapping(db_config).describe())

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        missing = missing_tables(db_config)
        if missing:
            log.warning("schema applied but tables are missing: %s", ", ".join(missing))

    container = build_container(
        db_config=db_config,
        payroll_policy=getattr(settings, "PAYROLL_POLICY", None),
        automation=getattr(settings, "PAYROLL_AUTOMATION", None),
        benefits=getattr(settings, "PAYROLL_BENEFITS", None),
        require_location=bool(getattr(settings, "REQUIRE_PUNCH_LOCATION", False)),
    )
    app.extensions["workforce_payroll"] = container

    register_attendance(app, container)
    register_payroll(app, container)

    if bool(getattr(settings, "AUTO_START_SCHEDULER", False)):
        container.payroll_scheduler.start()

    return app
