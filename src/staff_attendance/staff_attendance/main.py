from __future__ import annotations

import importlib
import logging

from dotenv import load_dotenv
from flask import Flask, jsonify

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .container import build_container
from .core.constants import DEFAULT_TIMEZONE
from .database.bootstrap import apply_schema
from .database.connection import DBConfig
from .leave.controller import register as register_leave
from .payroll.controller import register as register_reports
from .schedules.controller import register as register_schedules
from .settings.controller import register as register_settings

logger = logging.getLogger(__name__)


def create_app(container=None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    logging.basicConfig(
        level=getattr(settings, "LOG_LEVEL", "INFO"),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    db_config = getattr(settings, "DB_CONFIG")
    tz_name = getattr(settings, "TIMEZONE", DEFAULT_TIMEZONE)
    logger.info(
        "settings=%s db=%s@%s:%s/%s tz=%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
        tz_name,
    )

    if container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(DBConfig.from_dict(db_config))
        container = build_container(db_config=db_config, tz_name=tz_name)

    register_attendance(app, container)
    register_reports(app, container)
    register_leave(app, container)
    register_schedules(app, container)
    register_settings(app, container)

    @app.route("/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify({"success": True, "status": "ok"})

    return app
