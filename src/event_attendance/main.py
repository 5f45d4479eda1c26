from __future__ import annotations

import importlib
import logging
import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify

from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .config import get_settings_module
from .container import Container, build_container
from .core.logging import setup_logging
from .database.bootstrap import apply_schema, list_tables
from .events.controller import register as register_events
from .scheduler.task import RepeatingTask
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

EXTENSION_KEY = "event_attendance"
EXPORT_CLEANUP_INTERVAL_SECONDS = 3600


def create_app(*, container: Optional[Container] = None, settings_module: Optional[str] = None) -> Flask:
    """Application factory.

    Pass ``container`` to run against other repository implementations
    (tests use in-memory ones); otherwise MySQL is wired from settings.
    """

    load_dotenv(override=False)
    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)

    if not getattr(settings, "TESTING", False):
        setup_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app = Flask(__name__)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["START_SCHEDULER"] = bool(getattr(settings, "START_SCHEDULER", True))
    app.config["EXPORT_MAX_AGE_HOURS"] = int(getattr(settings, "EXPORT_MAX_AGE_HOURS", 24))

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
            apply_schema(db_config)
            logger.info("schema ready (tables=%s)", len(list_tables(db_config)))

        container = build_container(
            db_config=db_config,
            secret_key=app.secret_key,
            export_dir=Path(getattr(settings, "EXPORT_DIR", "exports")),
            smtp_config=getattr(settings, "SMTP_CONFIG", None),
            sweep_interval_seconds=float(getattr(settings, "SWEEP_INTERVAL_SECONDS", 60)),
            token_ttl_hours=int(getattr(settings, "TOKEN_TTL_HOURS", 24)),
        )

    app.extensions[EXTENSION_KEY] = container

    register_error_handlers(app)
    register_users(app, container)
    register_events(app, container)
    register_attendance(app, container)

    @app.route("/health", endpoint="health")
    def health():
        return jsonify(
            {
                "success": True,
                "message": "Server is running",
                "scheduler_running": container.scheduler.is_running,
                "timestamp": datetime.now(timezone.utc).isoformat(),
            }
        )

    return app


def start_background_tasks(app: Flask) -> RepeatingTask:
    """Start the state scheduler and the export cleanup task."""

    container: Container = app.extensions[EXTENSION_KEY]
    max_age = app.config["EXPORT_MAX_AGE_HOURS"]
    cleanup = RepeatingTask(
        lambda: container.export_service.cleanup_old_exports(max_age),
        interval=EXPORT_CLEANUP_INTERVAL_SECONDS,
        name="export-cleanup",
    )
    container.scheduler.start()
    cleanup.start()
    return cleanup


def stop_background_tasks(app: Flask, cleanup: Optional[RepeatingTask] = None) -> None:
    container: Container = app.extensions[EXTENSION_KEY]
    container.scheduler.stop()
    if cleanup is not None:
        cleanup.stop()


def run() -> None:
    app = create_app()
    cleanup = start_background_tasks(app) if app.config["START_SCHEDULER"] else None
    try:
        app.run(
            host=os.getenv("HOST", "0.0.0.0"),
            port=int(os.getenv("PORT", "5000")),
            debug=app.config["DEBUG"],
            use_reloader=False,
            threaded=True,
        )
    finally:
        stop_background_tasks(app, cleanup)


if __name__ == "__main__":
    run()
