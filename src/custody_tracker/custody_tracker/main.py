from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from werkzeug.middleware.proxy_fix import ProxyFix

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.logging_setup import init_logging
from .common.web import register_error_handlers
from .container import Container, ServiceOptions, build_container
from .database.bootstrap import apply_schema, ensure_demo_task, list_tables
from .events.controller import register as register_events
from .tasks.controller import register as register_tasks

logger = logging.getLogger(__name__)


def create_app(container: Container | None = None) -> Flask:
    """App factory. Pass ``container`` to run against other repositories (tests)."""
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["LOG_LEVEL"] = getattr(settings, "LOG_LEVEL", "INFO")
    app.config["LOG_DIR"] = getattr(settings, "LOG_DIR", None)
    # Reject oversized multipart bodies before they are parsed (image limit + form fields).
    max_image_bytes = int(getattr(settings, "MAX_IMAGE_BYTES", ServiceOptions.max_image_bytes))
    app.config["MAX_CONTENT_LENGTH"] = max_image_bytes + 64 * 1024

    # Only hops added by our own reverse proxies are trusted for the client address.
    trusted_proxies = int(getattr(settings, "TRUSTED_PROXY_COUNT", 0))
    if trusted_proxies > 0:
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=trusted_proxies, x_proto=trusted_proxies)

    init_logging(app)

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
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_task(db_config)
            logger.info("demo task ready")

        container = build_container(
            db_config=db_config,
            upload_dir=getattr(settings, "UPLOAD_DIR"),
            public_upload_prefix=getattr(settings, "PUBLIC_UPLOAD_PREFIX", "/uploads"),
            options=ServiceOptions.from_settings(settings),
        )

    register_error_handlers(app)
    register_tasks(app, container)
    register_events(app, container)
    register_attendance(app, container)

    return app
