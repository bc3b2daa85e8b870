from __future__ import annotations

import atexit
import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask
from flask_wtf.csrf import CSRFProtect

from config import get_settings_module

from .common.logging_setup import configure_logging
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .leaves.controller import register as register_leaves
from .notifications.controller import register as register_notifications
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

REPO_ROOT = Path(__file__).resolve().parents[3]

csrf = CSRFProtect()


def register_web(app: Flask, container: Container) -> None:
    """Attach CSRF checks and every feature's routes to `app`."""
    app.extensions["staff_portal"] = container
    csrf.init_app(app)

    register_users(app, container)
    register_leaves(app, container)
    register_notifications(app, container)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__, template_folder=str(REPO_ROOT / "templates"))

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["NOTIFICATION_POLL_SECONDS"] = float(getattr(settings, "NOTIFICATION_POLL_SECONDS", 5.0))
    app.config["WTF_CSRF_ENABLED"] = bool(getattr(settings, "CSRF_ENABLED", True))

    logger.info(
        "settings=%s db=%s@%s:%s/%s",
        settings_module,
        db_config.get("user"),
        db_config.get("host"),
        db_config.get("port", 3306),
        db_config.get("database"),
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
        logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
        ensure_demo_users(db_config)

    container = build_container(
        db_config=db_config,
        notification_settings={
            "list_limit": getattr(settings, "NOTIFICATION_LIST_LIMIT", 20),
            "feed_limit": getattr(settings, "NOTIFICATION_FEED_LIMIT", 10),
            "poll_seconds": getattr(settings, "NOTIFICATION_POLL_SECONDS", 5.0),
        },
    )
    register_web(app, container)
    atexit.register(container.notification_store.shutdown)

    return app
