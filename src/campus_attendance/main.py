from __future__ import annotations

import importlib
import logging
from types import ModuleType
from typing import Optional

from dotenv import load_dotenv
from flask import Flask, jsonify, request

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.datetime_utils import now_utc, to_iso
from .container import build_container, build_store
from .store.base import DocumentStore
from .web.errors import register_error_handlers

logger = logging.getLogger(__name__)


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(
    *,
    settings_module: Optional[str] = None,
    store: Optional[DocumentStore] = None,
) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings: ModuleType = importlib.import_module(settings_module)
    _configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["QR_BOX_SIZE"] = int(getattr(settings, "QR_BOX_SIZE", 10))
    app.config["QR_BORDER"] = int(getattr(settings, "QR_BORDER", 2))
    app.config["ENVIRONMENT"] = settings_module.rsplit(".", 1)[-1]

    backend = str(getattr(settings, "STORE_BACKEND", "memory"))
    db_config = dict(getattr(settings, "DB_CONFIG", {}))
    timeout_seconds = int(getattr(settings, "STORE_TIMEOUT_SECONDS", 10))

    if store is None:
        if backend == "mysql" and bool(getattr(settings, "AUTO_INIT_DB", False)):
            from .store.bootstrap import apply_schema
            from .store.connection import DatabaseConnection, DBConfig

            apply_schema(DatabaseConnection(DBConfig.from_dict(db_config, timeout_seconds=timeout_seconds)))
        store = build_store(backend=backend, db_config=db_config, timeout_seconds=timeout_seconds)

    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        from .store.seed import seed_demo_data

        seed_demo_data(store)
        logger.info("demo course and enrollments seeded")

    container = build_container(
        store=store,
        jwt_secret=getattr(settings, "JWT_SECRET"),
        jwt_algorithm=getattr(settings, "JWT_ALGORITHM", "HS256"),
        default_session_minutes=int(getattr(settings, "DEFAULT_SESSION_MINUTES", 30)),
        min_session_minutes=int(getattr(settings, "MIN_SESSION_MINUTES", 1)),
        max_session_minutes=int(getattr(settings, "MAX_SESSION_MINUTES", 180)),
    )
    app.extensions["container"] = container

    @app.before_request
    def log_request():
        logger.info("%s %s", request.method, request.path)

    @app.route("/api/health", methods=["GET"], endpoint="health")
    def health():
        return jsonify(
            {
                "status": "OK",
                "timestamp": to_iso(now_utc()),
                "environment": app.config["ENVIRONMENT"],
                "store": "Connected" if container.store.ping() else "Disconnected",
            }
        )

    register_error_handlers(app)
    register_attendance(app, container)

    logger.info("app ready (settings=%s, store=%s)", settings_module, type(store).__name__)
    return app
