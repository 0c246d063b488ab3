import atexit
import logging
import os
from typing import Any

from flask import Flask
from sqlalchemy.pool import StaticPool

from .config import ENV_DIAGNOSTICS
from .extensions import db, limiter, migrate
from .logging_config import configure_logging
from .store import EXTENSION_KEY, Store

logger = logging.getLogger(__name__)

DISPATCHER_KEY = "stockledger.dispatcher"


def create_app(config: dict[str, Any] | None = None) -> Flask:
    app = Flask(__name__)
    os.makedirs(app.instance_path, exist_ok=True)

    _load_base_config(app, config)
    _apply_sqlalchemy_env_overrides(app)
    _configure_sqlite_engine_options(app)

    db.init_app(app)
    migrate.init_app(app, db)
    limiter.init_app(app)

    from . import models  # noqa: F401  # ensure models registered for Alembic
    from .blueprints.api import api_bp

    app.register_blueprint(api_bp)
    configure_logging(app)
    _install_store(app)

    from .management import register_commands

    register_commands(app)
    return app


def _load_base_config(app: Flask, config: dict[str, Any] | None) -> None:
    app.config.from_object("stockledger.config.Config")
    if config:
        app.config.update(config)
    app.config["ENV_DIAGNOSTICS"] = ENV_DIAGNOSTICS
    for warning in ENV_DIAGNOSTICS.get("warnings", ()):
        logger.warning("Environment configuration warning: %s", warning)

    if config and "DATABASE_URL" in config:
        app.config["SQLALCHEMY_DATABASE_URI"] = config["DATABASE_URL"]

    if not app.config.get("SQLALCHEMY_DATABASE_URI"):
        raise RuntimeError("DATABASE_URL must be set; no row-store is configured.")


def _apply_sqlalchemy_env_overrides(app: Flask) -> None:
    engine_opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS", {}) or {})
    changed = False

    def _apply_int(env_key: str, option_key: str):
        nonlocal changed
        value = os.environ.get(env_key)
        if value in (None, ""):
            return
        try:
            engine_opts[option_key] = int(value)
            changed = True
        except ValueError:
            logger.warning("Invalid integer for %s: %s", env_key, value)

    _apply_int("SQLALCHEMY_POOL_SIZE", "pool_size")
    _apply_int("SQLALCHEMY_MAX_OVERFLOW", "max_overflow")
    _apply_int("SQLALCHEMY_POOL_TIMEOUT", "pool_timeout")

    if changed:
        app.config["SQLALCHEMY_ENGINE_OPTIONS"] = engine_opts


def _configure_sqlite_engine_options(app: Flask) -> None:
    """Configure SQLite engine options for file and memory databases"""
    uri = app.config.get("SQLALCHEMY_DATABASE_URI", "")
    if not uri.startswith("sqlite"):
        return
    opts = dict(app.config.get("SQLALCHEMY_ENGINE_OPTIONS", {}))
    # SQLite pools are not sized like server pools
    opts.pop("pool_size", None)
    opts.pop("max_overflow", None)
    opts.pop("pool_timeout", None)
    # Writers wait on the database lock instead of failing immediately.
    opts["connect_args"] = {"check_same_thread": False, "timeout": 15}
    if uri in ("sqlite://", "sqlite:///:memory:"):
        opts["poolclass"] = StaticPool
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = opts


def _install_store(app: Flask) -> None:
    from .services.dispatcher import ActionDispatcher

    with app.app_context():
        store = Store(db.engine)
    app.extensions[EXTENSION_KEY] = store
    app.extensions[DISPATCHER_KEY] = ActionDispatcher(store)
    atexit.register(store.close)
    logger.debug("Store registered for %s", store.engine.url.render_as_string(hide_password=True))
