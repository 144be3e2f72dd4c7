"""Default Flask application factory booted by the shared fixture."""

from __future__ import annotations

import os
import secrets
from pathlib import Path
from typing import Any, Mapping, Optional

from dotenv import load_dotenv
from flask import Flask

from .extensions import db
from .services import RestaurantService

DEFAULT_DB_FILENAME = "test.db"


def _working_directory() -> Path:
    return Path(os.environ.get("PWD") or os.getcwd())


def _resolve_database_uri() -> str:
    database_uri = os.environ.get("DATABASE_URL") or os.environ.get("LOCAL_DATABASE_URI")
    if not database_uri:
        filename = os.environ.get("SHARED_APP_DB_FILENAME", DEFAULT_DB_FILENAME)
        database_uri = f"sqlite:///{filename}"
    return _anchor_sqlite_path(database_uri)


def _anchor_sqlite_path(database_uri: str) -> str:
    """Anchor relative SQLite paths at the working directory.

    Flask-SQLAlchemy would otherwise place them in the instance folder, where
    the suite teardown does not look.
    """

    if not database_uri.startswith("sqlite:///"):
        return database_uri

    sqlite_path = database_uri.replace("sqlite:///", "", 1)
    if not sqlite_path or sqlite_path == ":memory:" or sqlite_path.startswith("file:"):
        return database_uri

    path = Path(sqlite_path).expanduser()
    if not path.is_absolute():
        path = _working_directory() / path
    path.parent.mkdir(parents=True, exist_ok=True)
    return f"sqlite:///{path}"


def create_app(overrides: Optional[Mapping[str, Any]] = None) -> Flask:
    """Configure and return the Flask application."""

    load_dotenv()

    app = Flask(__package__)
    app.restaurant_service = RestaurantService()

    # A random key keeps the app bootable in suites that never configure one.
    app.config["SECRET_KEY"] = os.environ.get("FLASK_SECRET_KEY") or secrets.token_hex(32)
    app.config["TESTING"] = True
    app.config["SQLALCHEMY_DATABASE_URI"] = _resolve_database_uri()
    app.config["SQLALCHEMY_ENGINE_OPTIONS"] = {"pool_pre_ping": True}
    app.config.setdefault("SQLALCHEMY_TRACK_MODIFICATIONS", False)

    if overrides:
        app.config.update(overrides)
        app.config["SQLALCHEMY_DATABASE_URI"] = _anchor_sqlite_path(
            app.config["SQLALCHEMY_DATABASE_URI"]
        )

    # Ensure models are registered with SQLAlchemy before any table creation.
    from . import models  # noqa: F401

    db.init_app(app)

    with app.app_context():
        db.create_all()

    from .routes import main_bp

    app.register_blueprint(main_bp)

    return app
