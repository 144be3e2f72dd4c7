"""Read-only view of the default database connection and temp-file cleanup."""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Union

from flask import Flask
from sqlalchemy.engine import URL, make_url

logger = logging.getLogger(__name__)


def database_settings(
    config: Mapping[str, Any],
    engine_url: Optional[Union[str, URL]] = None,
) -> Optional[Dict[str, Any]]:
    """Describe the default connection configured on a Flask app.

    ``engine_url`` is the URL the engine actually opened; when given it wins
    over the configured URI. ``filename`` is only present for a file-based
    SQLite database. In-memory databases and ``file:`` URIs leave nothing
    behind for us to clean up.
    """

    uri = engine_url or config.get("SQLALCHEMY_DATABASE_URI")
    if not uri:
        return None

    url = make_url(uri)
    backend = url.get_backend_name()
    settings: Dict[str, Any] = {
        "client": backend,
        "database": url.database,
        "host": url.host,
    }

    database = url.database
    if (
        backend == "sqlite"
        and database
        and database != ":memory:"
        and not database.startswith("file:")
    ):
        settings["filename"] = database
    return settings


def app_database_settings(app: Flask) -> Optional[Dict[str, Any]]:
    """Settings for the app's default engine.

    Flask-SQLAlchemy resolves relative SQLite paths against the instance
    folder, so the live engine URL is the only reliable file location.
    """

    extension = app.extensions.get("sqlalchemy")
    if extension is None:
        return database_settings(app.config)

    with app.app_context():
        engine = extension.engines.get(None)
    if engine is None:
        return database_settings(app.config)
    return database_settings(app.config, engine.url)


def _working_directory(environ: Optional[Mapping[str, str]] = None) -> Path:
    environ = os.environ if environ is None else environ
    return Path(environ.get("PWD") or os.getcwd())


def temp_database_path(
    settings: Optional[Mapping[str, Any]],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Return ``<PWD>/<filename>`` or ``None`` when no file is configured."""

    if not settings or not settings.get("filename"):
        return None
    return _working_directory(environ) / settings["filename"]


def remove_temp_database(
    settings: Optional[Mapping[str, Any]],
    environ: Optional[Mapping[str, str]] = None,
) -> Optional[Path]:
    """Delete the temporary database file if it exists.

    Returns the removed path. OS errors from the delete are not caught.
    """

    path = temp_database_path(settings, environ)
    if path is None:
        logger.debug("shared_app.cleanup.skipped: no file-based database configured")
        return None

    if not path.exists():
        logger.debug("shared_app.cleanup.missing %s", path)
        return None

    path.unlink()
    logger.info("shared_app.cleanup.removed %s", path)
    return path
