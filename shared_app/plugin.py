"""pytest plugin wiring the shared application into the suite lifecycle.

Enable it from a ``conftest.py``::

    pytest_plugins = ["shared_app.plugin"]
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import List, Optional

import pytest

from .config import FixtureSettings
from .database import app_database_settings, remove_temp_database
from .fixture import registered_fixture_names
from .handle import AppHandle, default_cell

logger = logging.getLogger(__name__)

_INI_OPTIONS = {
    "factory": "Application factory to boot, as 'module:callable'.",
    "boot_timeout": "Timeout in seconds applied to tests that boot the shared app.",
    "host": "Host the shared app's HTTP server binds to.",
    "port": "Port the shared app's HTTP server binds to (0 picks a free port).",
    "keep_database": "Keep the temporary SQLite file after the suite finishes.",
}


def pytest_addoption(parser: pytest.Parser) -> None:
    for key, help_text in _INI_OPTIONS.items():
        parser.addini(f"shared_app_{key}", help_text, default="")


def pytest_configure(config: pytest.Config) -> None:
    overrides = {key: config.getini(f"shared_app_{key}") for key in _INI_OPTIONS}
    settings = FixtureSettings.from_env().merged(overrides)
    default_cell().configure(settings)


def runner_timeout(config: pytest.Config) -> Optional[float]:
    """The timeout pytest-timeout would apply, or ``None`` if it is not active."""

    if not config.pluginmanager.hasplugin("timeout"):
        return None
    # Same precedence as pytest-timeout: command line, environment, ini.
    value = config.getoption("timeout", None)
    if value is None:
        value = os.environ.get("PYTEST_TIMEOUT") or None
    if value is None:
        value = config.getini("timeout")
    return float(value or 0)


def _uses_shared_app(item: pytest.Item) -> bool:
    fixturenames = getattr(item, "fixturenames", ())
    if "shared_app" in fixturenames:
        return True
    return any(name in registered_fixture_names for name in fixturenames)


def apply_boot_timeout(
    config: pytest.Config,
    items: List[pytest.Item],
    boot_timeout: Optional[float] = None,
) -> int:
    """Raise the timeout ceiling for tests that boot the shared app.

    Tests with an explicit ``timeout`` marker are left alone. Returns the
    number of tests marked.
    """

    current = runner_timeout(config)
    if current is None:
        logger.debug("shared_app.timeout.skipped: pytest-timeout not active")
        return 0

    if boot_timeout is None:
        boot_timeout = default_cell().settings.boot_timeout
    if current and current >= boot_timeout:
        return 0

    marked = 0
    for item in items:
        if not _uses_shared_app(item) or item.get_closest_marker("timeout"):
            continue
        item.add_marker(pytest.mark.timeout(boot_timeout))
        marked += 1
    return marked


def pytest_collection_modifyitems(config: pytest.Config, items: List[pytest.Item]) -> None:
    apply_boot_timeout(config, items)


def finish_session(handle: AppHandle, settings: FixtureSettings) -> Optional[Path]:
    """Suite teardown: release the server and pool, then drop the temp database."""

    handle.close_server()
    database = app_database_settings(handle.app)
    handle.dispose_connections()
    if settings.keep_database:
        logger.info("shared_app.cleanup.kept: keep_database is set")
        return None
    return remove_temp_database(database)


@pytest.fixture(scope="session")
def shared_app():
    """The booted application, shared by every test in the session."""

    cell = default_cell()
    handle = cell.ensure()
    yield handle
    finish_session(handle, cell.settings)


@pytest.fixture
def shared_app_client(shared_app):
    """Flask test client bound to the shared application."""

    return shared_app.test_client()
