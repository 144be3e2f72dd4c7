"""Per-file registration of the shared application.

Bind the returned fixture to a module attribute so pytest collects it::

    from shared_app import register_fixture

    def seed(handle):
        handle.app.restaurant_service.create("Pizza")

    shared = register_fixture(seed)

    def test_seeded(shared_app):
        assert shared_app.app.restaurant_service.list()

The callback runs once for every registration, including registrations made
after the application has already booted. The temporary database is removed
by the session-scoped ``shared_app`` fixture once the whole suite finishes.
"""

from __future__ import annotations

import itertools
import logging
from typing import Optional

import pytest

from .handle import SetupCallback, default_cell

logger = logging.getLogger(__name__)

SETUP_FIXTURE_PREFIX = "shared_app_setup"

_counter = itertools.count(1)

registered_fixture_names: set[str] = set()


def register_fixture(callback: Optional[SetupCallback] = None, *, name: Optional[str] = None):
    """Return a module-scoped autouse fixture that boots and seeds the app."""

    fixture_name = name or f"{SETUP_FIXTURE_PREFIX}_{next(_counter)}"
    registered_fixture_names.add(fixture_name)

    @pytest.fixture(scope="module", autouse=True, name=fixture_name)
    def _setup(shared_app):
        cell = default_cell()
        logger.debug(
            "shared_app.setup fixture=%s callback=%s",
            fixture_name,
            getattr(callback, "__qualname__", None),
        )
        yield cell.ensure(callback)

    return _setup
