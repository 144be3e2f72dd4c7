"""Shared Flask application fixture for pytest suites.

One application instance is booted per test process and shared by every
test module that registers it; the temporary SQLite file is removed after
the whole suite has run.
"""

from .config import FixtureSettings
from .errors import BootError
from .fixture import register_fixture
from .handle import AppHandle, InstanceCell, default_cell, ensure_instance, get_instance

__version__ = "0.1.0"

__all__ = [
    "AppHandle",
    "BootError",
    "FixtureSettings",
    "InstanceCell",
    "default_cell",
    "ensure_instance",
    "get_instance",
    "register_fixture",
]
