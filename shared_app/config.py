"""Settings for the shared application fixture.

Values come from pytest ini options first, then the environment (a ``.env``
file is honoured), then the defaults below.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from dotenv import load_dotenv
from flask import Flask
from werkzeug.utils import ImportStringError, import_string

from .errors import BootError

DEFAULT_FACTORY = "shared_app.factory:create_app"

# Framework boot plus seeding can be slow; keep well above any per-test limit.
DEFAULT_BOOT_TIMEOUT = 50.0

ENV_PREFIX = "SHARED_APP_"


def _bool_from_env(name: str, default: bool = False) -> bool:
    value = os.environ.get(name)
    if value is None:
        return default
    return _parse_bool(value)


def _parse_bool(value: Any) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() in {"1", "true", "yes", "on"}


@dataclass(frozen=True)
class FixtureSettings:
    factory: str = DEFAULT_FACTORY
    boot_timeout: float = DEFAULT_BOOT_TIMEOUT
    host: str = "127.0.0.1"
    port: int = 0
    keep_database: bool = False

    @classmethod
    def from_env(cls) -> "FixtureSettings":
        load_dotenv()
        return cls(
            factory=os.environ.get(f"{ENV_PREFIX}FACTORY") or DEFAULT_FACTORY,
            boot_timeout=float(
                os.environ.get(f"{ENV_PREFIX}BOOT_TIMEOUT") or DEFAULT_BOOT_TIMEOUT
            ),
            host=os.environ.get(f"{ENV_PREFIX}HOST") or "127.0.0.1",
            port=int(os.environ.get(f"{ENV_PREFIX}PORT") or 0),
            keep_database=_bool_from_env(f"{ENV_PREFIX}KEEP_DATABASE", False),
        )

    def merged(self, overrides: Mapping[str, Any]) -> "FixtureSettings":
        """Return a copy with the non-empty ``overrides`` applied.

        Ini values arrive as strings, so each field is coerced to the type of
        its default.
        """

        values = {
            "factory": self.factory,
            "boot_timeout": self.boot_timeout,
            "host": self.host,
            "port": self.port,
            "keep_database": self.keep_database,
        }
        for key, raw in overrides.items():
            if key not in values:
                raise KeyError(f"Unknown fixture setting: {key}")
            if raw is None or raw == "":
                continue
            if key == "boot_timeout":
                values[key] = float(raw)
            elif key == "port":
                values[key] = int(raw)
            elif key == "keep_database":
                values[key] = _parse_bool(raw)
            else:
                values[key] = str(raw)

        if values["boot_timeout"] <= 0:
            raise ValueError("boot_timeout must be a positive number of seconds")
        return FixtureSettings(**values)


def resolve_factory(path: str) -> Callable[[], Flask]:
    """Import the application factory named by ``module:callable``."""

    try:
        factory = import_string(path)
    except ImportStringError as exc:
        raise BootError(f"Could not import application factory {path!r}") from exc

    if not callable(factory):
        raise BootError(f"Application factory {path!r} is not callable")
    return factory
