"""The process-wide application handle and its lazy initialisation cell.

Exactly one :class:`AppHandle` exists per test process. It is created the
first time :meth:`InstanceCell.ensure` runs and is never replaced afterwards;
suite teardown only removes the temporary database file.

Usage::

    handle = ensure_instance()
    response = handle.test_client().get("/healthz")
"""

from __future__ import annotations

import asyncio
import inspect
import logging
import threading
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Optional, Union

from flask import Flask
from werkzeug.routing import Map
from werkzeug.serving import BaseWSGIServer, make_server

from .config import FixtureSettings, resolve_factory

logger = logging.getLogger(__name__)

SetupCallback = Callable[["AppHandle"], Union[None, Awaitable[Any]]]


@dataclass
class AppHandle:
    """The booted application with its HTTP server and routing table."""

    app: Flask
    url_map: Map
    host: str = "127.0.0.1"
    port: int = 0
    _server: Optional[BaseWSGIServer] = field(default=None, repr=False)
    _serve_thread: Optional[threading.Thread] = field(default=None, repr=False)

    @property
    def server(self) -> BaseWSGIServer:
        """The HTTP server for the app, bound on first access."""

        if self._server is None:
            self._server = make_server(self.host, self.port, self.app, threaded=True)
        return self._server

    @property
    def listening(self) -> bool:
        return self._server is not None

    @property
    def url(self) -> str:
        host, port = self.server.server_address[:2]
        return f"http://{host}:{port}"

    @property
    def serving(self) -> bool:
        return self._serve_thread is not None and self._serve_thread.is_alive()

    def test_client(self):
        return self.app.test_client()

    def allowed_methods(self, path: str) -> list[str]:
        """Methods the router accepts for ``path``, as sent in ``Allow``."""

        adapter = self.url_map.bind("localhost")
        return sorted(adapter.allowed_methods(path))

    def start_serving(self) -> str:
        """Serve requests on a daemon thread and return the base URL."""

        if not self.serving:
            self._serve_thread = threading.Thread(
                target=self.server.serve_forever,
                name="shared-app-server",
                daemon=True,
            )
            self._serve_thread.start()
            logger.info("shared_app.serving %s", self.url)
        return self.url

    def stop_serving(self) -> None:
        if not self.serving:
            return
        self.server.shutdown()
        self._serve_thread.join()
        self._serve_thread = None

    def close_server(self) -> None:
        """Stop serving and release the listening socket, if one was bound."""

        self.stop_serving()
        if self._server is None:
            return
        self._server.server_close()
        self._server = None

    def dispose_connections(self) -> None:
        """Release pooled database connections held by Flask-SQLAlchemy."""

        extension = self.app.extensions.get("sqlalchemy")
        if extension is None:
            return
        with self.app.app_context():
            for engine in extension.engines.values():
                engine.dispose()


def run_callback(callback: SetupCallback, handle: AppHandle) -> Any:
    """Call ``callback`` inside an app context, waiting for async results."""

    with handle.app.app_context():
        result = callback(handle)
        if inspect.isawaitable(result):
            result = asyncio.run(_wait_for(result))
    return result


async def _wait_for(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


class InstanceCell:
    """Guarded lazy-initialisation cell holding the shared :class:`AppHandle`."""

    def __init__(
        self,
        settings: Optional[FixtureSettings] = None,
        factory: Optional[Callable[[], Flask]] = None,
    ) -> None:
        self._settings = settings
        self._factory = factory
        self._handle: Optional[AppHandle] = None
        self._lock = threading.RLock()
        self.boot_count = 0

    @property
    def settings(self) -> FixtureSettings:
        if self._settings is None:
            self._settings = FixtureSettings.from_env()
        return self._settings

    @property
    def initialized(self) -> bool:
        return self._handle is not None

    def configure(
        self,
        settings: FixtureSettings,
        factory: Optional[Callable[[], Flask]] = None,
    ) -> None:
        """Replace settings before boot. A booted cell keeps its handle."""

        with self._lock:
            if self._handle is not None:
                logger.warning(
                    "shared_app.configure_ignored: instance already booted"
                )
                return
            self._settings = settings
            if factory is not None:
                self._factory = factory

    def get(self) -> Optional[AppHandle]:
        return self._handle

    def ensure(self, callback: Optional[SetupCallback] = None) -> AppHandle:
        """Boot once, run ``callback`` on every call, return the handle."""

        with self._lock:
            if self._handle is None:
                self._handle = self._boot()

        if callback is not None:
            run_callback(callback, self._handle)
        return self._handle

    def _boot(self) -> AppHandle:
        settings = self.settings
        factory = self._factory or resolve_factory(settings.factory)

        logger.info("shared_app.boot factory=%s", getattr(factory, "__qualname__", factory))
        app = factory()
        self.boot_count += 1

        # Flask's request chain already dispatches through the URL map and
        # answers 405 with an Allow header, so the server only needs the app.
        # The socket is bound when the server is first used, not here.
        handle = AppHandle(
            app=app,
            url_map=app.url_map,
            host=settings.host,
            port=settings.port,
        )
        logger.info("shared_app.ready routes=%d", len(list(app.url_map.iter_rules())))
        return handle


_default_cell = InstanceCell()


def default_cell() -> InstanceCell:
    return _default_cell


def ensure_instance(callback: Optional[SetupCallback] = None) -> AppHandle:
    return _default_cell.ensure(callback)


def get_instance() -> Optional[AppHandle]:
    return _default_cell.get()
