from __future__ import annotations

import contextlib
import logging
import socket
import threading
import time
from dataclasses import dataclass, field

import uvicorn

from ..registry import ModelRegistry
from ..server import STORE, create_app
from ..store.http import HttpStore
from ..store.memory import InMemoryStore


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SceneServer:
    host: str
    port: int
    url: str
    app_name: str
    store: InMemoryStore = field(repr=False)

    def registry(self) -> ModelRegistry:
        """Registry writing straight into the served store (no HTTP hop)."""
        return ModelRegistry(self.store, self.app_name)

    def http_store(self, *, timeout_s: float = 10.0) -> HttpStore:
        return HttpStore(self.url, timeout_s=timeout_s)


def _find_free_port(host: str) -> int:
    with contextlib.closing(socket.socket(socket.AF_INET, socket.SOCK_STREAM)) as s:
        s.bind((host, 0))
        return int(s.getsockname()[1])


def run(
    *,
    host: str = "127.0.0.1",
    port: int = 0,
    app_name: str | None = None,
    store: InMemoryStore | None = None,
    log_level: str = "info",
    access_log: bool = False,
) -> SceneServer:
    """Serve a store over HTTP from a background thread.

    Notes:
    - `port=0` picks a free port.
    - The per-request access log is off by default because the front-end polls
      the interaction and pose keys every frame.
    """
    if port == 0:
        port = _find_free_port(host)

    backing = store if store is not None else STORE
    registry = ModelRegistry(backing, app_name)
    app = create_app(backing, registry.app)

    config = uvicorn.Config(app, host=host, port=port, log_level=log_level, access_log=access_log)
    server = uvicorn.Server(config)

    thread = threading.Thread(target=server.run, daemon=True)
    thread.start()

    # Give it a moment so an immediate client request doesn't race with startup.
    time.sleep(0.05)

    url = f"http://{host}:{port}"
    logger.info("serving app %r at %s", registry.app, url)
    return SceneServer(host=host, port=port, url=url, app_name=registry.app, store=backing)
