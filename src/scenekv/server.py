from __future__ import annotations

from fastapi import FastAPI

from .api import create_api_app
from .core.keys import AppKeys, default_app_name
from .store.memory import InMemoryStore


# Process-wide store used when the app is started without an explicit one.
STORE = InMemoryStore()


def create_app(store: InMemoryStore | None = None, app_name: str | None = None) -> FastAPI:
    """Create the web app serving one store for one app name."""
    return create_api_app(store if store is not None else STORE, AppKeys(app_name or default_app_name()))
