from __future__ import annotations

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..core.keys import AppKeys
from ..store.memory import InMemoryStore
from .resources import mount_resources, resolve_resource
from .routes import mount_store_api


def create_api_app(store: InMemoryStore, app_keys: AppKeys) -> FastAPI:
    app = FastAPI(title="scenekv", version="0.1.0")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[
            "http://localhost:5173",
            "http://127.0.0.1:5173",
        ],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    mount_store_api(app, store, app_keys)
    mount_resources(app, store, app_keys)

    @app.get("/healthz")
    def healthz() -> dict[str, bool]:
        return {"ok": True}

    @app.get("/api/events")
    def events() -> dict[str, object]:
        # Minimal polling endpoint.
        return {"revision": store.revision(), "app": app_keys.app}

    @app.post("/api/reset")
    def reset_store() -> dict[str, bool]:
        store.reset()
        return {"ok": True}

    return app


__all__ = ["create_api_app", "mount_store_api", "mount_resources", "resolve_resource"]
