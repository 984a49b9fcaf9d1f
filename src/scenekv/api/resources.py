from __future__ import annotations

from pathlib import Path

from fastapi import FastAPI, HTTPException
from fastapi.responses import FileResponse

from ..core.keys import AppKeys
from ..store.memory import InMemoryStore


def _resource_roots(store: InMemoryStore, app_keys: AppKeys) -> list[Path]:
    res = store.execute([{"op": "smembers", "key": app_keys.resources_key}])[0]
    if not res["ok"]:
        return []
    return [Path(p).resolve() for p in res["result"]]


def resolve_resource(store: InMemoryStore, app_keys: AppKeys, path: str) -> Path:
    """Resolve a requested absolute path, allowing only files under a registered root.

    Raises `PermissionError` outside every root and `FileNotFoundError` if the
    file does not exist.
    """
    requested = Path("/" + path.lstrip("/")).resolve()
    for root in _resource_roots(store, app_keys):
        if requested == root or requested.is_relative_to(root):
            if not requested.is_file():
                raise FileNotFoundError(str(requested))
            return requested
    raise PermissionError(str(requested))


def mount_resources(app: FastAPI, store: InMemoryStore, app_keys: AppKeys) -> None:
    """Serve meshes/textures referenced by model graphics.

    `GET /resources/<absolute path>` succeeds only below a directory registered
    in `webapp::resources::<app>`.
    """

    @app.get("/resources/{path:path}")
    def get_resource(path: str) -> FileResponse:
        try:
            resolved = resolve_resource(store, app_keys, path)
        except PermissionError:
            raise HTTPException(status_code=403, detail="Path is not under a registered resource directory")
        except FileNotFoundError:
            raise HTTPException(status_code=404, detail="Resource not found")
        return FileResponse(str(resolved))
