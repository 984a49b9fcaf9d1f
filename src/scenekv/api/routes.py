from __future__ import annotations

from typing import Any

from fastapi import FastAPI, HTTPException

from ..core.errors import DecodeError, StoreCommandError
from ..core.interaction import Interaction
from ..core.keys import AppKeys, ModelKind
from ..store.base import validate_command
from ..store.memory import InMemoryStore


_KIND_ARGS: dict[ModelKind, str] = {
    ModelKind.ROBOT: "key_robots_prefix",
    ModelKind.OBJECT: "key_objects_prefix",
    ModelKind.TRAJECTORY: "key_trajectories_prefix",
    ModelKind.CAMERA: "key_cameras_prefix",
}


def _validate_commands(body: Any) -> list[dict[str, Any]]:
    if not isinstance(body, dict) or not isinstance(body.get("commands"), list):
        raise HTTPException(status_code=400, detail="Body must be an object with a 'commands' list")
    commands = body["commands"]
    for i, c in enumerate(commands):
        try:
            validate_command(c)
        except (TypeError, ValueError) as e:
            raise HTTPException(status_code=400, detail=f"commands[{i}]: {e}")
    return commands


def mount_store_api(app: FastAPI, store: InMemoryStore, app_keys: AppKeys) -> None:
    """Mount the key-value endpoints used by `HttpStore` and the front-end."""

    @app.post("/api/store/batch")
    def store_batch(body: dict) -> dict[str, Any]:
        commands = _validate_commands(body)
        return {"results": store.execute(commands)}

    @app.get("/api/keys/{key:path}")
    def get_key(key: str) -> Any:
        try:
            value = store.get_now(key)
        except StoreCommandError as e:
            raise HTTPException(status_code=400, detail=str(e))
        if value is None:
            raise HTTPException(status_code=404, detail=f"Unknown key: {key}")
        return value

    @app.get("/api/scan")
    def scan(pattern: str = "*") -> dict[str, list[str]]:
        return {"keys": store.keys(pattern)}

    @app.get("/api/namespaces/{namespace}/models")
    def get_namespace_models(namespace: str) -> dict[str, dict[str, Any]]:
        # The front-end only knows the namespace; the prefixes come from the args blob.
        try:
            args = store.get_now(app_keys.args_key(namespace))
        except (ValueError, StoreCommandError) as e:
            raise HTTPException(status_code=400, detail=str(e))
        if not isinstance(args, dict):
            raise HTTPException(status_code=404, detail=f"Unknown namespace: {namespace}")

        out: dict[str, dict[str, Any]] = {}
        for kind, arg in _KIND_ARGS.items():
            prefix = args.get(arg)
            models: dict[str, Any] = {}
            if isinstance(prefix, str) and prefix:
                for key in store.keys(prefix + "*"):
                    try:
                        doc = store.get_now(key)
                    except StoreCommandError:
                        # A set under a model prefix is not a descriptor.
                        continue
                    if doc is not None:
                        models[key[len(prefix):]] = doc
            out[kind.value] = models
        return out

    @app.get("/api/interaction")
    def get_interaction() -> dict[str, Any] | None:
        return store.get_now(app_keys.interaction_key)

    @app.put("/api/interaction")
    def put_interaction(body: dict) -> dict[str, bool]:
        try:
            interaction = Interaction.from_dict(body)
        except DecodeError as e:
            raise HTTPException(status_code=400, detail=str(e))
        store.execute([{"op": "set", "key": app_keys.interaction_key, "value": interaction.to_dict()}])
        return {"ok": True}

    @app.delete("/api/interaction")
    def delete_interaction() -> dict[str, bool]:
        store.execute([{"op": "del", "keys": [app_keys.interaction_key]}])
        return {"ok": True}
