from __future__ import annotations

import json
import logging
import os
from concurrent.futures import Future
from typing import Any, Iterable

import httpx

from ..core.errors import StoreUnavailableError
from .base import PendingOps


logger = logging.getLogger(__name__)

DEFAULT_URL = "http://127.0.0.1:8000"


def default_base_url() -> str:
    url = os.getenv("SCENEKV_URL", "").strip() or DEFAULT_URL
    if "://" not in url:
        url = "http://" + url
    return url.rstrip("/")


class HttpStore:
    """Store client that talks to a running scenekv server.

    Commands are queued locally and `commit()` sends them as one batch to
    `POST /api/store/batch`, so a tick's worth of writes costs one round trip.
    Transport errors and non-2xx responses raise `StoreUnavailableError`; there
    is no retry.
    """

    def __init__(
        self,
        base_url: str | None = None,
        *,
        client: httpx.Client | None = None,
        timeout_s: float = 10.0,
    ) -> None:
        if client is not None:
            self._client = client
            self._owns_client = False
            self.base_url = str(client.base_url).rstrip("/")
        else:
            self.base_url = (base_url or default_base_url()).rstrip("/")
            self._client = httpx.Client(base_url=self.base_url, timeout=timeout_s)
            self._owns_client = True
        self._pending = PendingOps()

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpStore":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def set(self, key: str, value: Any) -> None:
        self._pending.push({"op": "set", "key": str(key), "value": json.loads(json.dumps(value))})

    def get(self, key: str) -> Future[Any]:
        return self._pending.push({"op": "get", "key": str(key)}, want_result=True)  # type: ignore[return-value]

    def delete(self, keys: Iterable[str]) -> None:
        ks = sorted({str(k) for k in keys})
        if ks:
            self._pending.push({"op": "del", "keys": ks})

    def sadd(self, key: str, values: Iterable[str]) -> None:
        self._pending.push({"op": "sadd", "key": str(key), "values": [str(v) for v in values]})

    def srem(self, key: str, values: Iterable[str]) -> None:
        self._pending.push({"op": "srem", "key": str(key), "values": [str(v) for v in values]})

    def smembers(self, key: str) -> Future[set[str]]:
        return self._pending.push({"op": "smembers", "key": str(key)}, want_result=True)  # type: ignore[return-value]

    def scan(self, pattern: str) -> Future[set[str]]:
        return self._pending.push({"op": "scan", "pattern": str(pattern)}, want_result=True)  # type: ignore[return-value]

    def commit(self) -> None:
        commands, futures = self._pending.take()
        if not commands:
            return
        try:
            res = self._client.post("/api/store/batch", json={"commands": commands})
        except httpx.HTTPError as e:
            err = StoreUnavailableError(f"Store request to {self.base_url} failed: {e}")
            PendingOps.fail(futures, err)
            raise err from e
        if res.status_code >= 400:
            err = StoreUnavailableError(f"Store batch failed: {res.status_code} {res.text}")
            PendingOps.fail(futures, err)
            raise err

        try:
            payload = res.json()
        except ValueError:
            payload = None
        results = payload.get("results") if isinstance(payload, dict) else None
        if not isinstance(results, list) or not all(isinstance(r, dict) for r in results):
            err = StoreUnavailableError(f"Store batch returned invalid response: {res.status_code} {res.text[:200]}")
            PendingOps.fail(futures, err)
            raise err
        logger.debug("committed %d commands to %s", len(commands), self.base_url)
        PendingOps.resolve(commands, futures, results)

    def sync_commit(self) -> None:
        # The batch request is synchronous already.
        self.commit()

    def is_alive(self) -> bool:
        """Best-effort probe of the server's health endpoint."""
        try:
            r = self._client.get("/healthz")
            return r.status_code == 200 and bool(r.json().get("ok"))
        except (httpx.HTTPError, ValueError):
            return False
