from __future__ import annotations

import json
import logging
import threading
from concurrent.futures import Future
from fnmatch import fnmatchcase
from typing import Any, Iterable

from ..core.errors import StoreCommandError
from .base import PendingOps, validate_command


logger = logging.getLogger(__name__)


class InMemoryStore:
    """Process-local key-value store with queued, commit-applied commands.

    Strings hold JSON text and sets hold plain strings, mirroring how a Redis
    deployment is used by the web front-end. Every batch runs under one lock, so
    a commit is applied atomically with respect to other commits.
    """

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._strings: dict[str, str] = {}
        self._sets: dict[str, set[str]] = {}
        self._pending = PendingOps()
        self._revision = 0

    # Queued client API

    def set(self, key: str, value: Any) -> None:
        # Encode eagerly so unserializable values fail at the call site.
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
        results = self.execute(commands)
        PendingOps.resolve(commands, futures, results)

    def sync_commit(self) -> None:
        # In-process commits complete before returning.
        self.commit()

    # Batch execution

    def revision(self) -> int:
        with self._lock:
            return self._revision

    def execute(self, commands: list[dict[str, Any]]) -> list[dict[str, Any]]:
        """Apply a batch of commands in order and return one result per command."""
        out: list[dict[str, Any]] = []
        with self._lock:
            for command in commands:
                try:
                    result = self._execute_one_locked(command)
                except (KeyError, TypeError, ValueError) as e:
                    out.append({"ok": False, "error": str(e)})
                else:
                    out.append({"ok": True, "result": result})
        return out

    def _execute_one_locked(self, command: dict[str, Any]) -> Any:
        op = validate_command(command)["op"]
        if op == "set":
            key = str(command["key"])
            if key in self._sets:
                raise TypeError(f"WRONGTYPE key {key!r} holds a set")
            self._strings[key] = json.dumps(command["value"])
            self._revision += 1
            return None
        if op == "get":
            key = str(command["key"])
            if key in self._sets:
                raise TypeError(f"WRONGTYPE key {key!r} holds a set")
            raw = self._strings.get(key)
            return None if raw is None else json.loads(raw)
        if op == "del":
            removed = 0
            for key in command["keys"]:
                removed += int(self._strings.pop(key, None) is not None)
                removed += int(self._sets.pop(key, None) is not None)
            if removed:
                self._revision += 1
            return removed
        if op in ("sadd", "srem"):
            key = str(command["key"])
            if key in self._strings:
                raise TypeError(f"WRONGTYPE key {key!r} holds a string")
            members = self._sets.get(key, set())
            before = len(members)
            if op == "sadd":
                members.update(str(v) for v in command["values"])
            else:
                members.difference_update(str(v) for v in command["values"])
            if members:
                self._sets[key] = members
            else:
                self._sets.pop(key, None)
            changed = abs(len(members) - before)
            if changed:
                self._revision += 1
            return changed
        if op == "smembers":
            key = str(command["key"])
            if key in self._strings:
                raise TypeError(f"WRONGTYPE key {key!r} holds a string")
            return sorted(self._sets.get(key, set()))
        if op == "scan":
            pattern = str(command["pattern"])
            return sorted(k for k in (*self._strings, *self._sets) if fnmatchcase(k, pattern))
        raise ValueError(f"Unsupported store command: {op!r}")

    # Immediate reads for servers and tests

    def get_now(self, key: str) -> Any:
        res = self.execute([{"op": "get", "key": key}])[0]
        if not res["ok"]:
            raise StoreCommandError(res["error"])
        return res["result"]

    def keys(self, pattern: str = "*") -> list[str]:
        return self.execute([{"op": "scan", "pattern": pattern}])[0]["result"]

    def reset(self) -> None:
        with self._lock:
            self._strings.clear()
            self._sets.clear()
            self._revision += 1
        logger.debug("store reset")
