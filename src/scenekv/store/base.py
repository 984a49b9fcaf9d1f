from __future__ import annotations

"""Store client contract and the command queue shared by the clients.

Commands are plain dicts so the same batch can be executed in-process or sent
over HTTP:

    {"op": "set", "key": k, "value": v}
    {"op": "get", "key": k}
    {"op": "del", "keys": [k, ...]}
    {"op": "sadd" | "srem", "key": k, "values": [v, ...]}
    {"op": "smembers", "key": k}
    {"op": "scan", "pattern": p}

Results come back as `{"ok": true, "result": ...}` or `{"ok": false, "error": msg}`.
"""

import threading
from concurrent.futures import Future
from typing import Any, Iterable, Protocol

from ..core.errors import StoreCommandError


OPS = ("set", "get", "del", "sadd", "srem", "smembers", "scan")


class StoreClient(Protocol):
    """Queued key-value store. Nothing is visible to other readers before `commit()`."""

    def set(self, key: str, value: Any) -> None: ...
    def get(self, key: str) -> Future[Any]: ...
    def delete(self, keys: Iterable[str]) -> None: ...
    def sadd(self, key: str, values: Iterable[str]) -> None: ...
    def srem(self, key: str, values: Iterable[str]) -> None: ...
    def smembers(self, key: str) -> Future[set[str]]: ...
    def scan(self, pattern: str) -> Future[set[str]]: ...
    def commit(self) -> None: ...
    def sync_commit(self) -> None: ...


def _require_str_list(command: dict[str, Any], field: str) -> None:
    values = command.get(field)
    if not isinstance(values, list) or not all(isinstance(v, str) for v in values):
        raise TypeError(f"{command['op']} requires '{field}' to be a list of strings")


def validate_command(command: Any) -> dict[str, Any]:
    """Check a command's op and argument shapes.

    Raises `ValueError` for an unknown op and `TypeError` for malformed arguments.
    A bare string where a list is expected is rejected rather than split into
    characters.
    """
    if not isinstance(command, dict):
        raise TypeError(f"command must be an object, got {type(command).__name__}")
    op = command.get("op")
    if op not in OPS:
        raise ValueError(f"Unsupported store command: {op!r}")
    if op == "scan":
        if not isinstance(command.get("pattern"), str):
            raise TypeError("scan requires a string 'pattern'")
    elif op == "del":
        _require_str_list(command, "keys")
    else:
        if not isinstance(command.get("key"), str):
            raise TypeError(f"{op} requires a string 'key'")
        if op in ("sadd", "srem"):
            _require_str_list(command, "values")
        elif op == "set" and "value" not in command:
            raise TypeError("set requires a 'value'")
    return command


def command_result(op: str, raw: Any) -> Any:
    """Convert a wire result into the Python value a future resolves to."""
    if op in ("smembers", "scan"):
        return set(raw or ())
    return raw


class PendingOps:
    """Commands queued since the last commit, with the futures waiting on them."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._commands: list[dict[str, Any]] = []
        self._futures: list[Future[Any] | None] = []

    def push(self, command: dict[str, Any], *, want_result: bool = False) -> Future[Any] | None:
        if command.get("op") not in OPS:
            raise ValueError(f"Unsupported store command: {command.get('op')!r}")
        fut: Future[Any] | None = Future() if want_result else None
        with self._lock:
            self._commands.append(command)
            self._futures.append(fut)
        return fut

    def take(self) -> tuple[list[dict[str, Any]], list[Future[Any] | None]]:
        with self._lock:
            commands, futures = self._commands, self._futures
            self._commands, self._futures = [], []
        return commands, futures

    def __len__(self) -> int:
        with self._lock:
            return len(self._commands)

    @staticmethod
    def resolve(
        commands: list[dict[str, Any]],
        futures: list[Future[Any] | None],
        results: list[dict[str, Any]],
    ) -> None:
        """Settle futures from batch results.

        Errors on commands nobody waits for are collected and raised once every
        future has been settled.
        """
        if len(results) != len(commands) or not all(isinstance(r, dict) for r in results):
            err = StoreCommandError(f"store returned malformed results for {len(commands)} commands")
            for fut in futures:
                if fut is not None:
                    fut.set_exception(err)
            raise err

        unobserved: list[str] = []
        for command, fut, res in zip(commands, futures, results):
            if res.get("ok"):
                if fut is not None:
                    fut.set_result(command_result(command["op"], res.get("result")))
                continue
            msg = f"{command['op']} failed: {res.get('error', 'unknown error')}"
            if fut is not None:
                fut.set_exception(StoreCommandError(msg))
            else:
                unobserved.append(msg)
        if unobserved:
            raise StoreCommandError("; ".join(unobserved))

    @staticmethod
    def fail(futures: list[Future[Any] | None], exc: BaseException) -> None:
        for fut in futures:
            if fut is not None and not fut.done():
                fut.set_exception(exc)
