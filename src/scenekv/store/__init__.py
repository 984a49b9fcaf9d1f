from __future__ import annotations

from .base import PendingOps, StoreClient
from .http import HttpStore
from .memory import InMemoryStore

__all__ = ["StoreClient", "PendingOps", "InMemoryStore", "HttpStore"]
