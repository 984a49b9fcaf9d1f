from __future__ import annotations

from .server import SceneServer, run

__all__ = ["SceneServer", "run"]
