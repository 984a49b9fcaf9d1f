from __future__ import annotations

"""Canonical key strings shared by the simulator and the web front-end.

The key layout is a wire contract: both sides build identical strings from the
same (app, namespace, kind, name) tuple, so changing any format here is a
breaking protocol change.

    webapp::resources::<app>              set of resource roots
    webapp::<app>::args::<namespace>      JSON blob with the four model prefixes
    webapp::<app>::interaction            current interaction record
    <namespace>::model::<kind>::<name>    model descriptor
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any

from .errors import DecodeError


SEPARATOR = "::"
WEBAPP_PREFIX = "webapp" + SEPARATOR
RESOURCES_PREFIX = WEBAPP_PREFIX + "resources" + SEPARATOR
DEFAULT_APP = "simulator"

# Characters with a meaning in scan patterns.
_GLOB_CHARS = frozenset("*?[]\\")


class ModelKind(str, Enum):
    ROBOT = "robot"
    OBJECT = "object"
    TRAJECTORY = "trajectory"
    CAMERA = "camera"

    @classmethod
    def from_any(cls, value: Any) -> "ModelKind":
        if isinstance(value, cls):
            return value
        v = str(value).strip().lower()
        aliases: dict[str, ModelKind] = {
            "robot": cls.ROBOT,
            "robots": cls.ROBOT,
            "object": cls.OBJECT,
            "objects": cls.OBJECT,
            "trajectory": cls.TRAJECTORY,
            "trajectories": cls.TRAJECTORY,
            "camera": cls.CAMERA,
            "cameras": cls.CAMERA,
        }
        if v in aliases:
            return aliases[v]
        raise ValueError(f"Unsupported model kind {value!r}. Use one of {[k.value for k in cls]}")


def validate_segment(value: str, *, name: str) -> str:
    """Reject strings that would make prefixes ambiguous or act as scan wildcards."""
    s = str(value)
    if not s:
        raise ValueError(f"{name} cannot be empty")
    if SEPARATOR in s:
        raise ValueError(f"{name} cannot contain {SEPARATOR!r}: {s!r}")
    bad = sorted(_GLOB_CHARS.intersection(s))
    if bad:
        raise ValueError(f"{name} cannot contain pattern characters {bad}: {s!r}")
    return s


def default_app_name() -> str:
    return os.getenv("SCENEKV_APP", "").strip() or DEFAULT_APP


@dataclass(frozen=True)
class AppKeys:
    """Keys owned by one web application instance."""

    app: str = DEFAULT_APP

    def __post_init__(self) -> None:
        validate_segment(self.app, name="app")

    @property
    def prefix(self) -> str:
        return WEBAPP_PREFIX + self.app + SEPARATOR

    @property
    def resources_key(self) -> str:
        return RESOURCES_PREFIX + self.app

    @property
    def interaction_key(self) -> str:
        # One interaction session per app instance, shared across namespaces.
        return self.prefix + "interaction"

    def args_key(self, namespace: str) -> str:
        validate_segment(namespace, name="namespace")
        return self.prefix + "args" + SEPARATOR + namespace


@dataclass(frozen=True)
class ModelKeys:
    """Per-namespace key prefixes for the four model kinds."""

    key_namespace: str

    def __post_init__(self) -> None:
        validate_segment(self.key_namespace, name="namespace")

    def prefix(self, kind: ModelKind | str) -> str:
        k = ModelKind.from_any(kind)
        return self.key_namespace + SEPARATOR + "model" + SEPARATOR + k.value + SEPARATOR

    @property
    def key_robots_prefix(self) -> str:
        return self.prefix(ModelKind.ROBOT)

    @property
    def key_objects_prefix(self) -> str:
        return self.prefix(ModelKind.OBJECT)

    @property
    def key_trajectories_prefix(self) -> str:
        return self.prefix(ModelKind.TRAJECTORY)

    @property
    def key_cameras_prefix(self) -> str:
        return self.prefix(ModelKind.CAMERA)

    def prefixes(self) -> dict[ModelKind, str]:
        return {k: self.prefix(k) for k in ModelKind}

    def key_for(self, kind: ModelKind | str, name: str) -> str:
        if not name:
            raise ValueError("model name cannot be empty")
        return self.prefix(kind) + name

    def to_args(self) -> dict[str, str]:
        return {
            "key_robots_prefix": self.key_robots_prefix,
            "key_objects_prefix": self.key_objects_prefix,
            "key_trajectories_prefix": self.key_trajectories_prefix,
            "key_cameras_prefix": self.key_cameras_prefix,
        }

    @classmethod
    def from_args(cls, namespace: str, doc: Any) -> "ModelKeys":
        """Rebuild from an args blob, checking it matches the expected layout."""
        if not isinstance(doc, dict):
            raise DecodeError(f"model keys document must be an object, got {type(doc).__name__}")
        keys = cls(namespace)
        for field, expected in keys.to_args().items():
            if field not in doc:
                raise DecodeError(f"model keys document is missing {field!r}")
            if doc[field] != expected:
                raise DecodeError(f"{field} is {doc[field]!r}, expected {expected!r}")
        return keys
