from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import numpy as np

from .errors import DecodeError


class ModifierKey(str, Enum):
    """Modifier keys held during a pointer interaction."""

    UNDEFINED = "undefined"
    ALT = "alt"
    CTRL = "ctrl"
    META = "meta"
    SHIFT = "shift"

    @classmethod
    def from_any(cls, value: Any) -> "ModifierKey":
        if isinstance(value, cls):
            return value
        v = str(value).strip().lower()
        for key in cls:
            if key.value == v:
                return key
        # Unknown keys are tolerated: browsers report more modifiers than we use.
        return cls.UNDEFINED


def _vec3_field(doc: dict[str, Any], name: str) -> np.ndarray:
    if name not in doc:
        raise DecodeError(f"interaction is missing {name!r}")
    try:
        arr = np.asarray(doc[name], dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"interaction.{name} must be a list of 3 numbers") from e
    if arr.shape != (3,):
        raise DecodeError(f"interaction.{name} must be a list of 3 numbers, got shape {arr.shape}")
    return arr


@dataclass(frozen=True, eq=False)
class Interaction:
    """Last-writer-wins pointer/keyboard state written by the front-end.

    `key_object` is the full key of the model that was clicked, `idx_link` the
    link inside it (-1 for single-body objects). `key_down` holds at most one
    pressed character, or is empty.
    """

    key_object: str = ""
    idx_link: int = -1
    pos_click_in_link: np.ndarray = field(default_factory=lambda: np.zeros(3))
    pos_mouse_in_world: np.ndarray = field(default_factory=lambda: np.zeros(3))
    modifier_keys: frozenset[ModifierKey] = frozenset()
    key_down: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "pos_click_in_link", np.asarray(self.pos_click_in_link, dtype=np.float64).reshape(3))
        object.__setattr__(self, "pos_mouse_in_world", np.asarray(self.pos_mouse_in_world, dtype=np.float64).reshape(3))
        object.__setattr__(self, "modifier_keys", frozenset(ModifierKey.from_any(k) for k in self.modifier_keys))

    def has_modifier(self, key: ModifierKey | str) -> bool:
        return ModifierKey.from_any(key) in self.modifier_keys

    def to_dict(self) -> dict[str, Any]:
        return {
            "key_object": self.key_object,
            "idx_link": int(self.idx_link),
            "pos_click_in_link": [float(x) for x in self.pos_click_in_link],
            "pos_mouse_in_world": [float(x) for x in self.pos_mouse_in_world],
            "modifier_keys": sorted(k.value for k in self.modifier_keys),
            "key_down": self.key_down,
        }

    @classmethod
    def from_dict(cls, doc: Any) -> "Interaction":
        if not isinstance(doc, dict):
            raise DecodeError(f"interaction must be an object, got {type(doc).__name__}")
        for required in ("key_object", "idx_link", "modifier_keys", "key_down"):
            if required not in doc:
                raise DecodeError(f"interaction is missing {required!r}")
        if not isinstance(doc["key_object"], str):
            raise DecodeError("interaction.key_object must be a string")
        if not isinstance(doc["key_down"], str):
            raise DecodeError("interaction.key_down must be a string")
        idx = doc["idx_link"]
        if (
            isinstance(idx, bool)
            or not isinstance(idx, (int, float))
            or (isinstance(idx, float) and not math.isfinite(idx))
            or int(idx) != idx
        ):
            raise DecodeError("interaction.idx_link must be an integer")
        mods = doc["modifier_keys"]
        if not isinstance(mods, list):
            raise DecodeError("interaction.modifier_keys must be a list")
        return cls(
            key_object=doc["key_object"],
            idx_link=int(idx),
            pos_click_in_link=_vec3_field(doc, "pos_click_in_link"),
            pos_mouse_in_world=_vec3_field(doc, "pos_mouse_in_world"),
            modifier_keys=frozenset(ModifierKey.from_any(k) for k in mods),
            key_down=doc["key_down"],
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Interaction):
            return NotImplemented
        return (
            self.key_object == other.key_object
            and self.idx_link == other.idx_link
            and np.array_equal(self.pos_click_in_link, other.pos_click_in_link)
            and np.array_equal(self.pos_mouse_in_world, other.pos_mouse_in_world)
            and self.modifier_keys == other.modifier_keys
            and self.key_down == other.key_down
        )

    __hash__ = None  # type: ignore[assignment]
