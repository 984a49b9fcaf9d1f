from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

import numpy as np

from .errors import DecodeError
from .transforms import as_quat, as_vec3, identity_quat


GeometryType = Literal["box", "capsule", "cylinder", "sphere", "mesh"]
_GEOMETRY_TYPES: tuple[str, ...] = ("box", "capsule", "cylinder", "sphere", "mesh")


def _require(doc: Any, field_name: str, *, what: str) -> Any:
    if not isinstance(doc, dict):
        raise DecodeError(f"{what} must be an object, got {type(doc).__name__}")
    if field_name not in doc:
        raise DecodeError(f"{what} is missing {field_name!r}")
    return doc[field_name]


def _vec(value: Any, n: int, *, what: str) -> tuple[float, ...]:
    try:
        arr = np.asarray(value, dtype=np.float64)
    except (TypeError, ValueError) as e:
        raise DecodeError(f"{what} must be a list of {n} numbers") from e
    if arr.shape != (n,):
        raise DecodeError(f"{what} must be a list of {n} numbers, got shape {arr.shape}")
    return tuple(float(x) for x in arr)


@dataclass(frozen=True)
class Pose:
    """Rigid transform with an xyzw orientation.

    On the wire the orientation is written as `{w, x, y, z}`, which is what the
    front-end expects.
    """

    pos: tuple[float, float, float] = (0.0, 0.0, 0.0)
    ori: tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)

    @classmethod
    def from_arrays(cls, pos: Any, ori: Any | None = None) -> "Pose":
        p = as_vec3(pos, name="pos")
        q = as_quat(identity_quat() if ori is None else ori, name="ori")
        return cls(
            pos=(float(p[0]), float(p[1]), float(p[2])),
            ori=(float(q[0]), float(q[1]), float(q[2]), float(q[3])),
        )

    def to_dict(self) -> dict[str, Any]:
        x, y, z, w = self.ori
        return {"pos": list(self.pos), "ori": {"w": w, "x": x, "y": y, "z": z}}

    @classmethod
    def from_dict(cls, doc: Any) -> "Pose":
        pos = _vec(_require(doc, "pos", what="pose"), 3, what="pose.pos")
        ori_doc = _require(doc, "ori", what="pose")
        if isinstance(ori_doc, dict):
            try:
                q = (float(ori_doc["x"]), float(ori_doc["y"]), float(ori_doc["z"]), float(ori_doc["w"]))
            except (KeyError, TypeError, ValueError) as e:
                raise DecodeError("pose.ori must have numeric w, x, y, z fields") from e
        else:
            q = _vec(ori_doc, 4, what="pose.ori")
        return cls(pos=pos, ori=q)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Geometry:
    type: GeometryType
    scale: tuple[float, float, float] = (1.0, 1.0, 1.0)
    radius: float = 0.0
    length: float = 0.0
    mesh: str = ""

    def __post_init__(self) -> None:
        if self.type not in _GEOMETRY_TYPES:
            raise ValueError(f"Unsupported geometry type {self.type!r}. Supported: {list(_GEOMETRY_TYPES)}")
        if self.type == "mesh" and not self.mesh:
            raise ValueError("mesh geometry requires a mesh path")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"type": self.type}
        if self.type == "box":
            out["scale"] = list(self.scale)
        elif self.type in ("capsule", "cylinder"):
            out["radius"] = float(self.radius)
            out["length"] = float(self.length)
        elif self.type == "sphere":
            out["radius"] = float(self.radius)
        else:
            out["mesh"] = self.mesh
            out["scale"] = list(self.scale)
        return out

    @classmethod
    def from_dict(cls, doc: Any) -> "Geometry":
        gtype = str(_require(doc, "type", what="geometry"))
        if gtype not in _GEOMETRY_TYPES:
            raise DecodeError(f"Unsupported geometry type {gtype!r}")
        scale = _vec(doc.get("scale", (1.0, 1.0, 1.0)), 3, what="geometry.scale")
        try:
            radius = float(doc.get("radius", 0.0))
            length = float(doc.get("length", 0.0))
        except (TypeError, ValueError) as e:
            raise DecodeError("geometry radius/length must be numbers") from e
        mesh = str(doc.get("mesh", ""))
        if gtype == "mesh" and not mesh:
            raise DecodeError("mesh geometry is missing 'mesh'")
        return cls(type=gtype, scale=scale, radius=radius, length=length, mesh=mesh)  # type: ignore[arg-type]


@dataclass(frozen=True)
class Material:
    name: str = ""
    rgba: tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    texture: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "rgba": list(self.rgba), "texture": self.texture}

    @classmethod
    def from_dict(cls, doc: Any) -> "Material":
        if not isinstance(doc, dict):
            raise DecodeError("material must be an object")
        rgba = _vec(doc.get("rgba", (1.0, 1.0, 1.0, 1.0)), 4, what="material.rgba")
        return cls(name=str(doc.get("name", "")), rgba=rgba, texture=str(doc.get("texture", "")))  # type: ignore[arg-type]


@dataclass(frozen=True)
class Graphics:
    """One renderable primitive attached to an object or a robot link."""

    name: str
    geometry: Geometry
    T_to_parent: Pose = field(default_factory=Pose)
    material: Material = field(default_factory=Material)

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "T_to_parent": self.T_to_parent.to_dict(),
            "geometry": self.geometry.to_dict(),
            "material": self.material.to_dict(),
        }

    @classmethod
    def from_dict(cls, doc: Any) -> "Graphics":
        geometry = Geometry.from_dict(_require(doc, "geometry", what="graphics"))
        return cls(
            name=str(doc.get("name", "")),
            geometry=geometry,
            T_to_parent=Pose.from_dict(doc["T_to_parent"]) if "T_to_parent" in doc else Pose(),
            material=Material.from_dict(doc["material"]) if "material" in doc else Material(),
        )


def graphics_list_from_json(doc: Any, *, what: str = "graphics") -> tuple[Graphics, ...]:
    if not isinstance(doc, list):
        raise DecodeError(f"{what} must be a list, got {type(doc).__name__}")
    return tuple(Graphics.from_dict(g) for g in doc)
