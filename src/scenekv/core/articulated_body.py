from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal, Protocol

import numpy as np

from .errors import DecodeError
from .graphics import Graphics, Pose, graphics_list_from_json
from .transforms import Vec3Like, as_vec3, axis_rotation_matrix, pose_matrix


JointType = Literal["rx", "ry", "rz", "px", "py", "pz", "fixed"]
_JOINT_AXES: dict[str, np.ndarray] = {
    "x": np.array([1.0, 0.0, 0.0]),
    "y": np.array([0.0, 1.0, 0.0]),
    "z": np.array([0.0, 0.0, 1.0]),
}


class KinematicBody(Protocol):
    """What the interaction engine needs from a dynamics library's body."""

    @property
    def name(self) -> str: ...

    def position(self, idx_link: int, offset: Vec3Like = (0.0, 0.0, 0.0)) -> np.ndarray: ...


@dataclass(frozen=True)
class Joint:
    type: JointType = "fixed"

    def __post_init__(self) -> None:
        if self.type != "fixed" and (len(self.type) != 2 or self.type[0] not in "rp" or self.type[1] not in "xyz"):
            raise ValueError(f"Unsupported joint type {self.type!r}")

    @property
    def is_revolute(self) -> bool:
        return self.type.startswith("r")

    @property
    def is_prismatic(self) -> bool:
        return self.type.startswith("p")

    def transform(self, q: float) -> np.ndarray:
        """Homogeneous transform contributed by the joint at position `q`."""
        t = np.eye(4, dtype=np.float64)
        if self.type == "fixed":
            return t
        axis = _JOINT_AXES[self.type[1]]
        if self.is_revolute:
            t[:3, :3] = axis_rotation_matrix(axis, q)
        else:
            t[:3, 3] = axis * float(q)
        return t


@dataclass(frozen=True)
class RigidBody:
    name: str
    id_parent: int = -1
    T_to_parent: Pose = field(default_factory=Pose)
    joint: Joint = field(default_factory=Joint)
    graphics: tuple[Graphics, ...] = ()

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "id_parent": int(self.id_parent),
            "T_to_parent": self.T_to_parent.to_dict(),
            "joint": {"type": self.joint.type},
            "graphics": [g.to_dict() for g in self.graphics],
        }

    @classmethod
    def from_dict(cls, doc: Any) -> "RigidBody":
        if not isinstance(doc, dict):
            raise DecodeError("rigid body must be an object")
        for required in ("name", "id_parent", "T_to_parent", "joint"):
            if required not in doc:
                raise DecodeError(f"rigid body is missing {required!r}")
        joint_doc = doc["joint"]
        if not isinstance(joint_doc, dict) or "type" not in joint_doc:
            raise DecodeError("rigid body joint must be an object with a 'type'")
        try:
            joint = Joint(type=str(joint_doc["type"]))  # type: ignore[arg-type]
            id_parent = int(doc["id_parent"])
        except (TypeError, ValueError) as e:
            raise DecodeError(f"invalid rigid body {doc.get('name')!r}: {e}") from e
        return cls(
            name=str(doc["name"]),
            id_parent=id_parent,
            T_to_parent=Pose.from_dict(doc["T_to_parent"]),
            joint=joint,
            graphics=graphics_list_from_json(doc.get("graphics", []), what="rigid body graphics"),
        )


class ArticulatedBody:
    """Minimal kinematic tree: one degree of freedom per rigid body.

    Fixed joints keep their slot in `q` but ignore its value. The configuration
    is live simulator state and is not part of the serialized description; it
    travels separately under the robot's `key_q`.
    """

    def __init__(
        self,
        name: str,
        rigid_bodies: list[RigidBody] | tuple[RigidBody, ...] = (),
        *,
        T_base_to_world: Pose | None = None,
    ) -> None:
        if not name:
            raise ValueError("articulated body name cannot be empty")
        self.name = str(name)
        self.T_base_to_world = T_base_to_world or Pose()
        self._rigid_bodies: list[RigidBody] = []
        self._q = np.zeros(0, dtype=np.float64)
        for rb in rigid_bodies:
            self.add_rigid_body(rb)

    @property
    def rigid_bodies(self) -> tuple[RigidBody, ...]:
        return tuple(self._rigid_bodies)

    @property
    def dof(self) -> int:
        return len(self._rigid_bodies)

    @property
    def q(self) -> np.ndarray:
        return self._q.copy()

    @q.setter
    def q(self, value: Any) -> None:
        arr = np.asarray(value, dtype=np.float64).reshape(-1)
        if arr.shape != (self.dof,):
            raise ValueError(f"q must have {self.dof} entries, got {arr.shape[0]}")
        self._q = arr.copy()

    def add_rigid_body(self, rb: RigidBody) -> int:
        if rb.id_parent < -1 or rb.id_parent >= len(self._rigid_bodies):
            raise ValueError(f"rigid body {rb.name!r} has unknown parent {rb.id_parent}")
        self._rigid_bodies.append(rb)
        self._q = np.append(self._q, 0.0)
        return len(self._rigid_bodies) - 1

    def link_transform(self, idx_link: int) -> np.ndarray:
        """World transform of link `idx_link`; -1 is the base frame."""
        idx = int(idx_link)
        if idx < -1 or idx >= self.dof:
            raise IndexError(f"link index {idx} out of range for {self.dof} links")
        chain: list[int] = []
        while idx != -1:
            chain.append(idx)
            idx = self._rigid_bodies[idx].id_parent
        t = pose_matrix(self.T_base_to_world.pos, self.T_base_to_world.ori)
        for i in reversed(chain):
            rb = self._rigid_bodies[i]
            t = t @ pose_matrix(rb.T_to_parent.pos, rb.T_to_parent.ori) @ rb.joint.transform(self._q[i])
        return t

    def position(self, idx_link: int, offset: Vec3Like = (0.0, 0.0, 0.0)) -> np.ndarray:
        """World position of `offset`, given in the frame of link `idx_link`."""
        t = self.link_transform(idx_link)
        p = as_vec3(offset, name="offset")
        return t[:3, :3] @ p + t[:3, 3]

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.name,
            "T_base_to_world": self.T_base_to_world.to_dict(),
            "rigid_bodies": [rb.to_dict() for rb in self._rigid_bodies],
        }

    @classmethod
    def from_dict(cls, doc: Any) -> "ArticulatedBody":
        if not isinstance(doc, dict):
            raise DecodeError(f"articulated body must be an object, got {type(doc).__name__}")
        if "name" not in doc:
            raise DecodeError("articulated body is missing 'name'")
        rbs_doc = doc.get("rigid_bodies", [])
        if not isinstance(rbs_doc, list):
            raise DecodeError("articulated body rigid_bodies must be a list")
        base = Pose.from_dict(doc["T_base_to_world"]) if "T_base_to_world" in doc else None
        try:
            return cls(str(doc["name"]), [RigidBody.from_dict(rb) for rb in rbs_doc], T_base_to_world=base)
        except ValueError as e:
            if isinstance(e, DecodeError):
                raise
            raise DecodeError(str(e)) from e

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ArticulatedBody):
            return NotImplemented
        return (
            self.name == other.name
            and self.T_base_to_world == other.T_base_to_world
            and self.rigid_bodies == other.rigid_bodies
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ArticulatedBody(name={self.name!r}, dof={self.dof})"
