from __future__ import annotations

from .core import (
    AngleAxis,
    AppKeys,
    ArticulatedBody,
    CameraModel,
    DecodeError,
    Geometry,
    Graphics,
    Interaction,
    Joint,
    Material,
    ModelKeys,
    ModelKind,
    ModifierKey,
    ObjectModel,
    Pose,
    RigidBody,
    RobotModel,
    SceneKVError,
    SpatialForce,
    StoreCommandError,
    StoreUnavailableError,
    TrajectoryModel,
    click_adjust_pose,
    click_orientation_adjustment,
    click_position_adjustment,
    compute_external_forces,
    keypress_adjust_pose,
    keypress_orientation_adjustment,
    keypress_position_adjustment,
)
from .registry import ModelRegistry
from .runtime.server import SceneServer, run
from .store import HttpStore, InMemoryStore, StoreClient

__all__ = [
    "run",
    "SceneServer",
    "ModelRegistry",
    "StoreClient",
    "InMemoryStore",
    "HttpStore",
    "AppKeys",
    "ModelKeys",
    "ModelKind",
    "SceneKVError",
    "DecodeError",
    "StoreUnavailableError",
    "StoreCommandError",
    "Pose",
    "Geometry",
    "Material",
    "Graphics",
    "Joint",
    "RigidBody",
    "ArticulatedBody",
    "RobotModel",
    "ObjectModel",
    "TrajectoryModel",
    "CameraModel",
    "ModifierKey",
    "Interaction",
    "SpatialForce",
    "AngleAxis",
    "click_position_adjustment",
    "click_orientation_adjustment",
    "click_adjust_pose",
    "compute_external_forces",
    "keypress_position_adjustment",
    "keypress_orientation_adjustment",
    "keypress_adjust_pose",
]
