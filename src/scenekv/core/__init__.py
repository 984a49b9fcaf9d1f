from __future__ import annotations

from .adjustments import (
    click_adjust_pose,
    click_orientation_adjustment,
    click_position_adjustment,
    compute_external_forces,
    keypress_adjust_pose,
    keypress_orientation_adjustment,
    keypress_position_adjustment,
)
from .articulated_body import ArticulatedBody, Joint, KinematicBody, RigidBody
from .errors import DecodeError, SceneKVError, StoreCommandError, StoreUnavailableError
from .graphics import Geometry, Graphics, Material, Pose
from .interaction import Interaction, ModifierKey
from .keys import AppKeys, ModelKeys, ModelKind
from .models import (
    CameraModel,
    Model,
    ObjectModel,
    RobotModel,
    TrajectoryModel,
    decode_model,
    encode_model,
    model_kind,
)
from .spatial import SpatialForce
from .transforms import AngleAxis

__all__ = [
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
    "KinematicBody",
    "RobotModel",
    "ObjectModel",
    "TrajectoryModel",
    "CameraModel",
    "Model",
    "encode_model",
    "decode_model",
    "model_kind",
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
