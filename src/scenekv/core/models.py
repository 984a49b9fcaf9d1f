from __future__ import annotations

"""Model descriptors written once under `<namespace>::model::<kind>::<name>`.

Descriptors only carry *references* to live-state keys (`key_pos`, `key_ori`,
`key_q`, ...). Poses and configurations are published separately so the
front-end can poll small keys every frame without re-parsing descriptors.
"""

from dataclasses import dataclass
from typing import Any, Callable, Union

from .articulated_body import ArticulatedBody
from .errors import DecodeError
from .graphics import Graphics, graphics_list_from_json
from .keys import ModelKind


def _str_field(doc: dict[str, Any], field_name: str, *, what: str, default: str | None = None) -> str:
    if field_name not in doc:
        if default is not None:
            return default
        raise DecodeError(f"{what} document is missing {field_name!r}")
    value = doc[field_name]
    if not isinstance(value, str):
        raise DecodeError(f"{what}.{field_name} must be a string, got {type(value).__name__}")
    return value


def _require_object(doc: Any, *, what: str) -> dict[str, Any]:
    if not isinstance(doc, dict):
        raise DecodeError(f"{what} document must be an object, got {type(doc).__name__}")
    return doc


@dataclass(frozen=True, eq=False)
class RobotModel:
    """A robot described by an articulated body.

    The registry only reads `articulated_body`; the simulator owns it and keeps
    updating its configuration.
    """

    articulated_body: ArticulatedBody
    key_q: str
    key_pos: str = ""
    key_ori: str = ""

    @property
    def name(self) -> str:
        return self.articulated_body.name

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RobotModel):
            return NotImplemented
        return (
            self.articulated_body == other.articulated_body
            and self.key_q == other.key_q
            and self.key_pos == other.key_pos
            and self.key_ori == other.key_ori
        )

    __hash__ = None  # type: ignore[assignment]


@dataclass(frozen=True)
class ObjectModel:
    name: str
    graphics: tuple[Graphics, ...]
    key_pos: str
    key_ori: str = ""

    def __post_init__(self) -> None:
        # Accept any iterable of graphics but store an immutable tuple.
        object.__setattr__(self, "graphics", tuple(self.graphics))


@dataclass(frozen=True)
class TrajectoryModel:
    name: str
    key_pos: str


@dataclass(frozen=True)
class CameraModel:
    name: str
    key_pos: str
    key_ori: str
    key_intrinsic: str
    key_depth_image: str
    key_rgb_image: str = ""


Model = Union[RobotModel, ObjectModel, TrajectoryModel, CameraModel]


def _encode_robot(robot: RobotModel) -> dict[str, Any]:
    return {
        "articulated_body": robot.articulated_body.to_dict(),
        "key_q": robot.key_q,
        "key_pos": robot.key_pos,
        "key_ori": robot.key_ori,
    }


def _decode_robot(doc: Any) -> RobotModel:
    d = _require_object(doc, what="robot")
    if "articulated_body" not in d:
        raise DecodeError("robot document is missing 'articulated_body'")
    return RobotModel(
        articulated_body=ArticulatedBody.from_dict(d["articulated_body"]),
        key_q=_str_field(d, "key_q", what="robot"),
        key_pos=_str_field(d, "key_pos", what="robot", default=""),
        key_ori=_str_field(d, "key_ori", what="robot", default=""),
    )


def _encode_object(obj: ObjectModel) -> dict[str, Any]:
    return {
        "name": obj.name,
        "graphics": [g.to_dict() for g in obj.graphics],
        "key_pos": obj.key_pos,
        "key_ori": obj.key_ori,
    }


def _decode_object(doc: Any) -> ObjectModel:
    d = _require_object(doc, what="object")
    if "graphics" not in d:
        raise DecodeError("object document is missing 'graphics'")
    return ObjectModel(
        name=_str_field(d, "name", what="object"),
        graphics=graphics_list_from_json(d["graphics"], what="object.graphics"),
        key_pos=_str_field(d, "key_pos", what="object"),
        key_ori=_str_field(d, "key_ori", what="object", default=""),
    )


def _encode_trajectory(traj: TrajectoryModel) -> dict[str, Any]:
    return {"name": traj.name, "key_pos": traj.key_pos}


def _decode_trajectory(doc: Any) -> TrajectoryModel:
    d = _require_object(doc, what="trajectory")
    return TrajectoryModel(
        name=_str_field(d, "name", what="trajectory"),
        key_pos=_str_field(d, "key_pos", what="trajectory"),
    )


_CAMERA_FIELDS = ("key_pos", "key_ori", "key_intrinsic", "key_depth_image")


def _encode_camera(camera: CameraModel) -> dict[str, Any]:
    return {
        "name": camera.name,
        "key_pos": camera.key_pos,
        "key_ori": camera.key_ori,
        "key_intrinsic": camera.key_intrinsic,
        "key_depth_image": camera.key_depth_image,
        "key_rgb_image": camera.key_rgb_image,
    }


def _decode_camera(doc: Any) -> CameraModel:
    d = _require_object(doc, what="camera")
    fields = {f: _str_field(d, f, what="camera") for f in _CAMERA_FIELDS}
    return CameraModel(
        name=_str_field(d, "name", what="camera"),
        key_rgb_image=_str_field(d, "key_rgb_image", what="camera", default=""),
        **fields,
    )


@dataclass(frozen=True)
class _Codec:
    type: type
    encode: Callable[[Any], dict[str, Any]]
    decode: Callable[[Any], Any]


_CODECS: dict[ModelKind, _Codec] = {
    ModelKind.ROBOT: _Codec(RobotModel, _encode_robot, _decode_robot),
    ModelKind.OBJECT: _Codec(ObjectModel, _encode_object, _decode_object),
    ModelKind.TRAJECTORY: _Codec(TrajectoryModel, _encode_trajectory, _decode_trajectory),
    ModelKind.CAMERA: _Codec(CameraModel, _encode_camera, _decode_camera),
}


def model_kind(model: Model) -> ModelKind:
    for kind, codec in _CODECS.items():
        if isinstance(model, codec.type):
            return kind
    raise TypeError(f"Not a model descriptor: {type(model).__name__}")


def encode_model(model: Model, kind: ModelKind | str | None = None) -> dict[str, Any]:
    """Serialize a descriptor into its JSON document."""
    k = model_kind(model) if kind is None else ModelKind.from_any(kind)
    codec = _CODECS[k]
    if not isinstance(model, codec.type):
        raise TypeError(f"Expected {codec.type.__name__} for kind {k.value!r}, got {type(model).__name__}")
    return codec.encode(model)


def decode_model(kind: ModelKind | str, doc: Any) -> Model:
    """Deserialize a JSON document for a known model kind.

    Raises `DecodeError` when required fields are missing or mistyped.
    """
    return _CODECS[ModelKind.from_any(kind)].decode(doc)
