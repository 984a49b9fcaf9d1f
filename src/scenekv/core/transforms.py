from __future__ import annotations

from dataclasses import dataclass

import numpy as np


Vec3Like = tuple[float, float, float] | list[float] | np.ndarray
QuatLike = tuple[float, float, float, float] | list[float] | np.ndarray


def as_vec3(v: Vec3Like, *, name: str = "vector") -> np.ndarray:
    arr = np.asarray(v, dtype=np.float64)
    if arr.shape not in ((3,), (1, 3), (3, 1)):
        raise ValueError(f"{name} must have 3 components, got shape {arr.shape}")
    arr = arr.reshape(3)
    if not np.all(np.isfinite(arr)):
        raise ValueError(f"{name} must contain finite numeric values")
    return arr


def as_quat(q: QuatLike, *, name: str = "quaternion") -> np.ndarray:
    """Return a unit xyzw quaternion."""
    arr = np.asarray(q, dtype=np.float64)
    if arr.size != 4:
        raise ValueError(f"{name} must have 4 components (x, y, z, w), got shape {arr.shape}")
    arr = arr.reshape(4)
    n = float(np.linalg.norm(arr))
    if not np.isfinite(n) or n < 1e-12:
        raise ValueError(f"{name} norm is too close to zero")
    return arr / n


def normalized_vec3(v: Vec3Like) -> np.ndarray:
    """Unit vector along `v`, or the zero vector when `v` has no direction."""
    out = np.asarray(v, dtype=np.float64).reshape(3)
    n = float(np.linalg.norm(out))
    if n < 1e-12:
        return np.zeros(3, dtype=np.float64)
    return out / n


def identity_quat() -> np.ndarray:
    return np.array([0.0, 0.0, 0.0, 1.0], dtype=np.float64)


def quat_multiply(a: QuatLike, b: QuatLike) -> np.ndarray:
    """Hamilton product `a * b` of two xyzw quaternions (apply `b`, then `a`)."""
    ax, ay, az, aw = np.asarray(a, dtype=np.float64).reshape(4).tolist()
    bx, by, bz, bw = np.asarray(b, dtype=np.float64).reshape(4).tolist()
    return np.array(
        [
            aw * bx + ax * bw + ay * bz - az * by,
            aw * by - ax * bz + ay * bw + az * bx,
            aw * bz + ax * by - ay * bx + az * bw,
            aw * bw - ax * bx - ay * by - az * bz,
        ],
        dtype=np.float64,
    )


def quat_xyzw_to_matrix(q_xyzw: QuatLike) -> np.ndarray:
    x, y, z, w = as_quat(q_xyzw).tolist()
    xx, yy, zz = x * x, y * y, z * z
    xy, xz, yz = x * y, x * z, y * z
    wx, wy, wz = w * x, w * y, w * z
    return np.array(
        [
            [1.0 - 2.0 * (yy + zz), 2.0 * (xy - wz), 2.0 * (xz + wy)],
            [2.0 * (xy + wz), 1.0 - 2.0 * (xx + zz), 2.0 * (yz - wx)],
            [2.0 * (xz - wy), 2.0 * (yz + wx), 1.0 - 2.0 * (xx + yy)],
        ],
        dtype=np.float64,
    )


def pose_matrix(position: Vec3Like, rotation_xyzw: QuatLike) -> np.ndarray:
    t = np.eye(4, dtype=np.float64)
    t[:3, :3] = quat_xyzw_to_matrix(rotation_xyzw)
    t[:3, 3] = np.asarray(position, dtype=np.float64).reshape(3)
    return t


def transform_point(position: Vec3Like, rotation_xyzw: QuatLike, point: Vec3Like) -> np.ndarray:
    """Map `point` from the frame with pose (position, rotation) into its parent frame."""
    r = quat_xyzw_to_matrix(rotation_xyzw)
    return np.asarray(position, dtype=np.float64).reshape(3) + r @ np.asarray(point, dtype=np.float64).reshape(3)


def axis_rotation_matrix(axis: Vec3Like, angle: float) -> np.ndarray:
    return quat_xyzw_to_matrix(AngleAxis(float(angle), np.asarray(axis, dtype=np.float64)).to_quaternion())


@dataclass(frozen=True)
class AngleAxis:
    """Rotation by `angle` radians about `axis`.

    A zero axis is allowed and means "no rotation", matching what a normalized
    zero cross product produces.
    """

    angle: float
    axis: np.ndarray

    @classmethod
    def identity(cls) -> "AngleAxis":
        return cls(0.0, np.array([1.0, 0.0, 0.0], dtype=np.float64))

    def to_quaternion(self) -> np.ndarray:
        axis = np.asarray(self.axis, dtype=np.float64).reshape(3)
        half = 0.5 * float(self.angle)
        s = np.sin(half)
        return np.array([axis[0] * s, axis[1] * s, axis[2] * s, np.cos(half)], dtype=np.float64)

    def as_matrix(self) -> np.ndarray:
        q = self.to_quaternion()
        if float(np.linalg.norm(q)) < 1e-12:
            return np.eye(3, dtype=np.float64)
        return quat_xyzw_to_matrix(q)

    def rotate(self, q_xyzw: QuatLike) -> np.ndarray:
        """Left-multiply this rotation onto an orientation."""
        return quat_multiply(self.to_quaternion(), q_xyzw)
