from __future__ import annotations

"""Turn front-end interactions into pose deltas or external forces.

Two modes share the same interaction record:

- kinematic: `click_adjust_pose` / `keypress_adjust_pose` move a body directly
  with proportional control toward the mouse;
- dynamic: `compute_external_forces` produces a wrench for a dynamics solver.

All functions are pure. Orientations are xyzw quaternions.
"""

import numpy as np

from .articulated_body import KinematicBody
from .interaction import Interaction, ModifierKey
from .keys import ModelKeys
from .spatial import SpatialForce
from .transforms import AngleAxis, QuatLike, Vec3Like, normalized_vec3, transform_point


# key -> (axis index, sign)
_POSITION_KEYS: dict[str, tuple[int, int]] = {
    "a": (0, -1),
    "d": (0, 1),
    "w": (1, 1),
    "s": (1, -1),
    "e": (2, 1),
    "q": (2, -1),
}
_ORIENTATION_KEYS: dict[str, tuple[int, int]] = {
    "j": (0, -1),
    "l": (0, 1),
    "i": (1, 1),
    "k": (1, -1),
    "o": (2, 1),
    "u": (2, -1),
}


def _click_in_world(interaction: Interaction, pos: Vec3Like, ori: QuatLike) -> np.ndarray:
    return transform_point(pos, ori, interaction.pos_click_in_link)


def click_position_adjustment(
    interaction: Interaction,
    pos: Vec3Like,
    ori: QuatLike,
    gain: float = 1e-2,
) -> np.ndarray:
    """Translation that pulls the clicked point toward the mouse."""
    pos_click_in_world = _click_in_world(interaction, pos, ori)
    return float(gain) * (interaction.pos_mouse_in_world - pos_click_in_world)


def click_orientation_adjustment(
    interaction: Interaction,
    pos: Vec3Like,
    ori: QuatLike,
    gain: float = 1e-1,
) -> AngleAxis:
    """Rotation that turns the clicked point toward the mouse.

    The rotation axis is `r x m`, where `r` is the unit lever arm from the body
    origin to the clicked point and `m` the scaled position error; the angle is
    its norm. A click on the origin has no lever arm and yields no rotation.
    """
    p = np.asarray(pos, dtype=np.float64).reshape(3)
    pos_click_in_world = _click_in_world(interaction, p, ori)

    m_click = float(gain) * (interaction.pos_mouse_in_world - pos_click_in_world)
    r_com = normalized_vec3(pos_click_in_world - p)
    r_com_x_m_click = np.cross(r_com, m_click)
    return AngleAxis(float(np.linalg.norm(r_com_x_m_click)), normalized_vec3(r_com_x_m_click))


def click_adjust_pose(
    interaction: Interaction,
    pos: Vec3Like,
    ori: QuatLike,
    gain_pos: float = 1e-2,
    gain_ori: float = 1e-1,
) -> tuple[np.ndarray, np.ndarray]:
    """Return the adjusted `(pos, ori)`.

    Holding ctrl rotates only; otherwise the body only translates. The part that
    is not adjusted is returned unchanged.
    """
    p = np.array(pos, dtype=np.float64).reshape(3)
    q = np.array(ori, dtype=np.float64).reshape(4)
    if interaction.has_modifier(ModifierKey.CTRL):
        return p, click_orientation_adjustment(interaction, p, q, gain_ori).rotate(q)
    return p + click_position_adjustment(interaction, p, q, gain_pos), q


def compute_external_forces(
    model_keys: ModelKeys,
    body: KinematicBody,
    interaction: Interaction,
    gain: float = 100.0,
) -> dict[int, SpatialForce]:
    """External wrench on the clicked robot link, keyed by link index.

    Empty unless the interaction targets exactly this robot's key.
    """
    f_ext: dict[int, SpatialForce] = {}

    if interaction.key_object != model_keys.key_robots_prefix + body.name:
        return f_ext

    pos_click_in_world = np.asarray(
        body.position(interaction.idx_link, interaction.pos_click_in_link), dtype=np.float64
    ).reshape(3)

    f = float(gain) * (interaction.pos_mouse_in_world - pos_click_in_world)
    f_click = SpatialForce(f, np.zeros(3))

    f_ext[int(interaction.idx_link)] = f_click.translated(pos_click_in_world)
    return f_ext


def _first_key(interaction: Interaction) -> str:
    return interaction.key_down[:1]


def keypress_position_adjustment(interaction: Interaction, gain: float = 1e-4) -> np.ndarray:
    """Small translation along a world axis for the held key, or zero."""
    entry = _POSITION_KEYS.get(_first_key(interaction))
    out = np.zeros(3, dtype=np.float64)
    if entry is None:
        return out
    idx, sign = entry
    out[idx] = sign * float(gain)
    return out


def keypress_orientation_adjustment(interaction: Interaction, gain: float = 1e-3) -> AngleAxis:
    """Small rotation about a world axis for the held key, or identity."""
    entry = _ORIENTATION_KEYS.get(_first_key(interaction))
    if entry is None:
        return AngleAxis.identity()
    idx, sign = entry
    axis = np.zeros(3, dtype=np.float64)
    axis[idx] = 1.0
    return AngleAxis(sign * float(gain), axis)


def keypress_adjust_pose(
    interaction: Interaction,
    pos: Vec3Like,
    ori: QuatLike,
    gain_pos: float = 1e-4,
    gain_ori: float = 1e-3,
) -> tuple[np.ndarray, np.ndarray]:
    """Apply one tick of keyboard nudging to `(pos, ori)`."""
    p = np.array(pos, dtype=np.float64).reshape(3)
    q = np.array(ori, dtype=np.float64).reshape(4)
    return (
        p + keypress_position_adjustment(interaction, gain_pos),
        keypress_orientation_adjustment(interaction, gain_ori).rotate(q),
    )
