from __future__ import annotations

import numpy as np
import pytest

from scenekv.core.adjustments import (
    keypress_adjust_pose,
    keypress_orientation_adjustment,
    keypress_position_adjustment,
)
from scenekv.core.interaction import Interaction


def _pressed(key: str) -> Interaction:
    return Interaction(key_object="lab::model::object::ball", key_down=key)


@pytest.mark.parametrize(
    "key, expected",
    [
        ("a", (-1.0, 0.0, 0.0)),
        ("d", (1.0, 0.0, 0.0)),
        ("w", (0.0, 1.0, 0.0)),
        ("s", (0.0, -1.0, 0.0)),
        ("e", (0.0, 0.0, 1.0)),
        ("q", (0.0, 0.0, -1.0)),
    ],
)
def test_position_keys(key: str, expected: tuple[float, float, float]) -> None:
    delta = keypress_position_adjustment(_pressed(key), gain=0.5)
    np.testing.assert_array_equal(delta, 0.5 * np.asarray(expected))
    # Position keys never rotate.
    assert keypress_orientation_adjustment(_pressed(key)).angle == 0.0


def test_position_default_gain() -> None:
    np.testing.assert_array_equal(keypress_position_adjustment(_pressed("a")), [-1e-4, 0.0, 0.0])


@pytest.mark.parametrize(
    "key, axis, sign",
    [
        ("j", 0, -1.0),
        ("l", 0, 1.0),
        ("i", 1, 1.0),
        ("k", 1, -1.0),
        ("o", 2, 1.0),
        ("u", 2, -1.0),
    ],
)
def test_orientation_keys(key: str, axis: int, sign: float) -> None:
    aa = keypress_orientation_adjustment(_pressed(key), gain=0.2)
    # Compare as a signed rotation vector so axis/angle sign conventions cannot mask a flip.
    expected = np.zeros(3)
    expected[axis] = sign * 0.2
    np.testing.assert_allclose(aa.angle * aa.axis, expected)
    np.testing.assert_array_equal(keypress_position_adjustment(_pressed(key)), np.zeros(3))


def test_orientation_default_gain() -> None:
    aa = keypress_orientation_adjustment(_pressed("i"))
    np.testing.assert_allclose(aa.angle * aa.axis, [0.0, 1e-3, 0.0])


@pytest.mark.parametrize("key", ["", "x", "z", " ", "A"])
def test_unmapped_keys_do_nothing(key: str) -> None:
    np.testing.assert_array_equal(keypress_position_adjustment(_pressed(key)), np.zeros(3))
    aa = keypress_orientation_adjustment(_pressed(key))
    assert aa.angle == 0.0
    np.testing.assert_array_equal(aa.as_matrix(), np.eye(3))


def test_adjust_pose_applies_one_tick() -> None:
    pos = np.array([1.0, 2.0, 3.0])
    ori = np.array([0.0, 0.0, 0.0, 1.0])

    new_pos, new_ori = keypress_adjust_pose(_pressed("e"), pos, ori)
    np.testing.assert_allclose(new_pos, [1.0, 2.0, 3.0 + 1e-4])
    np.testing.assert_allclose(new_ori, ori)

    new_pos, new_ori = keypress_adjust_pose(_pressed("o"), pos, ori, gain_ori=np.pi)
    np.testing.assert_array_equal(new_pos, pos)
    # Half turn about z.
    np.testing.assert_allclose(np.abs(new_ori), [0.0, 0.0, 1.0, 0.0], atol=1e-12)

    new_pos, new_ori = keypress_adjust_pose(_pressed(""), pos, ori)
    np.testing.assert_array_equal(new_pos, pos)
    np.testing.assert_allclose(new_ori, ori)
