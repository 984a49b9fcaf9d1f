from __future__ import annotations

import os

import numpy as np
import pytest

from scenekv.core.articulated_body import ArticulatedBody
from scenekv.core.errors import DecodeError
from scenekv.core.graphics import Geometry, Graphics
from scenekv.core.interaction import Interaction, ModifierKey
from scenekv.core.models import CameraModel, ObjectModel, RobotModel, TrajectoryModel
from scenekv.registry import ModelRegistry
from scenekv.store.memory import InMemoryStore


def _sphere_object(name: str = "ball") -> ObjectModel:
    return ObjectModel(
        name=name,
        graphics=[Graphics(name=name, geometry=Geometry(type="sphere", radius=0.1))],
        key_pos=f"lab::{name}::pos",
        key_ori=f"lab::{name}::ori",
    )


def test_register_robot_scenario(registry: ModelRegistry, store: InMemoryStore, arm: ArticulatedBody) -> None:
    keys = registry.model_keys("lab")
    key = registry.register_robot(keys, RobotModel(arm, key_q="lab::arm::q"), commit=True)

    assert key == "lab::model::robot::arm"
    doc = store.get_now("lab::model::robot::arm")
    assert doc["articulated_body"]["name"] == "arm"

    robot = registry.get_model(keys, "robot", "arm")
    assert isinstance(robot, RobotModel)
    assert robot.articulated_body.name == "arm"
    assert robot == RobotModel(arm, key_q="lab::arm::q")


def test_writes_are_invisible_until_commit(registry: ModelRegistry, store: InMemoryStore) -> None:
    keys = registry.model_keys("lab")
    registry.register_object(keys, _sphere_object())
    assert store.get_now("lab::model::object::ball") is None
    registry.commit()
    assert store.get_now("lab::model::object::ball") is not None


def test_round_trip_for_every_kind(registry: ModelRegistry, arm: ArticulatedBody) -> None:
    keys = registry.model_keys("lab")
    robot = RobotModel(arm, key_q="q", key_pos="p", key_ori="o")
    obj = _sphere_object()
    cam = CameraModel("cam", "c::pos", "c::ori", "c::K", "c::depth", "c::rgb")

    registry.register_robot(keys, robot)
    registry.register_object(keys, obj)
    registry.register_trajectory(keys, "ee", "lab::ee::traj")
    registry.register_camera(keys, cam, commit=True)

    assert registry.get_model(keys, "robot", "arm") == robot
    assert registry.get_model(keys, "object", "ball") == obj
    assert registry.get_model(keys, "trajectory", "ee") == TrajectoryModel("ee", "lab::ee::traj")
    assert registry.get_model(keys, "camera", "cam") == cam


def test_overwrite_replaces_wholesale(registry: ModelRegistry, store: InMemoryStore) -> None:
    keys = registry.model_keys("lab")
    registry.register_object(keys, _sphere_object(), commit=True)
    replacement = ObjectModel(name="ball", graphics=[], key_pos="other::pos")
    registry.register_object(keys, replacement, commit=True)

    assert store.get_now("lab::model::object::ball") == {
        "name": "ball",
        "graphics": [],
        "key_pos": "other::pos",
        "key_ori": "",
    }


def test_unregister_is_idempotent(registry: ModelRegistry, store: InMemoryStore) -> None:
    keys = registry.model_keys("lab")
    registry.register_object(keys, _sphere_object(), commit=True)

    registry.unregister_object(keys, "ball", commit=True)
    assert registry.get_model(keys, "object", "ball") is None
    registry.unregister_object(keys, "ball", commit=True)
    assert registry.get_model(keys, "object", "ball") is None

    # Never registered at all.
    registry.unregister_robot(keys, "ghost", commit=True)
    registry.unregister_trajectory(keys, "ghost", commit=True)
    registry.unregister_camera(keys, "ghost", commit=True)
    assert store.keys() == []


def test_resource_paths_are_an_idempotent_set(registry: ModelRegistry, tmp_path) -> None:
    first = registry.register_resource_path(tmp_path, commit=True)
    registry.register_resource_path(str(tmp_path), commit=True)
    assert first == os.path.abspath(str(tmp_path))
    assert registry.get_resource_paths() == {first}

    registry.unregister_resource_path(tmp_path, commit=True)
    registry.unregister_resource_path(tmp_path, commit=True)
    assert registry.get_resource_paths() == set()


def test_model_keys_blob(registry: ModelRegistry, store: InMemoryStore) -> None:
    keys = registry.model_keys("lab")
    assert registry.get_model_keys("lab") is None

    registry.register_model_keys(keys, commit=True)
    assert store.get_now("webapp::simulator::args::lab") == keys.to_args()
    assert registry.get_model_keys("lab") == keys

    registry.unregister_model_keys(keys, commit=True)
    registry.unregister_model_keys(keys, commit=True)
    assert registry.get_model_keys("lab") is None


def test_list_models(registry: ModelRegistry) -> None:
    keys = registry.model_keys("lab")
    registry.register_object(keys, _sphere_object("a"))
    registry.register_object(keys, _sphere_object("b"))
    registry.register_object(registry.model_keys("lab2"), _sphere_object("c"), commit=True)

    listed = registry.list_models(keys, "objects")
    assert sorted(listed) == ["a", "b"]
    assert listed["a"] == _sphere_object("a")
    assert registry.list_models(keys, "camera") == {}


def test_interaction_polling(registry: ModelRegistry) -> None:
    assert registry.get_interaction() is None

    interaction = Interaction(
        key_object="lab::model::object::ball",
        idx_link=0,
        pos_click_in_link=(0.0, 0.0, 0.1),
        pos_mouse_in_world=(1.0, 2.0, 3.0),
        modifier_keys=frozenset({ModifierKey.CTRL}),
        key_down="w",
    )
    registry.publish_interaction(interaction, commit=True)
    assert registry.get_interaction() == interaction

    registry.clear_interaction(commit=True)
    assert registry.get_interaction() is None


def test_publish_and_read_pose(registry: ModelRegistry, store: InMemoryStore) -> None:
    registry.publish_pose("lab::ball::pos", "lab::ball::ori", (1.0, 2.0, 3.0), (0.0, 0.0, 0.0, 2.0), commit=True)
    assert store.get_now("lab::ball::pos") == [1.0, 2.0, 3.0]
    assert store.get_now("lab::ball::ori") == [0.0, 0.0, 0.0, 1.0]

    pos, ori = registry.read_pose("lab::ball::pos", "lab::ball::ori")
    np.testing.assert_array_equal(pos, [1.0, 2.0, 3.0])
    assert ori is not None
    np.testing.assert_array_equal(ori, [0.0, 0.0, 0.0, 1.0])

    with pytest.raises(DecodeError):
        registry.read_pose("lab::missing::pos")
    with pytest.raises(ValueError):
        registry.publish_pose("p", "o", (0.0, 0.0, 0.0))


def test_publish_configuration_and_trajectory(registry: ModelRegistry, store: InMemoryStore) -> None:
    registry.publish_configuration("lab::arm::q", np.array([0.1, 0.2, 0.3]))
    registry.publish_trajectory("lab::ee::traj", [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]], commit=True)
    assert store.get_now("lab::arm::q") == [0.1, 0.2, 0.3]
    assert store.get_now("lab::ee::traj") == [[0.0, 0.0, 0.0], [1.0, 0.0, 0.0]]

    with pytest.raises(ValueError):
        registry.publish_trajectory("lab::ee::traj", [1.0, 2.0, 3.0])
    with pytest.raises(ValueError):
        registry.publish_configuration("lab::arm::q", [np.nan])


def test_store_errors_propagate(registry: ModelRegistry, store: InMemoryStore) -> None:
    from scenekv.core.errors import StoreCommandError

    # A string where the resources set should be.
    store.set("webapp::resources::simulator", "oops")
    store.commit()
    registry.register_resource_path("/tmp")
    with pytest.raises(StoreCommandError):
        registry.commit()
