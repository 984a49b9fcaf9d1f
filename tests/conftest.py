from __future__ import annotations

import pytest

from scenekv.core.articulated_body import ArticulatedBody, Joint, RigidBody
from scenekv.core.graphics import Geometry, Graphics, Material, Pose
from scenekv.registry import ModelRegistry
from scenekv.store.memory import InMemoryStore


def make_arm(name: str = "arm") -> ArticulatedBody:
    """Three links along z, each 0.5 m above its parent, joints about z."""
    link_graphics = (
        Graphics(
            name="link",
            geometry=Geometry(type="cylinder", radius=0.05, length=0.5),
            material=Material(name="grey", rgba=(0.5, 0.5, 0.5, 1.0)),
        ),
    )
    return ArticulatedBody(
        name,
        [
            RigidBody("base", id_parent=-1, T_to_parent=Pose(), joint=Joint("rz"), graphics=link_graphics),
            RigidBody("upper", id_parent=0, T_to_parent=Pose(pos=(0.0, 0.0, 0.5)), joint=Joint("rz")),
            RigidBody("lower", id_parent=1, T_to_parent=Pose(pos=(0.0, 0.0, 0.5)), joint=Joint("py")),
        ],
    )


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def registry(store: InMemoryStore) -> ModelRegistry:
    return ModelRegistry(store, "simulator")


@pytest.fixture
def arm() -> ArticulatedBody:
    return make_arm()
