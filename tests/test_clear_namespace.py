from __future__ import annotations

from scenekv.core.graphics import Geometry, Graphics
from scenekv.core.models import CameraModel, ObjectModel, RobotModel
from scenekv.registry import ModelRegistry
from scenekv.store.memory import InMemoryStore


def _obj(name: str) -> ObjectModel:
    return ObjectModel(name=name, graphics=[Graphics(name=name, geometry=Geometry(type="box"))], key_pos=name + "::pos")


def _populate(registry: ModelRegistry, namespace: str, arm) -> None:
    keys = registry.model_keys(namespace)
    registry.register_robot(keys, RobotModel(arm, key_q=namespace + "::q"))
    registry.register_object(keys, _obj("table"))
    registry.register_object(keys, _obj("cup"))
    registry.register_trajectory(keys, "ee", namespace + "::ee")
    registry.register_camera(keys, CameraModel("cam", "p", "o", "k", "d"))
    registry.register_model_keys(keys, commit=True)


def test_clear_removes_every_model_in_namespace(registry: ModelRegistry, store: InMemoryStore, arm) -> None:
    _populate(registry, "lab", arm)
    _populate(registry, "lab2", arm)
    before = set(store.keys("lab::*"))
    assert len(before) == 5

    deleted = registry.clear_model_keys(registry.model_keys("lab"))

    assert deleted == before
    assert store.keys("lab::*") == []
    # Other namespaces and the args blob are untouched.
    assert len(store.keys("lab2::*")) == 5
    assert store.get_now("webapp::simulator::args::lab") is not None


def test_clear_empty_namespace_is_a_noop(registry: ModelRegistry, store: InMemoryStore) -> None:
    assert registry.clear_model_keys(registry.model_keys("empty")) == set()
    assert store.keys() == []


class _RacingStore(InMemoryStore):
    """Registers a new model right after the scans of the first commit ran."""

    def __init__(self) -> None:
        super().__init__()
        self.late_key = "lab::model::object::late"
        self._armed = False

    def race_next_commit(self) -> None:
        self._armed = True

    def commit(self) -> None:
        super().commit()
        if self._armed:
            self._armed = False
            self.execute([{"op": "set", "key": self.late_key, "value": {"name": "late", "graphics": [], "key_pos": ""}}])


def test_keys_present_at_scan_time_are_always_removed(arm) -> None:
    store = _RacingStore()
    registry = ModelRegistry(store, "simulator")
    _populate(registry, "lab", arm)
    before = set(store.keys("lab::*"))

    store.race_next_commit()
    deleted = registry.clear_model_keys(registry.model_keys("lab"))

    assert deleted == before
    remaining = set(store.keys("lab::*"))
    assert remaining.isdisjoint(before)
    # The late key may or may not survive; only the snapshot is guaranteed gone.
    assert remaining <= {store.late_key}
