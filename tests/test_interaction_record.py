from __future__ import annotations

import json

import numpy as np
import pytest

from scenekv.core.errors import DecodeError
from scenekv.core.interaction import Interaction, ModifierKey


def _doc(**overrides) -> dict:
    doc = {
        "key_object": "lab::model::robot::arm",
        "idx_link": 2,
        "pos_click_in_link": [0.0, 0.0, 0.1],
        "pos_mouse_in_world": [1.0, 2.0, 3.0],
        "modifier_keys": ["ctrl", "shift"],
        "key_down": "",
    }
    doc.update(overrides)
    return doc


def test_decode_front_end_record() -> None:
    interaction = Interaction.from_dict(_doc())
    assert interaction.key_object == "lab::model::robot::arm"
    assert interaction.idx_link == 2
    np.testing.assert_array_equal(interaction.pos_mouse_in_world, [1.0, 2.0, 3.0])
    assert interaction.modifier_keys == frozenset({ModifierKey.CTRL, ModifierKey.SHIFT})
    assert interaction.has_modifier("ctrl")
    assert not interaction.has_modifier(ModifierKey.ALT)


def test_json_round_trip() -> None:
    interaction = Interaction.from_dict(_doc(key_down="w", idx_link=-1))
    again = Interaction.from_dict(json.loads(json.dumps(interaction.to_dict())))
    assert again == interaction
    assert interaction.to_dict()["modifier_keys"] == ["ctrl", "shift"]


def test_unknown_modifiers_are_tolerated() -> None:
    interaction = Interaction.from_dict(_doc(modifier_keys=["Ctrl", "hyper", "capslock"]))
    assert interaction.modifier_keys == frozenset({ModifierKey.CTRL, ModifierKey.UNDEFINED})


def test_integral_float_link_index_is_accepted() -> None:
    assert Interaction.from_dict(_doc(idx_link=3.0)).idx_link == 3


@pytest.mark.parametrize(
    "doc",
    [
        [],
        "interaction",
        {k: v for k, v in _doc().items() if k != "key_object"},
        {k: v for k, v in _doc().items() if k != "pos_mouse_in_world"},
        _doc(idx_link=1.5),
        _doc(idx_link="2"),
        _doc(idx_link=True),
        _doc(idx_link=float("nan")),
        _doc(idx_link=float("inf")),
        _doc(pos_click_in_link=[0.0, 1.0]),
        _doc(pos_mouse_in_world=["a", "b", "c"]),
        _doc(modifier_keys="ctrl"),
        _doc(key_down=None),
        _doc(key_object=7),
    ],
)
def test_malformed_records_raise(doc: object) -> None:
    with pytest.raises(DecodeError):
        Interaction.from_dict(doc)


def test_default_interaction_targets_nothing() -> None:
    interaction = Interaction()
    assert interaction.key_object == ""
    assert interaction.idx_link == -1
    assert interaction.modifier_keys == frozenset()
    np.testing.assert_array_equal(interaction.pos_click_in_link, np.zeros(3))
