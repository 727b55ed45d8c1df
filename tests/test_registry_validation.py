"""Validation that the sample content loads and that bad content is rejected."""

import json

import pytest

from effect_engine.errors import ContentError
from effect_engine.ir.effects import ChangeTargetEffect
from effect_engine.ir.modifiers import HealingModifier, StrengthModifier
from effect_engine.ir.triggers import AllyDeath, BeforeDeath
from effect_engine.sim.content.registry import ContentRegistry


def test_load_sample():
    registry = ContentRegistry()
    content = registry.load_file()

    assert sorted(registry.list_template_names()) == [
        "archer", "bomber", "cleric", "necromancer", "skeleton", "squire",
    ]
    assert sorted(registry.status_defs) == ["poison", "shield"]
    assert len(content.bonuses) == 2

    squire = registry.get_template("squire")
    assert squire.statuses == ["shield"]
    assert registry.get_status_def("shield").vars == {"block": 3}

    cleric = registry.get_template("cleric")
    assert isinstance(cleric.reactions[0].effects[0], ChangeTargetEffect)

    assert isinstance(registry.get_template("bomber").reactions[0].trigger, BeforeDeath)
    assert isinstance(registry.get_template("necromancer").reactions[0].trigger, AllyDeath)

    by_house = {b.house: b for b in registry.bonuses}
    assert isinstance(by_house["knights"].modifiers[0], HealingModifier)
    assert isinstance(by_house["raiders"].modifiers[0], StrengthModifier)


def test_unknown_lookups():
    registry = ContentRegistry()
    registry.load_file()
    assert registry.get_template("lich") is None
    assert registry.get_status_def("burning") is None


def test_require_templates_reports_missing():
    registry = ContentRegistry()
    registry.load_file()
    assert [t.name for t in registry.require_templates(["squire", "squire"])] == ["squire", "squire"]
    with pytest.raises(ContentError, match="lich, wraith"):
        registry.require_templates(["squire", "lich", "wraith"])


def test_unknown_field_rejected(tmp_path):
    path = tmp_path / "content.json"
    path.write_text(json.dumps({
        "units": [{"name": "squire", "hp": 10, "action": {"type": "Damage", "amount": 3}}],
    }))
    with pytest.raises(ContentError):
        ContentRegistry().load_file(path)


def test_dangling_reference_rejected():
    with pytest.raises(ContentError, match="burning"):
        ContentRegistry.parse({"units": [{"name": "squire", "hp": 10, "statuses": ["burning"]}]})


def test_invalid_json_rejected(tmp_path):
    path = tmp_path / "content.json"
    path.write_text("{")
    with pytest.raises(ContentError):
        ContentRegistry().load_file(path)


def test_later_definitions_replace_earlier(caplog):
    registry = ContentRegistry()
    registry.load_content_set(ContentRegistry.parse({"units": [{"name": "squire", "hp": 10}]}))
    registry.load_content_set(ContentRegistry.parse({"units": [{"name": "squire", "hp": 12}]}))
    assert registry.get_template("squire").hp == 12
    assert "redefined" in caplog.text
