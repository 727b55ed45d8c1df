"""Tests for damage, healing and kill primitives."""

import pytest

from effect_engine.errors import ResolutionError
from effect_engine.ir.roles import Faction
from effect_engine.sim.core.battle_state import BattleModel
from effect_engine.sim.core.entities import Unit
from effect_engine.sim.mechanics.damage import deal_damage, heal_unit, kill_unit


def _make_model(hp: int = 10) -> BattleModel:
    model = BattleModel()
    model.add_unit(Unit(id=1, name="squire", faction=Faction.PLAYER, hp=hp, max_hp=10))
    return model


class TestDealDamage:
    def test_basic(self):
        model = _make_model()
        result = deal_damage(model, 1, 4)
        assert result.dealt == 4
        assert not result.killed
        assert model.get_unit(1).hp == 6

    def test_lethal_hit_counts_as_kill(self):
        model = _make_model(hp=3)
        result = deal_damage(model, 1, 5)
        assert result.killed
        assert model.get_unit(1).hp == -2
        assert model.has_unit(1)

    def test_hitting_a_fallen_unit_is_not_a_kill(self):
        model = _make_model(hp=0)
        result = deal_damage(model, 1, 2)
        assert result.dealt == 2
        assert not result.killed

    def test_zero_damage(self):
        model = _make_model()
        result = deal_damage(model, 1, 0)
        assert result.dealt == 0
        assert model.pop_display_events() == []

    def test_emits_display_event(self):
        model = _make_model()
        deal_damage(model, 1, 3, color="#f00")
        (event,) = model.pop_display_events()
        assert event.kind == "damage"
        assert event.text == "3"
        assert event.color == "#f00"

    def test_missing_unit_raises(self):
        with pytest.raises(ResolutionError):
            deal_damage(_make_model(), 42, 1)


class TestHealUnit:
    def test_clamped(self):
        model = _make_model(hp=8)
        assert heal_unit(model, 1, 5) == 2
        assert model.get_unit(1).hp == 10
        (event,) = model.pop_display_events()
        assert event.kind == "heal"
        assert event.text == "2"


class TestKillUnit:
    def test_drops_hp_to_zero(self):
        model = _make_model()
        assert kill_unit(model, 1)
        assert model.get_unit(1).hp == 0

    def test_already_fallen(self):
        model = _make_model(hp=-3)
        assert not kill_unit(model, 1)
        assert model.get_unit(1).hp == -3
