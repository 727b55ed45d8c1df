"""Tests for battle setup, the combat simulator and the batch runner."""

import pytest

from effect_engine.errors import ContentError
from effect_engine.ir.expressions import Binary
from effect_engine.ir.roles import Faction
from effect_engine.sim.config import EngineConfig
from effect_engine.sim.runner import BatchRunner, CombatSimulator, setup_battle
from effect_engine.sim.telemetry import BatchSummary, BattleTelemetry

from tests.sim.conftest import run_experiment


class TestSetupBattle:
    def test_teams_placed_front_to_back(self, registry):
        engine = setup_battle(registry, ["squire", "cleric"], ["archer", "bomber"], seed=1)
        model = engine.model
        assert [u.name for u in model.faction_units(Faction.PLAYER)] == ["squire", "cleric"]
        assert [u.slot for u in model.faction_units(Faction.PLAYER)] == [0, 1]
        assert [u.name for u in model.faction_units(Faction.ENEMY)] == ["archer", "bomber"]

    def test_starting_statuses_and_base_copies(self, registry):
        engine = setup_battle(registry, ["squire"], ["skeleton"], seed=1)
        squire = engine.model.front_unit(Faction.PLAYER)
        assert squire.has_status("shield")
        assert squire.id in engine.model.base_units
        assert engine.model.pop_display_events() == []

    def test_house_bonus_applied_to_copies_only(self, registry):
        engine = setup_battle(registry, ["squire"], ["archer", "bomber"], seed=1)
        bomber = engine.model.faction_units(Faction.ENEMY)[1]
        aoe = bomber.reactions[0].effects[0]
        assert isinstance(aoe.effect.value, Binary)
        assert not isinstance(registry.get_template("bomber").reactions[0].effects[0].effect.value, Binary)

    def test_bonus_needs_enough_units(self, registry):
        engine = setup_battle(registry, ["squire"], ["bomber", "skeleton"], seed=1)
        bomber = engine.model.front_unit(Faction.ENEMY)
        assert not isinstance(bomber.reactions[0].effects[0].effect.value, Binary)

    def test_unknown_template(self, registry):
        with pytest.raises(ContentError):
            setup_battle(registry, ["squire"], ["lich"], seed=1)


class TestCombatSimulator:
    def test_single_strike_battle(self, registry):
        """Squire (2 atk, shield) one-shots a skeleton and the shield refunds the hit back."""
        engine = setup_battle(registry, ["squire"], ["skeleton"], seed=3)
        telemetry = CombatSimulator(max_turns=10).run_combat(engine, seed=3)

        assert telemetry.result == "win"
        assert telemetry.turns == 1
        assert telemetry.deaths == ["skeleton"]
        assert telemetry.survivors == ["squire"]
        assert telemetry.damage_by_faction == {"enemy": 2, "player": 1}
        assert telemetry.healing_by_faction == {"player": 1}

        squire = engine.model.front_unit(Faction.PLAYER)
        assert squire.hp == 10
        assert not squire.has_status("shield")

    def test_turn_limit_is_a_draw(self, registry):
        engine = setup_battle(registry, ["squire"], ["necromancer"], seed=3)
        telemetry = CombatSimulator(max_turns=1).run_combat(engine, seed=3)
        assert telemetry.turns == 1
        assert telemetry.result == "draw"

    def test_same_seed_same_battle(self, registry):
        teams = (["squire", "cleric"], ["archer", "bomber", "necromancer"])
        a = CombatSimulator(max_turns=50).run_combat(setup_battle(registry, *teams, seed=9), seed=9)
        b = CombatSimulator(max_turns=50).run_combat(setup_battle(registry, *teams, seed=9), seed=9)
        assert a == b

    def test_battle_finishes(self, registry):
        engine = setup_battle(registry, ["squire", "cleric"], ["archer", "bomber", "necromancer"], seed=5)
        telemetry = CombatSimulator(max_turns=50).run_combat(engine, seed=5)
        assert telemetry.result in ("win", "loss", "draw")
        assert 1 <= telemetry.turns <= 50
        assert telemetry.player_team == ["squire", "cleric"]
        if telemetry.result != "draw":
            assert engine.model.is_over


class TestBatchRunner:
    def test_run_batch_sequential(self, registry):
        results = run_experiment(registry, ["squire", "cleric"], ["archer", "skeleton"], n_runs=4)
        assert len(results) == 4
        assert [r.seed for r in results] == [42, 43, 44, 45]

    def test_summarize(self, registry):
        runner = BatchRunner(registry, EngineConfig(max_turns=20))
        results = runner.run_batch(3, {"player_team": ["squire"], "enemy_team": ["skeleton"]}, base_seed=1)
        summary = runner.summarize(results)
        assert summary.runs == 3
        assert summary.wins == 3
        assert summary.win_rate == 1.0
        assert summary.mean_turns == 1.0


class TestBatchSummary:
    def test_from_results(self):
        results = [
            BattleTelemetry(seed=1, player_team=[], enemy_team=[], result="win", turns=2),
            BattleTelemetry(seed=2, player_team=[], enemy_team=[], result="loss", turns=4),
            BattleTelemetry(seed=3, player_team=[], enemy_team=[], turns=6),
        ]
        summary = BatchSummary.from_results(results)
        assert (summary.wins, summary.losses, summary.draws) == (1, 1, 1)
        assert summary.mean_turns == 4.0
        assert summary.win_rate == pytest.approx(1 / 3)

    def test_empty(self):
        summary = BatchSummary.from_results([])
        assert summary.win_rate == 0.0
