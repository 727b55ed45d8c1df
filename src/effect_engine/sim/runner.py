"""Battle simulation runner -- ties the turn loop, the engine and telemetry together.

Provides:

- **setup_battle**: assembles two teams (house bonuses applied) into a
  ready-to-run :class:`BattleEngine`.
- **CombatSimulator**: runs a single battle to completion.
- **BatchRunner**: orchestrates many battles (optionally in parallel).

Each battle owns its model, queue and RNG; parallel workers reload the
content from disk and share nothing.
"""

from __future__ import annotations

import logging
import multiprocessing
from typing import TYPE_CHECKING, Any

from effect_engine.ir.effects import DamageEffect, ListEffect
from effect_engine.ir.expressions import Stat, UnitStat
from effect_engine.ir.roles import Faction, Who
from effect_engine.sim.config import EngineConfig
from effect_engine.sim.core.battle_state import BattleModel
from effect_engine.sim.core.context import EffectContext
from effect_engine.sim.core.entities import Unit
from effect_engine.sim.core.events import Event, EventKind
from effect_engine.sim.core.rng import GameRNG
from effect_engine.sim.engine import BattleEngine
from effect_engine.sim.mechanics.spawning import spawn_unit
from effect_engine.sim.modifiers import apply_house_bonuses
from effect_engine.sim.telemetry import BattleTelemetry, BatchSummary

if TYPE_CHECKING:
    from effect_engine.sim.content.registry import ContentRegistry

logger = logging.getLogger(__name__)

_STRIKE_DAMAGE = DamageEffect(who=Who.TARGET, value=Stat(who=Who.OWNER, stat=UnitStat.ATTACK))


# =====================================================================
# Battle setup
# =====================================================================

def setup_battle(
    registry: ContentRegistry,
    player_team: list[str],
    enemy_team: list[str],
    seed: int,
    config: EngineConfig | None = None,
) -> BattleEngine:
    """Build a model with both teams on the field and wrap it in an engine.

    Every team gets its own rewritten copies of the templates it fields,
    with the house bonuses it qualifies for applied exactly once.
    """
    battle_rng = GameRNG(seed).fork("battle")
    model = BattleModel(
        templates=dict(registry.templates),
        status_defs=dict(registry.status_defs),
        rng=battle_rng,
    )
    for faction, names in ((Faction.PLAYER, player_team), (Faction.ENEMY, enemy_team)):
        templates = apply_house_bonuses(registry.require_templates(names), registry.bonuses)
        for template in templates:
            unit = spawn_unit(model, template, faction)
            model.cache_base_copy(unit)
    model.pop_display_events()
    return BattleEngine(model, config)


# =====================================================================
# CombatSimulator
# =====================================================================

class CombatSimulator:
    """Runs a single battle to completion.

    Each turn the front units of both factions strike each other: an
    attack for their ``attack`` stat followed by their ``action`` effect,
    with the opposing front unit bound as the target.

    Parameters
    ----------
    max_turns:
        Turn limit; the battle is a draw once it is reached.
    turn_duration:
        Model time that passes per turn; delayed effects come due on it.
    """

    def __init__(self, max_turns: int = 200, turn_duration: float = 1.0) -> None:
        self.max_turns = max_turns
        self.turn_duration = turn_duration

    def run_combat(self, engine: BattleEngine, seed: int = 0) -> BattleTelemetry:
        """Run the battle held by *engine*, returning telemetry."""
        model = engine.model
        telemetry = BattleTelemetry(
            seed=seed,
            player_team=[u.name for u in model.faction_units(Faction.PLAYER)],
            enemy_team=[u.name for u in model.faction_units(Faction.ENEMY)],
        )

        engine.handle_event(Event(kind=EventKind.BATTLE_START))
        self._collect(model, telemetry)

        while not model.is_over and model.turn < self.max_turns:
            model.turn += 1
            engine.handle_event(Event(kind=EventKind.TURN_START))
            if not model.is_over:
                self._strike(engine)
            if not model.is_over:
                engine.handle_event(Event(kind=EventKind.TURN_END))
            engine.tick(self.turn_duration)
            self._collect(model, telemetry)

        telemetry.turns = model.turn
        winner = model.winner
        if winner is Faction.PLAYER:
            telemetry.result = "win"
        elif winner is Faction.ENEMY:
            telemetry.result = "loss"
        telemetry.survivors = [u.name for u in model.living_units()]
        return telemetry

    # ------------------------------------------------------------------
    # Turn steps
    # ------------------------------------------------------------------

    def _strike(self, engine: BattleEngine) -> None:
        model = engine.model
        front = [model.front_unit(Faction.PLAYER), model.front_unit(Faction.ENEMY)]
        if front[0] is None or front[1] is None:
            return
        pairs: list[tuple[Unit, Unit]] = [(front[0], front[1]), (front[1], front[0])]

        for striker, victim in pairs:
            engine.handle_event(Event(kind=EventKind.BEFORE_STRIKE, subject=striker.id, target=victim.id))

        # Both strikes are queued before either resolves.
        for striker, victim in pairs:
            if not model.has_unit(striker.id):
                continue
            context = EffectContext(
                owner=striker.id,
                caster=striker.id,
                target=victim.id,
                queue_id=f"unit-{striker.id}",
            )
            strike = ListEffect(effects=[_STRIKE_DAMAGE.model_copy(deep=True), striker.action.model_copy(deep=True)])
            engine.enqueue(strike, context)
        engine.drain()

        for striker, victim in pairs:
            if model.has_unit(striker.id):
                engine.handle_event(Event(kind=EventKind.AFTER_STRIKE, subject=striker.id, target=victim.id))

    @staticmethod
    def _collect(model: BattleModel, telemetry: BattleTelemetry) -> None:
        for event in model.pop_display_events():
            unit = model.lookup_any(event.unit)
            if unit is None:
                continue
            faction = unit.faction.value
            if event.kind == "damage":
                telemetry.damage_by_faction[faction] = (
                    telemetry.damage_by_faction.get(faction, 0) + int(event.text or 0)
                )
            elif event.kind == "heal":
                telemetry.healing_by_faction[faction] = (
                    telemetry.healing_by_faction.get(faction, 0) + int(event.text or 0)
                )
            elif event.kind == "death":
                telemetry.deaths.append(unit.name)


# =====================================================================
# Single-run helpers
# =====================================================================

def _run_single_battle(
    registry: ContentRegistry,
    seed: int,
    encounter_config: dict[str, Any],
    config: EngineConfig,
) -> BattleTelemetry:
    """Run one battle with the given seed and team configuration."""
    engine = setup_battle(
        registry,
        encounter_config.get("player_team", []),
        encounter_config.get("enemy_team", []),
        seed,
        config,
    )
    simulator = CombatSimulator(max_turns=config.max_turns)
    return simulator.run_combat(engine, seed=seed)


def _worker_run_single(args: tuple) -> BattleTelemetry:
    """Top-level worker function for multiprocessing (must be picklable)."""
    content_path, seed, encounter_config, config_data = args

    from effect_engine.sim.content.registry import ContentRegistry

    registry = ContentRegistry()
    registry.load_file(content_path)
    config = EngineConfig.model_validate(config_data)
    return _run_single_battle(registry, seed, encounter_config, config)


# =====================================================================
# BatchRunner
# =====================================================================

class BatchRunner:
    """Runs many battles, optionally in parallel.

    Parameters
    ----------
    registry:
        Loaded content.  Used directly for sequential runs.
    config:
        Engine configuration shared by every battle.
    content_path:
        File the registry was loaded from.  Parallel workers reload it
        instead of unpickling the registry; defaults to the sample content.
    """

    def __init__(
        self,
        registry: ContentRegistry,
        config: EngineConfig | None = None,
        content_path: str | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or EngineConfig()
        self.content_path = content_path

    def run_batch(
        self,
        n_runs: int,
        encounter_config: dict[str, Any],
        base_seed: int = 42,
        parallel: bool = False,
    ) -> list[BattleTelemetry]:
        """Run *n_runs* battles with seeds ``base_seed .. base_seed + n_runs - 1``.

        Parameters
        ----------
        encounter_config:
            ``{"player_team": [...], "enemy_team": [...]}`` template names,
            front to back.
        """
        seeds = [base_seed + i for i in range(n_runs)]

        if parallel and n_runs > 1:
            return self._run_parallel(seeds, encounter_config)
        return self._run_sequential(seeds, encounter_config)

    def summarize(self, results: list[BattleTelemetry]) -> BatchSummary:
        return BatchSummary.from_results(results)

    def _run_sequential(
        self,
        seeds: list[int],
        encounter_config: dict[str, Any],
    ) -> list[BattleTelemetry]:
        return [
            _run_single_battle(self.registry, seed, encounter_config, self.config)
            for seed in seeds
        ]

    def _run_parallel(
        self,
        seeds: list[int],
        encounter_config: dict[str, Any],
    ) -> list[BattleTelemetry]:
        """Run battles in parallel using multiprocessing.

        Rather than pickling the registry, we pass the content path and
        reload in each worker process.
        """
        from effect_engine.sim.content.registry import _DEFAULT_CONTENT_PATH

        content_path = self.content_path or str(_DEFAULT_CONTENT_PATH)
        config_data = self.config.model_dump(mode="json")

        work_items = [
            (content_path, seed, encounter_config, config_data)
            for seed in seeds
        ]

        n_workers = min(len(seeds), multiprocessing.cpu_count() or 1)

        with multiprocessing.Pool(processes=n_workers) as pool:
            results = pool.map(_worker_run_single, work_items)

        return results
