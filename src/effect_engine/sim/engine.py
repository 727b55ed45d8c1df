"""BattleEngine -- the driver that turns events into drained effect queues.

The engine owns one battle's model, queue, interpreter and trigger
dispatcher.  Every public entry point runs to completion: by the time it
returns, the immediate queue is empty and every unit at zero hp or less
has been removed.

Usage::

    engine = BattleEngine(model, EngineConfig(fire_mode="first"))
    engine.handle_event(Event(kind=EventKind.BATTLE_START))
    engine.tick(1.0)
"""

from __future__ import annotations

import logging

from effect_engine.errors import EvaluationError, ResolutionError, RunawayEffectError
from effect_engine.ir.effects import Effect
from effect_engine.sim.config import EngineConfig
from effect_engine.sim.core.battle_state import BattleModel
from effect_engine.sim.core.context import EffectContext
from effect_engine.sim.core.effect_queue import EffectQueue, QueuedEffect
from effect_engine.sim.core.events import Event, EventKind
from effect_engine.sim.interpreter import EffectInterpreter
from effect_engine.sim.triggers import TriggerDispatcher

logger = logging.getLogger(__name__)


class BattleEngine:
    """Drives effect resolution for a single battle.

    Parameters
    ----------
    model:
        The battle model.  The engine is its only writer while a drain is
        in progress.
    config:
        Fire mode and drain cap.  Defaults to ``EngineConfig()``.
    queue:
        Queue to drive; a fresh one by default.
    """

    def __init__(
        self,
        model: BattleModel,
        config: EngineConfig | None = None,
        queue: EffectQueue | None = None,
    ) -> None:
        self.model = model
        self.config = config or EngineConfig()
        self.queue = queue if queue is not None else EffectQueue()
        self.dispatcher = TriggerDispatcher(self.config.fire_mode)
        self.interpreter = EffectInterpreter(self.model, self.queue, self.dispatcher)
        # Units whose BeforeDeath reactions are queued but not yet settled.
        self._dying: set[int] = set()

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def handle_event(self, event: Event) -> None:
        """Queue every reaction that answers *event*, then drain."""
        self.dispatcher.dispatch(event, self.model, self.queue)
        self.drain()

    def enqueue(self, effect: Effect, context: EffectContext) -> None:
        """Queue an effect at the back without draining."""
        self.queue.push_back(QueuedEffect(effect=effect, context=context))

    def run(self, effect: Effect, context: EffectContext) -> None:
        """Queue a single effect against *context*, then drain."""
        self.enqueue(effect, context)
        self.drain()

    def tick(self, dt: float) -> int:
        """Advance model time by *dt*, promote due delayed effects and drain.

        Returns the number of delayed items promoted.
        """
        self.model.time += dt
        promoted = self.queue.promote_due(self.model.time)
        self.drain()
        return promoted

    def drain(self) -> int:
        """Process queued items until the queue is empty and no unit is dying.

        Returns the number of items processed.

        Raises
        ------
        RunawayEffectError
            If more than ``max_steps_per_drain`` items are processed.  The
            immediate queue is cleared first so the engine stays usable;
            delayed items stay scheduled.
        """
        steps = 0
        while True:
            item = self.queue.pop()
            if item is None:
                if not self._remove_dead():
                    break
                continue

            steps += 1
            if steps > self.config.max_steps_per_drain:
                self.queue.clear_immediate()
                self._dying.clear()
                raise RunawayEffectError(
                    f"Drain exceeded {self.config.max_steps_per_drain} steps; "
                    f"last effect was {item.effect.type}"
                )

            try:
                self.interpreter.process(item)
            except (ResolutionError, EvaluationError) as exc:
                logger.debug("Dropped %s: %s", item.effect.type, exc)
            self._observe_dying()
        return steps

    # ------------------------------------------------------------------
    # Death bookkeeping
    # ------------------------------------------------------------------

    def _observe_dying(self) -> None:
        """Queue BeforeDeath reactions, at the front, for newly fallen units."""
        for unit in self.model.living_units():
            if not unit.is_dead:
                self._dying.discard(unit.id)
                continue
            if unit.id in self._dying:
                continue
            self._dying.add(unit.id)
            event = Event(
                kind=EventKind.BEFORE_DEATH,
                subject=unit.id,
                target=self.model.killed_by.get(unit.id),
            )
            self.dispatcher.dispatch(event, self.model, self.queue, front=True)

    def _remove_dead(self) -> bool:
        """Remove every unit still at zero hp or less and raise death events.

        Returns whether any unit was removed.
        """
        fallen = [unit for unit in self.model.living_units() if unit.is_dead]
        for unit in fallen:
            self.model.remove_unit(unit.id)
            self._dying.discard(unit.id)
            self.model.emit("death", unit=unit.id, name=unit.name)
            logger.debug("Unit %d (%s) died", unit.id, unit.name)

        for unit in fallen:
            killer = self.model.killed_by.get(unit.id)
            self.dispatcher.dispatch(
                Event(kind=EventKind.DEATH, subject=unit.id, target=killer), self.model, self.queue,
            )
            if killer is not None and self.model.has_unit(killer):
                self.dispatcher.dispatch(
                    Event(kind=EventKind.KILL, subject=killer, target=unit.id), self.model, self.queue,
                )
        return bool(fallen)
