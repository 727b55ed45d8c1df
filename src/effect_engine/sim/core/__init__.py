"""Core simulation primitives for the effect interpreter."""

from effect_engine.sim.core.battle_state import BattleModel
from effect_engine.sim.core.context import EffectContext, resolve_who
from effect_engine.sim.core.effect_queue import EffectQueue, QueuedEffect
from effect_engine.sim.core.entities import AttachedStatus, Unit
from effect_engine.sim.core.events import DisplayEvent, Event, EventKind
from effect_engine.sim.core.rng import GameRNG

__all__ = [
    # rng
    "GameRNG",
    # entities
    "AttachedStatus",
    "Unit",
    # events
    "DisplayEvent",
    "Event",
    "EventKind",
    # battle_state
    "BattleModel",
    # context
    "EffectContext",
    "resolve_who",
    # effect_queue
    "EffectQueue",
    "QueuedEffect",
]
