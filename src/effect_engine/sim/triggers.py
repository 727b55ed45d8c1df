"""Trigger matching and reaction dispatch.

:class:`ReactionTable` answers one event for one owner: it walks the
owner's reactions in declaration order and queues the effects of the
first (or every) reaction whose trigger fires.

:class:`TriggerDispatcher` answers one event for the whole battlefield:
it walks living units in slot order, player faction first, and runs each
unit's own reactions followed by the reactions of its statuses in
attachment order.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING, Sequence

from effect_engine.ir.triggers import (
    AfterStrike,
    AllyDeath,
    AnyDeath,
    BattleStart,
    BeforeDeath,
    BeforeStrike,
    Custom,
    DamageDealt,
    DamageTaken,
    EnemyDeath,
    Kill,
    Reaction,
    Spawned,
    StatChangedTrigger,
    Trigger,
    TurnEnd,
    TurnStart,
)
from effect_engine.sim.core.context import EffectContext
from effect_engine.sim.core.effect_queue import EffectQueue, QueuedEffect
from effect_engine.sim.core.events import Event, EventKind

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel
    from effect_engine.sim.core.entities import Unit

logger = logging.getLogger(__name__)


class FireMode(str, Enum):
    """How many matching reactions of one owner fire per event."""

    ALL = "all"
    FIRST = "first"


# Triggers that fire for battle-wide events regardless of subject.
_GLOBAL_TRIGGERS: dict[type, EventKind] = {
    BattleStart: EventKind.BATTLE_START,
    TurnStart: EventKind.TURN_START,
    TurnEnd: EventKind.TURN_END,
}

# Triggers that fire only when the owner is the event's subject.
_SUBJECT_TRIGGERS: dict[type, EventKind] = {
    BeforeStrike: EventKind.BEFORE_STRIKE,
    AfterStrike: EventKind.AFTER_STRIKE,
    DamageTaken: EventKind.DAMAGE_TAKEN,
    DamageDealt: EventKind.DAMAGE_DEALT,
    Kill: EventKind.KILL,
    BeforeDeath: EventKind.BEFORE_DEATH,
    Spawned: EventKind.SPAWN,
}


def trigger_fires(trigger: Trigger, event: Event, owner: Unit, model: BattleModel) -> bool:
    """Return whether *trigger*, owned by *owner*, answers *event*."""
    kind = _GLOBAL_TRIGGERS.get(type(trigger))
    if kind is not None:
        return event.kind is kind

    kind = _SUBJECT_TRIGGERS.get(type(trigger))
    if kind is not None:
        return event.kind is kind and event.subject == owner.id

    if isinstance(trigger, StatChangedTrigger):
        return (
            event.kind is EventKind.STAT_CHANGED
            and event.subject == owner.id
            and event.stat is trigger.stat
        )
    if isinstance(trigger, Custom):
        return (
            event.kind is EventKind.CUSTOM
            and event.subject == owner.id
            and event.name == trigger.name
        )
    if isinstance(trigger, (AnyDeath, AllyDeath, EnemyDeath)):
        if event.kind is not EventKind.DEATH or event.subject == owner.id:
            return False
        if isinstance(trigger, AnyDeath):
            return True
        dead = model.lookup_any(event.subject)
        if dead is None:
            return False
        same_side = dead.faction is owner.faction
        return same_side if isinstance(trigger, AllyDeath) else not same_side
    return False


# ---------------------------------------------------------------------------
# ReactionTable
# ---------------------------------------------------------------------------

class ReactionTable:
    """Ordered reactions of a single owner.

    Parameters
    ----------
    reactions:
        Reactions in declaration order.  The order is the firing order.
    """

    def __init__(self, reactions: Sequence[Reaction]) -> None:
        self.reactions = list(reactions)

    def collect(
        self,
        event: Event,
        owner: Unit,
        context: EffectContext,
        model: BattleModel,
        mode: FireMode = FireMode.ALL,
    ) -> list[QueuedEffect]:
        """Queued items for every reaction of this table that fires on *event*."""
        items: list[QueuedEffect] = []
        for reaction in self.reactions:
            if not trigger_fires(reaction.trigger, event, owner, model):
                continue
            items.extend(
                QueuedEffect(effect=effect.model_copy(deep=True), context=context)
                for effect in reaction.effects
            )
            if mode is FireMode.FIRST:
                break
        return items

    def handle_event(
        self,
        event: Event,
        owner: Unit,
        context: EffectContext,
        queue: EffectQueue,
        model: BattleModel,
        mode: FireMode = FireMode.ALL,
    ) -> int:
        """Push the effects of matching reactions onto the back of *queue*.

        Returns the number of effects queued.
        """
        items = self.collect(event, owner, context, model, mode)
        for item in items:
            queue.push_back(item)
        return len(items)


# ---------------------------------------------------------------------------
# TriggerDispatcher
# ---------------------------------------------------------------------------

class TriggerDispatcher:
    """Answers events for every unit on the battlefield.

    Parameters
    ----------
    mode:
        Fire mode applied to each reaction table (a unit's own reactions
        and each attached status are separate tables).
    """

    def __init__(self, mode: FireMode = FireMode.ALL) -> None:
        self.mode = mode

    def dispatch(
        self,
        event: Event,
        model: BattleModel,
        queue: EffectQueue,
        *,
        front: bool = False,
    ) -> int:
        """Queue every reaction that answers *event*.

        Reactions go to the back of the queue, or to the front (still in
        firing order) when *front* is set.  Returns the number of effects
        queued.

        Units at zero hp or less only answer ``BeforeDeath``; they stay on
        the field until the engine settles deaths but no longer react.
        """
        items: list[QueuedEffect] = []
        for unit in model.living_units():
            if unit.is_dead and event.kind is not EventKind.BEFORE_DEATH:
                continue
            items.extend(self.collect_for_unit(event, unit, model))
        if front:
            queue.push_front_many(items)
        else:
            for item in items:
                queue.push_back(item)
        if items:
            logger.debug("Event %s queued %d effect(s)", event.kind.value, len(items))
        return len(items)

    def collect_for_unit(self, event: Event, unit: Unit, model: BattleModel) -> list[QueuedEffect]:
        """Queued items for *unit*'s own reactions, then its statuses' reactions."""
        base = self._base_context(event, unit)
        items = ReactionTable(unit.reactions).collect(event, unit, base, model, self.mode)

        # Snapshot statuses; reactions may attach or remove more later.
        for status in list(unit.statuses):
            definition = model.get_status_def(status.name)
            if definition is None:
                logger.warning("Unit %d carries unknown status %r", unit.id, status.name)
                continue
            context = base.with_status(status.id, status.color).with_vars(charges=status.charges)
            items.extend(
                ReactionTable(definition.reactions).collect(event, unit, context, model, self.mode)
            )
        return items

    @staticmethod
    def _base_context(event: Event, unit: Unit) -> EffectContext:
        return EffectContext(
            owner=unit.id,
            caster=event.subject if event.subject is not None else unit.id,
            target=event.target,
            vars=dict(event.vars),
        )
