"""Effect interpreter -- bridge between IR effect trees and the battle model.

Processes one :class:`QueuedEffect` at a time by dispatching on the
effect's variant.  A handler may mutate the model and may push more
``(effect, context)`` pairs onto the queue, but it never drains the queue
itself; draining is the engine's job.

Usage::

    from effect_engine.sim.interpreter import EffectInterpreter

    interp = EffectInterpreter(model, queue, dispatcher)
    item = queue.pop()
    interp.process(item)
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable

from effect_engine.ir.effects import (
    AddGlobalVarEffect,
    AddVarEffect,
    AoeEffect,
    AttachStatusEffect,
    ChangeContextEffect,
    ChangeStatEffect,
    ChangeTargetEffect,
    CustomTriggerEffect,
    DamageEffect,
    DelayedEffect,
    Effect,
    HealEffect,
    IfEffect,
    KillEffect,
    ListEffect,
    MessageEffect,
    NoopEffect,
    RandomEffect,
    RemoveStatusEffect,
    RepeatEffect,
    SpawnEffect,
    TimeBombEffect,
    VisualEffect,
)
from effect_engine.ir.roles import Who
from effect_engine.sim.core.context import EffectContext, resolve_who
from effect_engine.sim.core.effect_queue import EffectQueue, QueuedEffect
from effect_engine.sim.core.events import Event, EventKind
from effect_engine.sim.mechanics.conditions import evaluate_condition
from effect_engine.sim.mechanics.damage import deal_damage, heal_unit, kill_unit
from effect_engine.sim.mechanics.expressions import (
    add_values,
    evaluate,
    evaluate_int,
    format_value,
)
from effect_engine.sim.mechanics.spawning import spawn_unit
from effect_engine.sim.mechanics.status_effects import attach_status, remove_status
from effect_engine.sim.mechanics.targeting import choose_new_target, matching_units

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel
    from effect_engine.sim.triggers import TriggerDispatcher

logger = logging.getLogger(__name__)


class EffectInterpreter:
    """Processes queued effects against a battle model.

    The interpreter holds no state of its own between items -- everything
    mutable lives in the ``BattleModel`` and the ``EffectQueue`` it was
    given.

    Parameters
    ----------
    model:
        The battle model handlers read and mutate.
    queue:
        The queue handlers push child effects onto.
    dispatcher:
        Answers events raised by effects (damage taken, stat changed,
        spawn, custom).  ``None`` disables event raising entirely.
    """

    def __init__(
        self,
        model: BattleModel,
        queue: EffectQueue,
        dispatcher: TriggerDispatcher | None = None,
    ) -> None:
        self.model = model
        self.queue = queue
        self.dispatcher = dispatcher

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def process(self, item: QueuedEffect) -> None:
        """Process a single queued item, dispatching by effect variant.

        Raises
        ------
        ResolutionError, EvaluationError
            When a role, unit, status or var the effect needs is missing.
            The engine's drain loop contains these per item.
        """
        context = item.context
        if item.anchor is not None:
            faction, slot = item.anchor
            occupant = self.model.unit_at(faction, slot)
            if occupant is None:
                logger.debug("Time bomb at %s slot %d fizzled", faction.value, slot)
                return
            context = context.rebind(Who.TARGET, occupant.id)

        handler = _DISPATCH.get(type(item.effect))
        if handler is None:
            logger.warning("No handler for effect type %s", item.effect.type)
            return
        handler(self, item.effect, context)

    # ------------------------------------------------------------------
    # Queue helpers
    # ------------------------------------------------------------------

    def _push_front(self, effect: Effect, context: EffectContext) -> None:
        self.queue.push_front(QueuedEffect(effect=effect, context=context))

    def _push_front_many(self, pairs: list[tuple[Effect, EffectContext]]) -> None:
        self.queue.push_front_many(
            QueuedEffect(effect=effect, context=context) for effect, context in pairs
        )

    def _raise(self, event: Event) -> None:
        if self.dispatcher is not None:
            self.dispatcher.dispatch(event, self.model, self.queue)

    # ------------------------------------------------------------------
    # Control flow
    # ------------------------------------------------------------------

    def _handle_noop(self, effect: NoopEffect, context: EffectContext) -> None:
        pass

    def _handle_list(self, effect: ListEffect, context: EffectContext) -> None:
        self._push_front_many([(child, context) for child in effect.effects])

    def _handle_repeat(self, effect: RepeatEffect, context: EffectContext) -> None:
        count = max(0, evaluate_int(effect.count, context, self.model))
        self._push_front_many(
            [(effect.effect.model_copy(deep=True), context) for _ in range(count)]
        )

    def _handle_random(self, effect: RandomEffect, context: EffectContext) -> None:
        choice = self.model.rng.weighted_choice(
            effect.choices, [choice.weight for choice in effect.choices],
        )
        self._push_front(choice.effect, context)

    def _handle_if(self, effect: IfEffect, context: EffectContext) -> None:
        if evaluate_condition(effect.condition, context, self.model):
            self._push_front(effect.then, context)
        else:
            self._push_front(effect.else_, context)

    def _handle_change_target(self, effect: ChangeTargetEffect, context: EffectContext) -> None:
        new_target = choose_new_target(self.model, context, effect.filter, effect.condition)
        if new_target is None:
            logger.debug("ChangeTarget found no candidate; dropping %s", effect.effect.type)
            return
        self._push_front(effect.effect, context.rebind(Who.TARGET, new_target))

    def _handle_change_context(self, effect: ChangeContextEffect, context: EffectContext) -> None:
        # Resolve every override against the old context before rebinding,
        # so swaps such as owner=target, target=owner work.
        overrides = {
            role: self._role_value(source, context)
            for role, source in (
                (Who.OWNER, effect.owner),
                (Who.CASTER, effect.caster),
                (Who.TARGET, effect.target),
            )
            if source is not None
        }
        new_context = context
        for role, unit_id in overrides.items():
            new_context = new_context.rebind(role, unit_id)
        self._push_front(effect.effect, new_context)

    def _handle_aoe(self, effect: AoeEffect, context: EffectContext) -> None:
        targets = matching_units(self.model, context, effect.filter, effect.condition)
        self._push_front_many(
            [(effect.effect.model_copy(deep=True), context.rebind(Who.TARGET, uid)) for uid in targets]
        )

    def _handle_delayed(self, effect: DelayedEffect, context: EffectContext) -> None:
        due = self.queue.schedule(
            QueuedEffect(effect=effect.effect, context=context), effect.delay, self.model.time,
        )
        logger.debug("Scheduled %s for t=%.2f", effect.effect.type, due)

    def _handle_time_bomb(self, effect: TimeBombEffect, context: EffectContext) -> None:
        target = self.model.get_unit(resolve_who(Who.TARGET, context, self.model))
        item = QueuedEffect(
            effect=effect.effect, context=context, anchor=(target.faction, target.slot),
        )
        due = self.queue.schedule(item, effect.delay, self.model.time)
        logger.debug("Time bomb on %s slot %d set for t=%.2f", target.faction.value, target.slot, due)

    # ------------------------------------------------------------------
    # Model mutation
    # ------------------------------------------------------------------

    def _handle_damage(self, effect: DamageEffect, context: EffectContext) -> None:
        target_id = resolve_who(effect.who, context, self.model)
        amount = evaluate_int(effect.value, context, self.model)
        result = deal_damage(self.model, target_id, amount, color=context.color)
        if result.dealt <= 0:
            return

        attacker = context.owner if self.model.has_unit(context.owner) else None
        if result.killed:
            self.model.credit_kill(target_id, attacker)
        damage_vars = {"damage_dealt": result.dealt}
        self._raise(Event(kind=EventKind.DAMAGE_TAKEN, subject=target_id, target=attacker, vars=damage_vars))
        if attacker is not None:
            self._raise(Event(kind=EventKind.DAMAGE_DEALT, subject=attacker, target=target_id, vars=damage_vars))

        follow_ups: list[tuple[Effect, EffectContext]] = []
        hit_context = context.rebind(Who.TARGET, target_id).with_vars(**damage_vars)
        if effect.on_injure is not None:
            follow_ups.append((effect.on_injure.model_copy(deep=True), hit_context))
        if result.killed and effect.on_kill is not None:
            follow_ups.append((effect.on_kill.model_copy(deep=True), hit_context))
        self._push_front_many(follow_ups)

    def _handle_heal(self, effect: HealEffect, context: EffectContext) -> None:
        target_id = resolve_who(effect.who, context, self.model)
        amount = evaluate_int(effect.value, context, self.model)
        heal_unit(self.model, target_id, amount, color=context.color)

    def _handle_kill(self, effect: KillEffect, context: EffectContext) -> None:
        target_id = resolve_who(effect.who, context, self.model)
        if kill_unit(self.model, target_id):
            self.model.credit_kill(target_id, context.owner)

    def _handle_change_stat(self, effect: ChangeStatEffect, context: EffectContext) -> None:
        unit = self.model.get_unit(resolve_who(effect.who, context, self.model))
        value = evaluate_int(effect.value, context, self.model)
        old = unit.get_stat(effect.stat)
        unit.set_stat(effect.stat, value)
        if effect.permanent:
            base = self.model.base_units.get(unit.id)
            if base is not None:
                base.set_stat(effect.stat, value)
        if unit.get_stat(effect.stat) != old:
            self._raise(Event(
                kind=EventKind.STAT_CHANGED,
                subject=unit.id,
                target=context.owner,
                stat=effect.stat,
                vars={"changed_stat": effect.stat.value, "old_value": old},
            ))

    def _handle_add_var(self, effect: AddVarEffect, context: EffectContext) -> None:
        owner = self.model.get_unit(resolve_who(Who.OWNER, context, self.model))
        value = evaluate(effect.value, context, self.model)
        bag = owner.vars
        if context.status_id is not None:
            status = owner.status_by_id(context.status_id)
            if status is not None:
                bag = status.vars
        bag[effect.name] = add_values(bag[effect.name], value) if effect.name in bag else value

    def _handle_add_global_var(self, effect: AddGlobalVarEffect, context: EffectContext) -> None:
        value = evaluate(effect.value, context, self.model)
        bag = self.model.global_vars
        bag[effect.name] = add_values(bag[effect.name], value) if effect.name in bag else value

    def _handle_attach_status(self, effect: AttachStatusEffect, context: EffectContext) -> None:
        unit = self.model.get_unit(resolve_who(effect.who, context, self.model))
        charges = evaluate_int(effect.charges, context, self.model)
        attach_status(self.model, unit, effect.status, charges=charges, caster=context.owner)

    def _handle_remove_status(self, effect: RemoveStatusEffect, context: EffectContext) -> None:
        unit = self.model.get_unit(resolve_who(effect.who, context, self.model))
        if remove_status(unit, effect.status) is None:
            logger.debug("Unit %d has no %s to remove", unit.id, effect.status)

    def _handle_spawn(self, effect: SpawnEffect, context: EffectContext) -> None:
        anchor = self.model.get_unit(resolve_who(effect.who, context, self.model))
        faction = anchor.faction.opposite() if effect.flip_faction else anchor.faction
        slot = max(0, anchor.slot + effect.offset)
        unit = spawn_unit(self.model, effect.template, faction, slot)
        self._raise(Event(kind=EventKind.SPAWN, subject=unit.id, target=anchor.id))
        self._push_front(effect.then, context.rebind(Who.TARGET, unit.id))

    def _handle_custom_trigger(self, effect: CustomTriggerEffect, context: EffectContext) -> None:
        subject = resolve_who(effect.who, context, self.model)
        self._raise(Event(
            kind=EventKind.CUSTOM,
            subject=subject,
            target=context.target,
            name=effect.name,
            vars=dict(context.vars),
        ))

    # ------------------------------------------------------------------
    # Presentation
    # ------------------------------------------------------------------

    def _handle_message(self, effect: MessageEffect, context: EffectContext) -> None:
        unit_id = resolve_who(effect.who, context, self.model)
        text = format_value(evaluate(effect.text, context, self.model))
        self.model.emit("message", unit=unit_id, text=text, color=context.color)

    def _handle_visual(self, effect: VisualEffect, context: EffectContext) -> None:
        unit_id = resolve_who(effect.who, context, self.model)
        self.model.emit(
            "visual", unit=unit_id, name=effect.name, color=context.color, duration=effect.duration,
        )
        if context.queue_id is not None and effect.duration > 0:
            self.queue.add_delay(context.queue_id, effect.duration, self.model.time)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _role_value(self, who: Who, context: EffectContext) -> int | None:
        if who is Who.STATUS_CASTER:
            return resolve_who(who, context, self.model)
        return context.get(who)


# ---------------------------------------------------------------------------
# Dispatch table: effect class -> handler method
# ---------------------------------------------------------------------------

_DISPATCH: dict[type, Callable[[EffectInterpreter, Effect, EffectContext], None]] = {
    NoopEffect: EffectInterpreter._handle_noop,
    ListEffect: EffectInterpreter._handle_list,
    RepeatEffect: EffectInterpreter._handle_repeat,
    RandomEffect: EffectInterpreter._handle_random,
    IfEffect: EffectInterpreter._handle_if,
    ChangeTargetEffect: EffectInterpreter._handle_change_target,
    ChangeContextEffect: EffectInterpreter._handle_change_context,
    AoeEffect: EffectInterpreter._handle_aoe,
    DelayedEffect: EffectInterpreter._handle_delayed,
    TimeBombEffect: EffectInterpreter._handle_time_bomb,
    DamageEffect: EffectInterpreter._handle_damage,
    HealEffect: EffectInterpreter._handle_heal,
    KillEffect: EffectInterpreter._handle_kill,
    ChangeStatEffect: EffectInterpreter._handle_change_stat,
    AddVarEffect: EffectInterpreter._handle_add_var,
    AddGlobalVarEffect: EffectInterpreter._handle_add_global_var,
    AttachStatusEffect: EffectInterpreter._handle_attach_status,
    RemoveStatusEffect: EffectInterpreter._handle_remove_status,
    SpawnEffect: EffectInterpreter._handle_spawn,
    CustomTriggerEffect: EffectInterpreter._handle_custom_trigger,
    MessageEffect: EffectInterpreter._handle_message,
    VisualEffect: EffectInterpreter._handle_visual,
}
