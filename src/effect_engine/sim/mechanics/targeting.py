"""Target resolution -- turn filters and conditions into concrete unit ids."""

from __future__ import annotations

from typing import TYPE_CHECKING

from effect_engine.ir.conditions import Condition
from effect_engine.ir.roles import TargetFilter, Who
from effect_engine.sim.core.context import EffectContext, resolve_who
from effect_engine.sim.mechanics.conditions import evaluate_condition

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel


def matching_units(
    model: BattleModel,
    context: EffectContext,
    target_filter: TargetFilter,
    condition: Condition,
    exclude: set[int] | frozenset[int] = frozenset(),
) -> list[int]:
    """Ids of living units related to the owner by *target_filter*.

    *condition* is evaluated once per candidate with the candidate bound
    as the target.  The order is the model's slot order.
    """
    owner = model.get_unit(resolve_who(Who.OWNER, context, model))
    matches = []
    for unit in model.units_by_filter(owner, target_filter, exclude=exclude):
        if evaluate_condition(condition, context.rebind(Who.TARGET, unit.id), model):
            matches.append(unit.id)
    return matches


def choose_new_target(
    model: BattleModel,
    context: EffectContext,
    target_filter: TargetFilter,
    condition: Condition,
) -> int | None:
    """Pick a random matching unit other than the owner and current target.

    Returns ``None`` when nothing matches.
    """
    exclude = {uid for uid in (context.owner, context.target) if uid is not None}
    candidates = matching_units(model, context, target_filter, condition, exclude=exclude)
    if not candidates:
        return None
    return model.rng.random_choice(candidates)
