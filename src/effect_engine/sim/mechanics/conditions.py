"""Condition evaluation.

Conditions gate optional behaviour, so evaluation is total: a role that
does not resolve, or an expression that fails, makes the condition false
instead of raising.
"""

from __future__ import annotations

import logging
import operator
from typing import TYPE_CHECKING

from effect_engine.errors import EngineError
from effect_engine.ir.conditions import (
    Always,
    And,
    Compare,
    CompareOp,
    Condition,
    HasStatus,
    IsAlive,
    IsInjured,
    Not,
    Or,
    StatChanged,
)
from effect_engine.sim.core.context import EffectContext, resolve_who
from effect_engine.sim.mechanics.expressions import evaluate

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel

logger = logging.getLogger(__name__)

_COMPARE = {
    CompareOp.LT: operator.lt,
    CompareOp.LE: operator.le,
    CompareOp.EQ: operator.eq,
    CompareOp.NE: operator.ne,
    CompareOp.GE: operator.ge,
    CompareOp.GT: operator.gt,
}


def evaluate_condition(condition: Condition, context: EffectContext, model: BattleModel) -> bool:
    """Return whether *condition* holds for *context* against *model*."""
    try:
        return _evaluate(condition, context, model)
    except EngineError as exc:
        logger.debug("Condition %s evaluated false: %s", condition.type, exc)
        return False


def _evaluate(condition: Condition, context: EffectContext, model: BattleModel) -> bool:
    if isinstance(condition, Always):
        return True
    if isinstance(condition, Not):
        return not evaluate_condition(condition.condition, context, model)
    if isinstance(condition, And):
        return all(evaluate_condition(c, context, model) for c in condition.conditions)
    if isinstance(condition, Or):
        return any(evaluate_condition(c, context, model) for c in condition.conditions)
    if isinstance(condition, HasStatus):
        unit = model.get_unit(resolve_who(condition.who, context, model))
        return unit.has_status(condition.status)
    if isinstance(condition, IsInjured):
        return model.get_unit(resolve_who(condition.who, context, model)).is_injured
    if isinstance(condition, IsAlive):
        unit = model.get_unit(resolve_who(condition.who, context, model))
        return not unit.is_dead
    if isinstance(condition, StatChanged):
        return context.vars.get("changed_stat") == condition.stat.value
    if isinstance(condition, Compare):
        left = evaluate(condition.left, context, model)
        right = evaluate(condition.right, context, model)
        try:
            return bool(_COMPARE[condition.op](left, right))
        except TypeError:
            return False
    return False
