"""Expression evaluation.

Evaluation is pure: it reads the context and the model and never writes
to either.  Failures raise :class:`~effect_engine.errors.EvaluationError`
(or :class:`~effect_engine.errors.ResolutionError` for a role that cannot
be resolved) and the caller decides the fallback.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from effect_engine.errors import EngineError, EvaluationError
from effect_engine.ir.expressions import (
    ArithmeticOp,
    Binary,
    Const,
    Expression,
    GlobalVar,
    Stat,
    Str,
    Var,
    VarValue,
    Vec,
)
from effect_engine.sim.core.context import EffectContext, resolve_who

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel


def evaluate(expr: Expression, context: EffectContext, model: BattleModel) -> VarValue:
    """Compute the value of *expr* against *context* and *model*."""
    if isinstance(expr, Const):
        return expr.value
    if isinstance(expr, Str):
        return expr.value
    if isinstance(expr, Vec):
        return (expr.x, expr.y)
    if isinstance(expr, Var):
        return _lookup_var(expr, context, model)
    if isinstance(expr, Stat):
        unit = model.get_unit(resolve_who(expr.who, context, model))
        return unit.get_stat(expr.stat)
    if isinstance(expr, GlobalVar):
        if expr.name in model.global_vars:
            return model.global_vars[expr.name]
        if expr.default is not None:
            return expr.default
        raise EvaluationError(f"Global var {expr.name!r} is not set")
    if isinstance(expr, Binary):
        left = evaluate(expr.left, context, model)
        right = evaluate(expr.right, context, model)
        return _apply(expr.op, left, right)
    raise EvaluationError(f"Unsupported expression {type(expr).__name__}")


def evaluate_number(expr: Expression, context: EffectContext, model: BattleModel) -> float:
    value = evaluate(expr, context, model)
    if isinstance(value, (str, tuple)):
        raise EvaluationError(f"Expected a number, got {value!r}")
    return float(value)


def evaluate_int(expr: Expression, context: EffectContext, model: BattleModel) -> int:
    """Evaluate to a number and round to the nearest integer."""
    return int(round(evaluate_number(expr, context, model)))


def evaluate_or(
    expr: Expression,
    context: EffectContext,
    model: BattleModel,
    default: VarValue,
) -> VarValue:
    """Like :func:`evaluate` but return *default* instead of raising."""
    try:
        return evaluate(expr, context, model)
    except EngineError:
        return default


def add_values(left: VarValue, right: VarValue) -> VarValue:
    """``left + right`` with the same typing rules as a ``Binary`` add."""
    return _apply(ArithmeticOp.ADD, left, right)


def format_value(value: VarValue) -> str:
    """Render a value for display text."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, tuple):
        return f"({format_value(value[0])}, {format_value(value[1])})"
    return str(value)


# ---------------------------------------------------------------------------
# Internals
# ---------------------------------------------------------------------------

def _lookup_var(expr: Var, context: EffectContext, model: BattleModel) -> VarValue:
    if expr.name in context.vars:
        return context.vars[expr.name]
    owner = model.find_unit(context.owner)
    if owner is not None:
        if context.status_id is not None:
            status = owner.status_by_id(context.status_id)
            if status is not None and expr.name in status.vars:
                return status.vars[expr.name]
        if expr.name in owner.vars:
            return owner.vars[expr.name]
    if expr.default is not None:
        return expr.default
    raise EvaluationError(f"Var {expr.name!r} is not bound")


def _apply(op: ArithmeticOp, left: VarValue, right: VarValue) -> VarValue:
    if isinstance(left, str) or isinstance(right, str):
        if op is ArithmeticOp.ADD and isinstance(left, str) and isinstance(right, str):
            return left + right
        raise EvaluationError(f"Cannot apply {op.value} to {left!r} and {right!r}")
    if isinstance(left, tuple) or isinstance(right, tuple):
        return _apply_vector(op, left, right)
    return _apply_scalar(op, float(left), float(right))


def _apply_scalar(op: ArithmeticOp, left: float, right: float) -> float:
    if op is ArithmeticOp.ADD:
        return left + right
    if op is ArithmeticOp.SUB:
        return left - right
    if op is ArithmeticOp.MUL:
        return left * right
    if op is ArithmeticOp.DIV:
        if right == 0:
            raise EvaluationError("Division by zero")
        return left / right
    if op is ArithmeticOp.MIN:
        return min(left, right)
    return max(left, right)


def _apply_vector(op: ArithmeticOp, left: VarValue, right: VarValue) -> tuple[float, float]:
    # A scalar operand is broadcast to both components.
    lx, ly = left if isinstance(left, tuple) else (float(left), float(left))
    rx, ry = right if isinstance(right, tuple) else (float(right), float(right))
    return (_apply_scalar(op, lx, rx), _apply_scalar(op, ly, ry))
