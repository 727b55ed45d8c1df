"""Expression nodes -- the pure value language embedded in effects and conditions.

Expressions are deserialised from content as a tagged union keyed on
``type``.  They carry no behaviour; evaluation lives in
:mod:`effect_engine.sim.mechanics.expressions`.
"""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from .roles import Who

VarValue = Union[int, float, str, tuple[float, float]]
"""Anything a var can hold: a number, a string or a 2D vector."""


class UnitStat(str, Enum):
    """Stats every unit carries."""

    HP = "hp"
    MAX_HP = "max_hp"
    ATTACK = "attack"


class ArithmeticOp(str, Enum):
    ADD = "add"
    SUB = "sub"
    MUL = "mul"
    DIV = "div"
    MIN = "min"
    MAX = "max"


class _ExpressionNode(BaseModel):
    model_config = {"extra": "forbid"}


class Const(_ExpressionNode):
    """A numeric literal."""

    type: Literal["Const"] = "Const"
    value: float


class Str(_ExpressionNode):
    """A string literal."""

    type: Literal["Str"] = "Str"
    value: str


class Vec(_ExpressionNode):
    """A 2D vector literal."""

    type: Literal["Vec"] = "Vec"
    x: float
    y: float


class Var(_ExpressionNode):
    """A named var.

    Looked up in the context overlay first, then in the var bag of the
    status that produced the context, then in the owner unit's vars.
    """

    type: Literal["Var"] = "Var"
    name: str
    default: Optional[float] = None
    """Returned when the var is bound nowhere.  ``None`` makes that an error."""


class Stat(_ExpressionNode):
    """Current value of a unit stat for the unit bound to ``who``."""

    type: Literal["Stat"] = "Stat"
    who: Who = Who.OWNER
    stat: UnitStat


class GlobalVar(_ExpressionNode):
    """A var from the battle-wide var bag."""

    type: Literal["GlobalVar"] = "GlobalVar"
    name: str
    default: Optional[float] = None


class Binary(_ExpressionNode):
    """``left <op> right``."""

    type: Literal["Binary"] = "Binary"
    op: ArithmeticOp
    left: Expression
    right: Expression


Expression = Annotated[
    Union[Const, Str, Vec, Var, Stat, GlobalVar, Binary],
    Field(discriminator="type"),
]

Binary.model_rebuild()


def const(value: float) -> Const:
    """Shorthand used by content builders and tests."""
    return Const(value=value)


def scaled(expr: Expression, multiplier: float, add: float = 0.0) -> Binary:
    """Return ``expr * multiplier + add`` as a new expression tree."""
    return Binary(
        op=ArithmeticOp.ADD,
        left=Binary(op=ArithmeticOp.MUL, left=expr, right=Const(value=multiplier)),
        right=Const(value=add),
    )
