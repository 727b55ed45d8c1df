"""Condition nodes -- pure predicates gating branches and target selection."""

from __future__ import annotations

from enum import Enum
from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .expressions import Expression, UnitStat
from .roles import Who


class CompareOp(str, Enum):
    LT = "lt"
    LE = "le"
    EQ = "eq"
    NE = "ne"
    GE = "ge"
    GT = "gt"


class _ConditionNode(BaseModel):
    model_config = {"extra": "forbid"}


class Always(_ConditionNode):
    type: Literal["Always"] = "Always"


class Not(_ConditionNode):
    type: Literal["Not"] = "Not"
    condition: Condition


class And(_ConditionNode):
    """True when every sub-condition holds (vacuously true when empty)."""

    type: Literal["And"] = "And"
    conditions: list[Condition]


class Or(_ConditionNode):
    """True when any sub-condition holds (false when empty)."""

    type: Literal["Or"] = "Or"
    conditions: list[Condition]


class HasStatus(_ConditionNode):
    type: Literal["HasStatus"] = "HasStatus"
    who: Who = Who.TARGET
    status: str


class IsInjured(_ConditionNode):
    """The unit's hp is below its max hp."""

    type: Literal["IsInjured"] = "IsInjured"
    who: Who = Who.TARGET


class IsAlive(_ConditionNode):
    type: Literal["IsAlive"] = "IsAlive"
    who: Who = Who.TARGET


class StatChanged(_ConditionNode):
    """Matches the ``changed_stat`` var set when a stat-changed event fires."""

    type: Literal["StatChanged"] = "StatChanged"
    stat: UnitStat


class Compare(_ConditionNode):
    type: Literal["Compare"] = "Compare"
    op: CompareOp
    left: Expression
    right: Expression


Condition = Annotated[
    Union[Always, Not, And, Or, HasStatus, IsInjured, IsAlive, StatChanged, Compare],
    Field(discriminator="type"),
]

Not.model_rebuild()
And.model_rebuild()
Or.model_rebuild()
