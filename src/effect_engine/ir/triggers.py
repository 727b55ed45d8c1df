"""Triggers and reactions -- the event side of the content format.

A :class:`Reaction` pairs one trigger with the effects to queue when it
fires.  Matching a trigger against a runtime event is the simulator's job
(:mod:`effect_engine.sim.triggers`).
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field

from .effects import Effect
from .expressions import UnitStat


class _TriggerNode(BaseModel):
    model_config = {"extra": "forbid"}


class BattleStart(_TriggerNode):
    type: Literal["BattleStart"] = "BattleStart"


class TurnStart(_TriggerNode):
    type: Literal["TurnStart"] = "TurnStart"


class TurnEnd(_TriggerNode):
    type: Literal["TurnEnd"] = "TurnEnd"


class BeforeStrike(_TriggerNode):
    """The owner is about to strike."""

    type: Literal["BeforeStrike"] = "BeforeStrike"


class AfterStrike(_TriggerNode):
    type: Literal["AfterStrike"] = "AfterStrike"


class DamageTaken(_TriggerNode):
    """The owner lost hp to a ``Damage`` effect.  Target is the attacker."""

    type: Literal["DamageTaken"] = "DamageTaken"


class DamageDealt(_TriggerNode):
    """The owner dealt damage.  Target is the damaged unit."""

    type: Literal["DamageDealt"] = "DamageDealt"


class Kill(_TriggerNode):
    """The owner's damage killed a unit.  Target is the victim."""

    type: Literal["Kill"] = "Kill"


class BeforeDeath(_TriggerNode):
    """The owner dropped to zero hp and is about to be removed."""

    type: Literal["BeforeDeath"] = "BeforeDeath"


class AnyDeath(_TriggerNode):
    """Any other unit died."""

    type: Literal["AnyDeath"] = "AnyDeath"


class AllyDeath(_TriggerNode):
    type: Literal["AllyDeath"] = "AllyDeath"


class EnemyDeath(_TriggerNode):
    type: Literal["EnemyDeath"] = "EnemyDeath"


class Spawned(_TriggerNode):
    """The owner was just spawned."""

    type: Literal["Spawn"] = "Spawn"


class StatChangedTrigger(_TriggerNode):
    """One of the owner's stats was changed by a ``ChangeStat`` effect."""

    type: Literal["StatChanged"] = "StatChanged"
    stat: UnitStat


class Custom(_TriggerNode):
    """Answers a ``CustomTrigger`` effect with the same name."""

    type: Literal["Custom"] = "Custom"
    name: str


Trigger = Annotated[
    Union[
        BattleStart,
        TurnStart,
        TurnEnd,
        BeforeStrike,
        AfterStrike,
        DamageTaken,
        DamageDealt,
        Kill,
        BeforeDeath,
        AnyDeath,
        AllyDeath,
        EnemyDeath,
        Spawned,
        StatChangedTrigger,
        Custom,
    ],
    Field(discriminator="type"),
]


class Reaction(BaseModel):
    """Effects to queue, in order, when ``trigger`` fires."""

    model_config = {"extra": "forbid", "frozen": True}

    trigger: Trigger
    effects: list[Effect]
