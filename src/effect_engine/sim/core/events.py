"""Runtime events fed to the trigger table, and display events for renderers."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, Field

from effect_engine.ir.expressions import UnitStat, VarValue


class EventKind(str, Enum):
    BATTLE_START = "battle_start"
    TURN_START = "turn_start"
    TURN_END = "turn_end"
    BEFORE_STRIKE = "before_strike"
    AFTER_STRIKE = "after_strike"
    DAMAGE_TAKEN = "damage_taken"
    DAMAGE_DEALT = "damage_dealt"
    KILL = "kill"
    BEFORE_DEATH = "before_death"
    DEATH = "death"
    SPAWN = "spawn"
    STAT_CHANGED = "stat_changed"
    CUSTOM = "custom"


class Event(BaseModel):
    """Something that happened in the battle.

    Parameters
    ----------
    kind:
        What happened.
    subject:
        The unit the event is about (the one that took damage, died, ...).
        ``None`` for battle-wide events such as turn boundaries.
    target:
        Unit bound as ``target`` in the context of reactions that fire.
        Reactions fall back to their owner when this is ``None``.
    name:
        Custom event name (``CUSTOM`` only).
    stat:
        Which stat changed (``STAT_CHANGED`` only).
    vars:
        Extra vars overlaid onto the reaction context.
    """

    model_config = {"frozen": True}

    kind: EventKind
    subject: int | None = None
    target: int | None = None
    name: str | None = None
    stat: UnitStat | None = None
    vars: dict[str, VarValue] = Field(default_factory=dict)


class DisplayEvent(BaseModel):
    """A "this happened" notice for an external renderer.

    The engine never renders; it only appends these to the model's
    display channel.
    """

    kind: str
    """``"damage"``, ``"heal"``, ``"message"``, ``"visual"``, ``"death"``, ..."""

    time: float
    unit: int | None = None
    text: str | None = None
    name: str | None = None
    color: str | None = None
    duration: float = 0.0
