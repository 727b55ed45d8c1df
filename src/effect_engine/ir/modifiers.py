"""Modifiers -- structural rewrite rules applied to effect trees before a battle.

Used for alliance/house bonuses: a team that qualifies for a bonus has its
units' effect trees rewritten once at assembly time.  The rewrite itself
lives in :mod:`effect_engine.sim.modifiers`.
"""

from __future__ import annotations

from typing import Annotated, Literal, Union

from pydantic import BaseModel, Field


class StrengthModifier(BaseModel):
    """Rewrites every ``Damage`` value to ``value * multiplier + add``."""

    model_config = {"extra": "forbid"}

    type: Literal["Strength"] = "Strength"
    multiplier: float = 1.0
    add: float = 0.0


class HealingModifier(BaseModel):
    """Rewrites every ``Heal`` value to ``value * multiplier + add``."""

    model_config = {"extra": "forbid"}

    type: Literal["Healing"] = "Healing"
    multiplier: float = 1.0
    add: float = 0.0


Modifier = Annotated[
    Union[StrengthModifier, HealingModifier],
    Field(discriminator="type"),
]


class HouseBonus(BaseModel):
    """Modifiers granted to every unit of ``house`` once a team fields enough of them."""

    model_config = {"extra": "forbid"}

    house: str
    min_units: int = Field(default=2, ge=1)
    modifiers: list[Modifier]
