"""Unit templates -- the content a battle unit is instantiated from."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .effects import Effect, NoopEffect
from .expressions import VarValue
from .triggers import Reaction


class UnitTemplate(BaseModel):
    """Complete definition of a unit type."""

    model_config = {"extra": "forbid"}

    name: str
    """Unique template name; ``Spawn`` effects refer to it."""

    hp: int = Field(gt=0)
    attack: int = Field(default=0, ge=0)

    house: str | None = None
    """Group used to decide which team bonuses apply to this unit."""

    vars: dict[str, VarValue] = Field(default_factory=dict)

    action: Effect = Field(default_factory=NoopEffect)
    """What the unit does when it strikes; target is the opposing unit."""

    reactions: list[Reaction] = Field(default_factory=list)

    statuses: list[str] = Field(default_factory=list)
    """Statuses attached (with one charge each) when the unit is created."""
