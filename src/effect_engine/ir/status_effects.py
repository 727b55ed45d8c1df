"""Status definitions -- named bundles of reactions attached to units at runtime."""

from __future__ import annotations

from pydantic import BaseModel, Field

from .expressions import VarValue
from .triggers import Reaction


class StatusDefinition(BaseModel):
    """Complete definition of a status that effects can attach to a unit."""

    model_config = {"extra": "forbid"}

    name: str
    """Unique name; ``AttachStatus``/``HasStatus`` refer to it."""

    description: str = ""

    color: str | None = None
    """Display colour carried by contexts this status produces."""

    vars: dict[str, VarValue] = Field(default_factory=dict)
    """Initial local var bag, copied for every attachment."""

    reactions: list[Reaction] = Field(default_factory=list)
    """Fired with the status's owner as owner, in declaration order."""
