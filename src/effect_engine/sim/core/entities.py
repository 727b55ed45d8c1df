"""Runtime unit models for the battle simulator.

All data classes use Pydantic v2 BaseModel for validation and
serialization.
"""

from __future__ import annotations

import logging

from pydantic import BaseModel, Field

from effect_engine.ir.effects import Effect, NoopEffect
from effect_engine.ir.expressions import UnitStat, VarValue
from effect_engine.ir.roles import Faction
from effect_engine.ir.triggers import Reaction

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# AttachedStatus
# ---------------------------------------------------------------------------

class AttachedStatus(BaseModel):
    """One attachment of a status definition to a unit."""

    id: int
    name: str
    caster: int | None = None
    """Unit that attached the status, if any."""

    charges: int = 1
    vars: dict[str, VarValue] = Field(default_factory=dict)
    color: str | None = None


# ---------------------------------------------------------------------------
# Unit
# ---------------------------------------------------------------------------

class Unit(BaseModel):
    """A unit on the battlefield."""

    id: int
    name: str
    """Template this unit was created from."""

    faction: Faction
    slot: int = 0
    """Position in the faction's line; slot 0 is the front."""

    hp: int
    max_hp: int
    attack: int = 0
    house: str | None = None
    vars: dict[str, VarValue] = Field(default_factory=dict)
    statuses: list[AttachedStatus] = Field(default_factory=list)
    reactions: list[Reaction] = Field(default_factory=list)
    action: Effect = Field(default_factory=NoopEffect)

    # -- queries -------------------------------------------------------------

    @property
    def is_dead(self) -> bool:
        return self.hp <= 0

    @property
    def is_injured(self) -> bool:
        return self.hp < self.max_hp

    def get_stat(self, stat: UnitStat) -> int:
        return getattr(self, stat.value)

    def set_stat(self, stat: UnitStat, value: int) -> None:
        setattr(self, stat.value, value)
        if stat is UnitStat.MAX_HP and self.max_hp < 0:
            logger.error("Unit %d max_hp went negative (%d); clamping to 0", self.id, value)
            self.max_hp = 0
        if self.hp > self.max_hp:
            self.hp = self.max_hp

    # -- statuses ------------------------------------------------------------

    def find_status(self, name: str) -> AttachedStatus | None:
        for status in self.statuses:
            if status.name == name:
                return status
        return None

    def status_by_id(self, status_id: int) -> AttachedStatus | None:
        for status in self.statuses:
            if status.id == status_id:
                return status
        return None

    def has_status(self, name: str) -> bool:
        return self.find_status(name) is not None

    # -- damage / heal -------------------------------------------------------

    def take_damage(self, amount: int) -> int:
        """Subtract *amount* hp.  Returns the damage applied (0 if *amount* <= 0).

        Hp may go to zero or below; removing the unit is the driver's job.
        """
        if amount <= 0:
            return 0
        self.hp -= amount
        return amount

    def heal(self, amount: int) -> int:
        """Heal up to *amount*, never above ``max_hp``.  Returns hp restored."""
        if amount <= 0:
            return 0
        if self.hp > self.max_hp:
            logger.error(
                "Unit %d had hp %d above max_hp %d; clamping", self.id, self.hp, self.max_hp,
            )
            self.hp = self.max_hp
        restored = min(amount, self.max_hp - self.hp)
        self.hp += restored
        return restored
