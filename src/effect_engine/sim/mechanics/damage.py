"""Damage and healing application.

Damage never removes a unit: hp may drop to zero or below, and the
engine's death pass notices that after the current item finishes.
Healing is clamped so hp never exceeds ``max_hp``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DamageResult:
    """Outcome of one hit."""

    dealt: int
    killed: bool


def deal_damage(
    model: BattleModel,
    target_id: int,
    amount: int,
    color: str | None = None,
) -> DamageResult:
    """Apply *amount* damage to a unit.

    A hit that takes the unit from positive hp to zero or below counts as
    a kill.  Non-positive amounts are a no-op.
    """
    target = model.get_unit(target_id)
    was_alive = not target.is_dead
    dealt = target.take_damage(amount)
    if dealt:
        model.emit("damage", unit=target_id, text=str(dealt), color=color)
        logger.debug("Unit %d took %d damage (hp=%d)", target_id, dealt, target.hp)
    return DamageResult(dealt=dealt, killed=was_alive and target.is_dead)


def heal_unit(
    model: BattleModel,
    target_id: int,
    amount: int,
    color: str | None = None,
) -> int:
    """Heal a unit, never above its ``max_hp``.  Returns hp restored."""
    target = model.get_unit(target_id)
    restored = target.heal(amount)
    if restored:
        model.emit("heal", unit=target_id, text=str(restored), color=color)
        logger.debug("Unit %d healed %d (hp=%d)", target_id, restored, target.hp)
    return restored


def kill_unit(model: BattleModel, target_id: int) -> bool:
    """Drop a unit's hp to zero.  Returns whether it was alive before."""
    target = model.get_unit(target_id)
    was_alive = not target.is_dead
    target.hp = min(target.hp, 0)
    return was_alive
