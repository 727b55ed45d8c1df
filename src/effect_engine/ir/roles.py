"""Symbolic roles and relationship filters used throughout the IR."""

from __future__ import annotations

from enum import Enum


class Who(str, Enum):
    """A role resolved against an effect context to a concrete unit."""

    OWNER = "owner"
    """The unit whose ability or status produced the effect."""

    CASTER = "caster"
    """The unit that initiated the chain (attacker, applier, ...)."""

    TARGET = "target"
    """The unit the effect is aimed at."""

    STATUS_CASTER = "status_caster"
    """Derived: the unit that attached the status the context came from."""


class TargetFilter(str, Enum):
    """Relationship between a candidate unit and a reference unit."""

    ALLY = "ally"
    ENEMY = "enemy"
    ALL = "all"

    def matches(self, reference_faction: Faction, candidate_faction: Faction) -> bool:
        if self is TargetFilter.ALL:
            return True
        same = reference_faction == candidate_faction
        return same if self is TargetFilter.ALLY else not same


class Faction(str, Enum):
    PLAYER = "player"
    ENEMY = "enemy"

    def opposite(self) -> Faction:
        return Faction.ENEMY if self is Faction.PLAYER else Faction.PLAYER
