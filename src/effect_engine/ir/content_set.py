"""Top-level container that bundles all battle content into a single IR document."""

from __future__ import annotations

from collections import Counter
from typing import Iterable

from pydantic import BaseModel, model_validator

from .conditions import And, Condition, HasStatus, Not, Or
from .effects import (
    AoeEffect,
    AttachStatusEffect,
    ChangeTargetEffect,
    Effect,
    IfEffect,
    RemoveStatusEffect,
    SpawnEffect,
    walk,
)
from .modifiers import HouseBonus
from .status_effects import StatusDefinition
from .triggers import Reaction
from .units import UnitTemplate


def _condition_status_refs(condition: Condition) -> set[str]:
    if isinstance(condition, HasStatus):
        return {condition.status}
    if isinstance(condition, Not):
        return _condition_status_refs(condition.condition)
    if isinstance(condition, (And, Or)):
        refs: set[str] = set()
        for sub in condition.conditions:
            refs |= _condition_status_refs(sub)
        return refs
    return set()


def collect_status_refs(effects: Iterable[Effect]) -> set[str]:
    """Walk effect trees and collect every status name they mention."""
    refs: set[str] = set()

    def visit(node: Effect) -> None:
        if isinstance(node, (AttachStatusEffect, RemoveStatusEffect)):
            refs.add(node.status)
        elif isinstance(node, (IfEffect, ChangeTargetEffect, AoeEffect)):
            refs.update(_condition_status_refs(node.condition))

    for effect in effects:
        walk(effect, visit)
    return refs


def collect_template_refs(effects: Iterable[Effect]) -> set[str]:
    """Walk effect trees and collect every unit template ``Spawn`` uses."""
    refs: set[str] = set()

    def visit(node: Effect) -> None:
        if isinstance(node, SpawnEffect):
            refs.add(node.template)

    for effect in effects:
        walk(effect, visit)
    return refs


def _reaction_effects(reactions: Iterable[Reaction]) -> list[Effect]:
    return [effect for reaction in reactions for effect in reaction.effects]


class ContentSet(BaseModel):
    """Every status, unit template and house bonus a battle can use.

    Serialise to JSON for persistence, deserialise to validate, then hand
    off to the content registry.
    """

    model_config = {"extra": "forbid"}

    statuses: list[StatusDefinition] = []
    units: list[UnitTemplate] = []
    bonuses: list[HouseBonus] = []

    # -- convenience lookups ------------------------------------------------

    def get_status(self, name: str) -> StatusDefinition | None:
        for status in self.statuses:
            if status.name == name:
                return status
        return None

    def get_unit(self, name: str) -> UnitTemplate | None:
        for unit in self.units:
            if unit.name == name:
                return unit
        return None

    def all_effects(self) -> list[Effect]:
        """Every root effect tree in the document."""
        effects: list[Effect] = []
        for unit in self.units:
            effects.append(unit.action)
            effects.extend(_reaction_effects(unit.reactions))
        for status in self.statuses:
            effects.extend(_reaction_effects(status.reactions))
        return effects

    # -- validation ---------------------------------------------------------

    @model_validator(mode="after")
    def _validate_unique_names(self) -> "ContentSet":
        duplicates = [
            f"{kind} {name!r}"
            for kind, names in (
                ("status", [s.name for s in self.statuses]),
                ("unit", [u.name for u in self.units]),
            )
            for name, count in Counter(names).items()
            if count > 1
        ]
        if duplicates:
            raise ValueError(f"Duplicate definitions: {', '.join(duplicates)}")
        return self

    @model_validator(mode="after")
    def _validate_references(self) -> "ContentSet":
        """Ensure every status and template referenced by an effect exists."""
        known_statuses = {s.name for s in self.statuses}
        known_units = {u.name for u in self.units}
        effects = self.all_effects()

        status_refs = collect_status_refs(effects)
        for unit in self.units:
            status_refs.update(unit.statuses)

        errors: list[str] = []
        unknown_statuses = status_refs - known_statuses
        if unknown_statuses:
            errors.append(
                "unknown status(es) referenced: "
                + ", ".join(sorted(unknown_statuses))
            )
        unknown_units = collect_template_refs(effects) - known_units
        if unknown_units:
            errors.append(
                "unknown unit template(s) spawned: "
                + ", ".join(sorted(unknown_units))
            )
        if errors:
            raise ValueError("Content validation failed: " + "; ".join(errors))
        return self
