"""Battle model -- the mutable state effects are interpreted against.

The interpreter only touches units, statuses and vars through the
accessor methods on :class:`BattleModel`; nothing else in the engine
reaches into its dictionaries directly.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import BaseModel, Field, PrivateAttr

from effect_engine.errors import ResolutionError
from effect_engine.ir.expressions import VarValue
from effect_engine.ir.roles import Faction, TargetFilter
from effect_engine.ir.status_effects import StatusDefinition
from effect_engine.ir.units import UnitTemplate
from effect_engine.sim.core.entities import Unit
from effect_engine.sim.core.events import DisplayEvent
from effect_engine.sim.core.rng import GameRNG

logger = logging.getLogger(__name__)

_FACTION_ORDER = {Faction.PLAYER: 0, Faction.ENEMY: 1}


class BattleModel(BaseModel):
    """Full mutable state of a single battle."""

    model_config = {"arbitrary_types_allowed": True}

    units: dict[int, Unit] = Field(default_factory=dict)
    dead_units: dict[int, Unit] = Field(default_factory=dict)
    base_units: dict[int, Unit] = Field(default_factory=dict)
    """Cached "shop" copies of units; permanent stat changes land here too."""

    global_vars: dict[str, VarValue] = Field(default_factory=dict)
    time: float = 0.0
    turn: int = 0

    templates: dict[str, UnitTemplate] = Field(default_factory=dict, exclude=True)
    status_defs: dict[str, StatusDefinition] = Field(default_factory=dict, exclude=True)

    rng: GameRNG = Field(default_factory=lambda: GameRNG(0), exclude=True)
    """Battle RNG.  Excluded from serialization."""

    killed_by: dict[int, int] = Field(default_factory=dict)
    """Victim id -> id of the unit credited with the killing blow."""

    display_events: list[DisplayEvent] = Field(default_factory=list)

    _next_id: int = PrivateAttr(default=1)

    def model_post_init(self, __context: Any) -> None:
        known = [*self.units, *self.dead_units]
        if known:
            self._next_id = max(known) + 1

    # -- ids -----------------------------------------------------------------

    def next_id(self) -> int:
        """Allocate an id shared by units and status attachments."""
        value = self._next_id
        self._next_id += 1
        return value

    # -- unit lookup ---------------------------------------------------------

    def find_unit(self, unit_id: int | None) -> Unit | None:
        """Return the living unit with *unit_id*, or ``None``."""
        if unit_id is None:
            return None
        return self.units.get(unit_id)

    def get_unit(self, unit_id: int | None) -> Unit:
        """Return the living unit with *unit_id* or raise ``ResolutionError``."""
        unit = self.find_unit(unit_id)
        if unit is None:
            raise ResolutionError(f"Unit {unit_id!r} is not on the battlefield")
        return unit

    def has_unit(self, unit_id: int | None) -> bool:
        return unit_id is not None and unit_id in self.units

    def lookup_any(self, unit_id: int | None) -> Unit | None:
        """Like :meth:`find_unit`, but also searches removed units."""
        if unit_id is None:
            return None
        return self.units.get(unit_id) or self.dead_units.get(unit_id)

    def living_units(self) -> list[Unit]:
        """Units still on the battlefield, player faction first, front to back."""
        return sorted(
            self.units.values(),
            key=lambda u: (_FACTION_ORDER[u.faction], u.slot, u.id),
        )

    def faction_units(self, faction: Faction) -> list[Unit]:
        return [u for u in self.living_units() if u.faction is faction]

    def units_by_filter(
        self,
        reference: Unit,
        target_filter: TargetFilter,
        exclude: set[int] | frozenset[int] = frozenset(),
    ) -> list[Unit]:
        """Units whose relationship to *reference* matches *target_filter*."""
        return [
            u
            for u in self.living_units()
            if u.id not in exclude and target_filter.matches(reference.faction, u.faction)
        ]

    def unit_at(self, faction: Faction, slot: int) -> Unit | None:
        for unit in self.units.values():
            if unit.faction is faction and unit.slot == slot:
                return unit
        return None

    def front_unit(self, faction: Faction) -> Unit | None:
        units = self.faction_units(faction)
        return units[0] if units else None

    # -- unit lifecycle ------------------------------------------------------

    def add_unit(self, unit: Unit) -> Unit:
        """Place *unit* on the battlefield, pushing occupants of its slot back."""
        if unit.id in self.units:
            raise ValueError(f"Unit id {unit.id} already on the battlefield")
        if self.unit_at(unit.faction, unit.slot) is not None:
            for other in self.faction_units(unit.faction):
                if other.slot >= unit.slot:
                    other.slot += 1
        self.units[unit.id] = unit
        self._next_id = max(self._next_id, unit.id + 1)
        return unit

    def create_unit(
        self,
        template: UnitTemplate,
        faction: Faction,
        slot: int | None = None,
    ) -> Unit:
        """Instantiate *template* (without its starting statuses) and add it.

        ``slot=None`` appends the unit behind the last unit of *faction*.
        """
        if slot is None:
            line = self.faction_units(faction)
            slot = line[-1].slot + 1 if line else 0
        unit = Unit(
            id=self.next_id(),
            name=template.name,
            faction=faction,
            slot=slot,
            hp=template.hp,
            max_hp=template.hp,
            attack=template.attack,
            house=template.house,
            vars=dict(template.vars),
            reactions=[r.model_copy(deep=True) for r in template.reactions],
            action=template.action.model_copy(deep=True),
        )
        return self.add_unit(unit)

    def remove_unit(self, unit_id: int) -> Unit | None:
        """Move a unit to ``dead_units``.  Returns it, or ``None`` if absent."""
        unit = self.units.pop(unit_id, None)
        if unit is None:
            return None
        self.dead_units[unit_id] = unit
        return unit

    def credit_kill(self, victim_id: int, killer_id: int | None) -> None:
        if killer_id is not None:
            self.killed_by[victim_id] = killer_id

    def cache_base_copy(self, unit: Unit) -> None:
        """Remember *unit*'s current state as its persistent base copy."""
        self.base_units[unit.id] = unit.model_copy(deep=True)

    # -- content -------------------------------------------------------------

    def get_template(self, name: str) -> UnitTemplate:
        template = self.templates.get(name)
        if template is None:
            raise ResolutionError(f"Unknown unit template {name!r}")
        return template

    def get_status_def(self, name: str) -> StatusDefinition | None:
        return self.status_defs.get(name)

    # -- outcome -------------------------------------------------------------

    @property
    def is_over(self) -> bool:
        return not self.faction_units(Faction.PLAYER) or not self.faction_units(Faction.ENEMY)

    @property
    def winner(self) -> Faction | None:
        players = self.faction_units(Faction.PLAYER)
        enemies = self.faction_units(Faction.ENEMY)
        if players and not enemies:
            return Faction.PLAYER
        if enemies and not players:
            return Faction.ENEMY
        return None

    # -- display channel -----------------------------------------------------

    def emit(self, kind: str, **fields: Any) -> None:
        """Append a display event stamped with the current model time."""
        self.display_events.append(DisplayEvent(kind=kind, time=self.time, **fields))

    def pop_display_events(self) -> list[DisplayEvent]:
        events = self.display_events
        self.display_events = []
        return events
