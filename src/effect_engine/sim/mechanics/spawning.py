"""Unit creation from templates, including starting statuses."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from effect_engine.errors import ResolutionError
from effect_engine.ir.roles import Faction
from effect_engine.ir.units import UnitTemplate
from effect_engine.sim.mechanics.status_effects import attach_status

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel
    from effect_engine.sim.core.entities import Unit

logger = logging.getLogger(__name__)


def spawn_unit(
    model: BattleModel,
    template: UnitTemplate | str,
    faction: Faction,
    slot: int | None = None,
) -> Unit:
    """Create a unit from *template* and attach its starting statuses.

    Nothing is added to the model unless every starting status is known.

    Parameters
    ----------
    model:
        Battle model the unit is added to.
    template:
        A unit template, or the name of one loaded into the model.
    faction:
        Side the unit fights for.
    slot:
        Line position.  An occupied slot pushes its occupant (and everyone
        behind it) one slot back; ``None`` appends to the back of the line.

    Raises
    ------
    ResolutionError
        If the template, or one of its starting statuses, is unknown.
    """
    if isinstance(template, str):
        template = model.get_template(template)
    missing = [name for name in template.statuses if model.get_status_def(name) is None]
    if missing:
        raise ResolutionError(
            f"Template {template.name!r} starts with unknown status(es): {', '.join(missing)}"
        )
    unit = model.create_unit(template, faction, slot)
    for status_name in template.statuses:
        attach_status(model, unit, status_name, charges=1, caster=unit.id)
    logger.debug("Spawned %s as unit %d (%s slot %d)", template.name, unit.id, faction.value, unit.slot)
    return unit
