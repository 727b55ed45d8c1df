"""Status lifecycle -- attach, remove, query.

A unit holds at most one attachment per status name.  Attaching a status
the unit already has adds charges to the existing attachment instead.
Each new attachment gets its own copy of the definition's var bag.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from effect_engine.errors import ResolutionError
from effect_engine.sim.core.entities import AttachedStatus

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel
    from effect_engine.sim.core.entities import Unit

logger = logging.getLogger(__name__)


def attach_status(
    model: BattleModel,
    unit: Unit,
    status_name: str,
    charges: int = 1,
    caster: int | None = None,
) -> AttachedStatus:
    """Attach *status_name* to *unit* or add charges to an existing attachment.

    Parameters
    ----------
    model:
        Battle model; provides status definitions and attachment ids.
    unit:
        The unit receiving the status.
    status_name:
        Name of a status definition known to the model.
    charges:
        Charges to add.
    caster:
        Unit credited with the attachment (``status_caster`` role).

    Raises
    ------
    ResolutionError
        If no status definition with that name is loaded.
    """
    existing = unit.find_status(status_name)
    if existing is not None:
        existing.charges += charges
        return existing

    definition = model.get_status_def(status_name)
    if definition is None:
        raise ResolutionError(f"Unknown status {status_name!r}")
    status = AttachedStatus(
        id=model.next_id(),
        name=status_name,
        caster=caster,
        charges=charges,
        vars=dict(definition.vars),
        color=definition.color,
    )
    unit.statuses.append(status)
    model.emit("status", unit=unit.id, name=status_name, color=definition.color)
    logger.debug("Attached %s (id=%d) to unit %d", status_name, status.id, unit.id)
    return status


def remove_status(unit: Unit, status_name: str) -> AttachedStatus | None:
    """Detach *status_name* from *unit*.  Returns the removed attachment, if any."""
    status = unit.find_status(status_name)
    if status is not None:
        unit.statuses.remove(status)
    return status


def get_status_charges(unit: Unit, status_name: str) -> int:
    status = unit.find_status(status_name)
    return status.charges if status is not None else 0
