"""Effect context -- the binding environment threaded through interpretation.

Every queued effect carries its own :class:`EffectContext`.  Contexts are
frozen: anything that needs a different binding builds a new one with
:meth:`EffectContext.rebind` and friends, so two queued items derived
from the same parent never see each other's changes.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import BaseModel, Field

from effect_engine.errors import ResolutionError
from effect_engine.ir.expressions import VarValue
from effect_engine.ir.roles import Who

if TYPE_CHECKING:
    from effect_engine.sim.core.battle_state import BattleModel


class EffectContext(BaseModel):
    """Roles, var overlay and bookkeeping for one queued effect.

    Parameters
    ----------
    owner:
        Unit whose ability or status produced the effect.
    caster:
        Unit that initiated the chain.
    target:
        Unit the effect is aimed at.
    vars:
        Var overlay consulted before any var bag on the model.  Treat it
        as read-only; use :meth:`with_vars` to derive a context with more
        values.  Each context holds its own copy, so a stray write never
        reaches the parent or a sibling.
    status_id:
        Attachment id of the status that produced the effect, if any.
    color:
        Display colour passed through to display events.
    queue_id:
        Partition of the delayed timeline this chain is serialised on.
    """

    model_config = {"frozen": True}

    owner: int | None = None
    caster: int | None = None
    target: int | None = None
    vars: dict[str, VarValue] = Field(default_factory=dict)
    status_id: int | None = None
    color: str | None = None
    queue_id: str | None = None

    # -- role access ---------------------------------------------------------

    def get(self, who: Who) -> int | None:
        """Return the unit id bound to a direct role.

        ``STATUS_CASTER`` is derived and needs the model; use
        :func:`resolve_who` for it.
        """
        if who is Who.OWNER:
            return self.owner
        if who is Who.CASTER:
            return self.caster
        if who is Who.TARGET:
            return self.target
        return None

    # -- copy-on-write updates ----------------------------------------------

    def rebind(self, who: Who, unit_id: int | None) -> EffectContext:
        if who is Who.STATUS_CASTER:
            raise ValueError("status_caster is derived and cannot be rebound")
        return self.model_copy(update={who.value: unit_id, "vars": dict(self.vars)})

    def with_vars(self, **values: VarValue) -> EffectContext:
        return self.model_copy(update={"vars": {**self.vars, **values}})

    def with_status(self, status_id: int | None, color: str | None = None) -> EffectContext:
        return self.model_copy(
            update={"status_id": status_id, "color": color, "vars": dict(self.vars)},
        )

    def with_queue(self, queue_id: str | None) -> EffectContext:
        return self.model_copy(update={"queue_id": queue_id, "vars": dict(self.vars)})

    @classmethod
    def for_unit(cls, unit_id: int, target: int | None = None) -> EffectContext:
        """Context for an effect a unit performs itself."""
        return cls(owner=unit_id, caster=unit_id, target=unit_id if target is None else target)


def resolve_who(who: Who, context: EffectContext, model: BattleModel) -> int:
    """Resolve *who* to the id of a unit currently on the battlefield.

    Raises
    ------
    ResolutionError
        If the role is unbound or its unit is no longer present.
    """
    if who is Who.STATUS_CASTER:
        owner = model.find_unit(context.owner)
        status = owner.status_by_id(context.status_id) if owner and context.status_id is not None else None
        if status is None:
            raise ResolutionError("Context has no originating status to take a caster from")
        unit_id = status.caster
    else:
        unit_id = context.get(who)
    if unit_id is None:
        raise ResolutionError(f"Role {who.value!r} is not bound")
    if not model.has_unit(unit_id):
        raise ResolutionError(f"Role {who.value!r} refers to unit {unit_id}, which is gone")
    return unit_id
