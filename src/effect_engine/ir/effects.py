"""Effect nodes that form the behavioural IR of abilities, statuses and triggers.

An effect tree is a closed tagged union (discriminator ``type``).  Leaf
variants mutate the battle model when interpreted (damage, heal, stat and
var writes, status attachment, spawning); branch variants carry child
effects and decide which of them get queued and against which context.

Every variant implements :meth:`walk_children`, which hands each *direct*
child to a visitor.  :func:`walk` builds a post-order traversal on top of
it, which is what the modifier pass and content validation use.

Unknown fields are rejected so that typos in content fail at load time
rather than silently producing a no-op.
"""

from __future__ import annotations

from typing import Annotated, Callable, Literal, Optional, Union

from pydantic import BaseModel, Field

from .conditions import Always, Condition
from .expressions import Const, Expression, UnitStat
from .roles import TargetFilter, Who


class _EffectNode(BaseModel):
    model_config = {"extra": "forbid", "populate_by_name": True}

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        """Call *visit* on each direct child effect.  Leaves have none."""


# ---------------------------------------------------------------------------
# Control flow
# ---------------------------------------------------------------------------

class NoopEffect(_EffectNode):
    type: Literal["Noop"] = "Noop"


class ListEffect(_EffectNode):
    """Runs ``effects`` in declared order before any previously queued work."""

    type: Literal["List"] = "List"
    effects: list[Effect] = Field(default_factory=list)

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        for effect in self.effects:
            visit(effect)


class RepeatEffect(_EffectNode):
    """Queues ``count`` copies of ``effect`` against the same context.

    ``count`` is evaluated once, when the repeat itself is processed.
    """

    type: Literal["Repeat"] = "Repeat"
    count: Expression
    effect: Effect

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.effect)


class WeightedEffect(BaseModel):
    model_config = {"extra": "forbid"}

    weight: float = Field(gt=0)
    effect: Effect


class RandomEffect(_EffectNode):
    """Picks one of ``choices`` with probability proportional to its weight."""

    type: Literal["Random"] = "Random"
    choices: list[WeightedEffect] = Field(min_length=1)

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        for choice in self.choices:
            visit(choice.effect)


class IfEffect(_EffectNode):
    """Evaluates ``condition`` when processed and queues exactly one branch."""

    type: Literal["If"] = "If"
    condition: Condition
    then: Effect
    else_: Effect = Field(default_factory=NoopEffect, alias="else")

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.then)
        visit(self.else_)


class ChangeTargetEffect(_EffectNode):
    """Rebinds the target to a random unit matching ``filter`` and ``condition``.

    The owner and the current target are never candidates.  The condition is
    evaluated once per candidate, with the candidate bound as the target.
    """

    type: Literal["ChangeTarget"] = "ChangeTarget"
    filter: TargetFilter = TargetFilter.ENEMY
    condition: Condition = Field(default_factory=Always)
    effect: Effect

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.effect)


class ChangeContextEffect(_EffectNode):
    """Rebinds roles to the current resolution of other roles.

    ``ChangeContext(caster=target)`` makes the old target the new caster.
    Roles left as ``None`` pass through unchanged.
    """

    type: Literal["ChangeContext"] = "ChangeContext"
    owner: Optional[Who] = None
    caster: Optional[Who] = None
    target: Optional[Who] = None
    effect: Effect

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.effect)


class AoeEffect(_EffectNode):
    """Queues one copy of ``effect`` per matching unit, bound as target."""

    type: Literal["Aoe"] = "Aoe"
    filter: TargetFilter = TargetFilter.ENEMY
    condition: Condition = Field(default_factory=Always)
    effect: Effect

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.effect)


class DelayedEffect(_EffectNode):
    """Runs ``effect`` once ``delay`` units of model time have elapsed."""

    type: Literal["Delayed"] = "Delayed"
    delay: float = Field(ge=0)
    effect: Effect

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.effect)


class TimeBombEffect(_EffectNode):
    """Like ``Delayed``, but aimed at a slot rather than a unit.

    When it goes off, the target is whichever unit stands in the slot the
    original target occupied when the bomb was planted.  An empty slot
    defuses the bomb.
    """

    type: Literal["TimeBomb"] = "TimeBomb"
    delay: float = Field(ge=0)
    effect: Effect

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.effect)


# ---------------------------------------------------------------------------
# Model mutation
# ---------------------------------------------------------------------------

class DamageEffect(_EffectNode):
    type: Literal["Damage"] = "Damage"
    who: Who = Who.TARGET
    value: Expression
    types: list[str] = Field(default_factory=list)
    on_injure: Optional[Effect] = None
    """Queued after damage lands, with var ``damage_dealt`` bound."""

    on_kill: Optional[Effect] = None
    """Queued when this hit takes the unit from positive hp to zero or less."""

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        if self.on_injure is not None:
            visit(self.on_injure)
        if self.on_kill is not None:
            visit(self.on_kill)


class HealEffect(_EffectNode):
    type: Literal["Heal"] = "Heal"
    who: Who = Who.TARGET
    value: Expression


class KillEffect(_EffectNode):
    type: Literal["Kill"] = "Kill"
    who: Who = Who.TARGET


class ChangeStatEffect(_EffectNode):
    """Sets a stat to ``value``.

    A permanent change is also written into the unit's cached base copy.
    """

    type: Literal["ChangeStat"] = "ChangeStat"
    who: Who = Who.OWNER
    stat: UnitStat
    value: Expression
    permanent: bool = False


class AddVarEffect(_EffectNode):
    """Writes into the var bag of the status the context came from."""

    type: Literal["AddVar"] = "AddVar"
    name: str
    value: Expression


class AddGlobalVarEffect(_EffectNode):
    type: Literal["AddGlobalVar"] = "AddGlobalVar"
    name: str
    value: Expression


class AttachStatusEffect(_EffectNode):
    type: Literal["AttachStatus"] = "AttachStatus"
    who: Who = Who.TARGET
    status: str
    charges: Expression = Field(default_factory=lambda: Const(value=1))


class RemoveStatusEffect(_EffectNode):
    type: Literal["RemoveStatus"] = "RemoveStatus"
    who: Who = Who.TARGET
    status: str


class SpawnEffect(_EffectNode):
    """Creates a unit from ``template`` next to the unit bound to ``who``.

    ``then`` runs with the new unit bound as the target.
    """

    type: Literal["Spawn"] = "Spawn"
    template: str
    who: Who = Who.OWNER
    offset: int = 1
    flip_faction: bool = False
    then: Effect = Field(default_factory=NoopEffect)

    def walk_children(self, visit: Callable[[Effect], None]) -> None:
        visit(self.then)


class CustomTriggerEffect(_EffectNode):
    """Raises a custom event that ``Custom`` triggers can react to."""

    type: Literal["CustomTrigger"] = "CustomTrigger"
    name: str
    who: Who = Who.OWNER


# ---------------------------------------------------------------------------
# Presentation
# ---------------------------------------------------------------------------

class MessageEffect(_EffectNode):
    type: Literal["Message"] = "Message"
    who: Who = Who.TARGET
    text: Expression


class VisualEffect(_EffectNode):
    type: Literal["Visual"] = "Visual"
    who: Who = Who.TARGET
    name: str
    duration: float = Field(default=0.0, ge=0)


Effect = Annotated[
    Union[
        NoopEffect,
        ListEffect,
        RepeatEffect,
        RandomEffect,
        IfEffect,
        ChangeTargetEffect,
        ChangeContextEffect,
        AoeEffect,
        DelayedEffect,
        TimeBombEffect,
        DamageEffect,
        HealEffect,
        KillEffect,
        ChangeStatEffect,
        AddVarEffect,
        AddGlobalVarEffect,
        AttachStatusEffect,
        RemoveStatusEffect,
        SpawnEffect,
        CustomTriggerEffect,
        MessageEffect,
        VisualEffect,
    ],
    Field(discriminator="type"),
]

EFFECT_TYPES: tuple[type[_EffectNode], ...] = (
    NoopEffect,
    ListEffect,
    RepeatEffect,
    RandomEffect,
    IfEffect,
    ChangeTargetEffect,
    ChangeContextEffect,
    AoeEffect,
    DelayedEffect,
    TimeBombEffect,
    DamageEffect,
    HealEffect,
    KillEffect,
    ChangeStatEffect,
    AddVarEffect,
    AddGlobalVarEffect,
    AttachStatusEffect,
    RemoveStatusEffect,
    SpawnEffect,
    CustomTriggerEffect,
    MessageEffect,
    VisualEffect,
)
"""Every concrete variant, in declaration order."""

for _cls in (*EFFECT_TYPES, WeightedEffect):
    _cls.model_rebuild()


def walk(effect: Effect, visit: Callable[[Effect], None]) -> None:
    """Visit every node of *effect*'s tree, children before their parent."""
    effect.walk_children(lambda child: walk(child, visit))
    visit(effect)
