"""Intermediate Representation (IR) of battle content.

Expressions, conditions, effect trees, triggers, modifiers, statuses and
unit templates are Pydantic models that serialise cleanly to/from JSON.
:class:`ContentSet` is the top-level document handed to the content
registry of the simulator.
"""

from .conditions import Condition, CompareOp
from .content_set import ContentSet, collect_status_refs, collect_template_refs
from .effects import EFFECT_TYPES, Effect, walk
from .expressions import ArithmeticOp, Expression, UnitStat, VarValue
from .modifiers import HealingModifier, HouseBonus, Modifier, StrengthModifier
from .roles import Faction, TargetFilter, Who
from .status_effects import StatusDefinition
from .triggers import Reaction, Trigger
from .units import UnitTemplate

__all__ = [
    # conditions
    "Condition",
    "CompareOp",
    # content_set
    "ContentSet",
    "collect_status_refs",
    "collect_template_refs",
    # effects
    "EFFECT_TYPES",
    "Effect",
    "walk",
    # expressions
    "ArithmeticOp",
    "Expression",
    "UnitStat",
    "VarValue",
    # modifiers
    "HealingModifier",
    "HouseBonus",
    "Modifier",
    "StrengthModifier",
    # roles
    "Faction",
    "TargetFilter",
    "Who",
    # status_effects
    "StatusDefinition",
    # triggers
    "Reaction",
    "Trigger",
    # units
    "UnitTemplate",
]
