"""Modifier pass -- structural rewrites of effect trees before a battle.

A modifier rewrites matching nodes in place; it keeps no state and does
not remember having run.  Applying the same modifier twice compounds it,
so callers apply each bonus exactly once, at team assembly time, before
any reaction fires.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable, Sequence

from effect_engine.ir.effects import DamageEffect, Effect, HealEffect, walk
from effect_engine.ir.expressions import scaled
from effect_engine.ir.modifiers import HouseBonus, Modifier, StrengthModifier
from effect_engine.ir.units import UnitTemplate

logger = logging.getLogger(__name__)


def apply_modifier(modifier: Modifier, effect: Effect) -> Effect:
    """Rewrite every node of *effect* that *modifier* matches.

    The tree is mutated in place and its root is returned for chaining.
    """
    target_type = DamageEffect if isinstance(modifier, StrengthModifier) else HealEffect

    def visit(node: Effect) -> None:
        if isinstance(node, target_type):
            node.value = scaled(node.value, modifier.multiplier, modifier.add)

    walk(effect, visit)
    return effect


def apply_modifiers(modifiers: Iterable[Modifier], effect: Effect) -> Effect:
    for modifier in modifiers:
        apply_modifier(modifier, effect)
    return effect


def apply_to_template(modifier: Modifier, template: UnitTemplate) -> UnitTemplate:
    """Rewrite a template's action and every reaction effect in place."""
    apply_modifier(modifier, template.action)
    for reaction in template.reactions:
        for effect in reaction.effects:
            apply_modifier(modifier, effect)
    return template


def active_bonuses(templates: Sequence[UnitTemplate], bonuses: Sequence[HouseBonus]) -> list[HouseBonus]:
    """Bonuses whose house is fielded by at least ``min_units`` of *templates*."""
    houses = Counter(t.house for t in templates if t.house is not None)
    return [bonus for bonus in bonuses if houses[bonus.house] >= bonus.min_units]


def apply_house_bonuses(
    templates: Sequence[UnitTemplate],
    bonuses: Sequence[HouseBonus],
) -> list[UnitTemplate]:
    """Return rewritten copies of *templates* with every active bonus applied.

    The inputs are left untouched, so shared content can be reused across
    battles without compounding.
    """
    active = active_bonuses(templates, bonuses)
    team = [t.model_copy(deep=True) for t in templates]
    for bonus in active:
        logger.debug("House bonus %s active (%d modifier(s))", bonus.house, len(bonus.modifiers))
        for template in team:
            if template.house != bonus.house:
                continue
            for modifier in bonus.modifiers:
                apply_to_template(modifier, template)
    return team
