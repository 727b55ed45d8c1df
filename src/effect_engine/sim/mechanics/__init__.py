"""Evaluators and model-mutation primitives used by the effect interpreter.

Usage::

    from effect_engine.sim.mechanics import (
        evaluate, evaluate_int, evaluate_or, evaluate_condition,
        deal_damage, heal_unit, kill_unit,
        attach_status, remove_status, spawn_unit,
        choose_new_target, matching_units,
    )
"""

# -- expressions -------------------------------------------------------------
from .expressions import (
    add_values,
    evaluate,
    evaluate_int,
    evaluate_number,
    evaluate_or,
    format_value,
)

# -- conditions --------------------------------------------------------------
from .conditions import evaluate_condition

# -- damage ------------------------------------------------------------------
from .damage import DamageResult, deal_damage, heal_unit, kill_unit

# -- status effects ----------------------------------------------------------
from .status_effects import attach_status, get_status_charges, remove_status

# -- spawning ----------------------------------------------------------------
from .spawning import spawn_unit

# -- targeting ---------------------------------------------------------------
from .targeting import choose_new_target, matching_units

__all__ = [
    # expressions
    "add_values",
    "evaluate",
    "evaluate_int",
    "evaluate_number",
    "evaluate_or",
    "format_value",
    # conditions
    "evaluate_condition",
    # damage
    "DamageResult",
    "deal_damage",
    "heal_unit",
    "kill_unit",
    # status effects
    "attach_status",
    "remove_status",
    "get_status_charges",
    # spawning
    "spawn_unit",
    # targeting
    "choose_new_target",
    "matching_units",
]
