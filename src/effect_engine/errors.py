"""Exception hierarchy shared by the IR and the simulator.

Resolution and evaluation errors are raised while interpreting a single
queued effect and are contained by the drain loop.  Content errors are
raised while loading data and are meant to stop the caller before any
battle starts.
"""

from __future__ import annotations


class EngineError(Exception):
    """Base class for every error raised by ``effect_engine``."""


class ResolutionError(EngineError, LookupError):
    """A role, unit, status or template could not be found."""


class EvaluationError(EngineError, ValueError):
    """An expression could not be evaluated (unbound var, bad operand, ...)."""


class ContentError(EngineError, ValueError):
    """Malformed or inconsistent content, detected at load time."""


class RunawayEffectError(EngineError, RuntimeError):
    """A drain cycle exceeded ``EngineConfig.max_steps_per_drain``."""
