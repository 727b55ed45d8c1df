"""Engine configuration.

Loaded from JSON and validated strictly, like every other content
document: unknown keys are rejected.
"""

from __future__ import annotations

import json
from pathlib import Path

from pydantic import BaseModel, Field, ValidationError

from effect_engine.errors import ContentError
from effect_engine.sim.triggers import FireMode


class EngineConfig(BaseModel):
    """Tunables for the driver and the batch runner.

    Parameters
    ----------
    fire_mode:
        Whether the first or every matching reaction of one owner fires.
    max_steps_per_drain:
        Items one drain cycle may process before it is aborted as runaway.
    seed:
        Default battle seed.
    max_turns:
        Turn limit for the combat simulator; the battle is a draw after it.
    """

    model_config = {"extra": "forbid"}

    fire_mode: FireMode = FireMode.ALL
    max_steps_per_drain: int = Field(default=10_000, gt=0)
    seed: int = 0
    max_turns: int = Field(default=200, gt=0)


def load_config(path: str | Path) -> EngineConfig:
    """Read an :class:`EngineConfig` from a JSON file.

    Raises
    ------
    ContentError
        If the file is not valid JSON or does not validate.
    """
    path = Path(path)
    try:
        with open(path) as f:
            data = json.load(f)
        return EngineConfig.model_validate(data)
    except (json.JSONDecodeError, ValidationError) as exc:
        raise ContentError(f"Invalid engine config {path}: {exc}") from exc
