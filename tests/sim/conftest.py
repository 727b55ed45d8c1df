"""Shared fixtures and helpers for simulation tests."""

from __future__ import annotations

import pytest

from effect_engine.sim.config import EngineConfig
from effect_engine.sim.content.registry import ContentRegistry
from effect_engine.sim.runner import BatchRunner
from effect_engine.sim.telemetry import BattleTelemetry


@pytest.fixture(scope="module")
def registry() -> ContentRegistry:
    """Module-scoped registry with the sample content loaded once."""
    reg = ContentRegistry()
    reg.load_file()
    return reg


def run_experiment(
    registry: ContentRegistry,
    player_team: list[str],
    enemy_team: list[str],
    n_runs: int = 20,
    base_seed: int = 42,
) -> list[BattleTelemetry]:
    """Run a batch of battles and return telemetry results."""
    runner = BatchRunner(registry, EngineConfig(max_turns=50))
    config = {"player_team": player_team, "enemy_team": enemy_team}
    return runner.run_batch(n_runs, config, base_seed=base_seed)
