"""Telemetry data models for per-battle statistics.

These lightweight dataclasses capture what is needed to compare teams
and content without storing the whole battle history:

- **BattleTelemetry**: outcome, turns, damage and healing totals, deaths.
- **BatchSummary**: aggregate win rates over many battles.

Both are plain ``dataclass`` instances (not Pydantic models) to keep
collection cheap during batch runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class BattleTelemetry:
    """Stats from a single battle.

    Attributes
    ----------
    seed:
        Battle seed.
    player_team:
        Template names fielded by the player faction, front to back.
    enemy_team:
        Template names fielded by the enemy faction, front to back.
    result:
        ``"win"`` if only player units remain, ``"loss"`` if only enemy
        units remain, ``"draw"`` otherwise.
    turns:
        Number of turns played.
    damage_by_faction:
        Total damage dealt *to* each faction's units.
    healing_by_faction:
        Total hp restored to each faction's units.
    deaths:
        Template names of units that died, in order of death.
    """

    seed: int
    player_team: list[str]
    enemy_team: list[str]
    result: str = "draw"  # "win", "loss" or "draw"
    turns: int = 0
    damage_by_faction: dict[str, int] = field(default_factory=dict)
    healing_by_faction: dict[str, int] = field(default_factory=dict)
    deaths: list[str] = field(default_factory=list)
    survivors: list[str] = field(default_factory=list)


@dataclass
class BatchSummary:
    """Aggregate over a batch of battles."""

    runs: int = 0
    wins: int = 0
    losses: int = 0
    draws: int = 0
    mean_turns: float = 0.0

    @property
    def win_rate(self) -> float:
        return self.wins / self.runs if self.runs else 0.0

    @classmethod
    def from_results(cls, results: list[BattleTelemetry]) -> BatchSummary:
        summary = cls(runs=len(results))
        for result in results:
            if result.result == "win":
                summary.wins += 1
            elif result.result == "loss":
                summary.losses += 1
            else:
                summary.draws += 1
        if results:
            summary.mean_turns = sum(r.turns for r in results) / len(results)
        return summary
