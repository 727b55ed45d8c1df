"""Seeded random number generator for deterministic battle simulation.

Wraps Python's random.Random so every random decision an effect makes
(target selection, weighted choice) is reproducible from the battle seed.
Independent simulations fork their own streams and never share one.
"""

from __future__ import annotations

import hashlib
import random
from typing import Sequence, TypeVar

T = TypeVar("T")


class GameRNG:
    """Deterministic RNG that can be forked into independent sub-streams.

    Parameters
    ----------
    seed:
        Integer seed for the underlying Mersenne Twister.
    """

    def __init__(self, seed: int) -> None:
        self._seed = seed
        self._rng = random.Random(seed)

    @property
    def seed(self) -> int:
        return self._seed

    def random_choice(self, seq: Sequence[T]) -> T:
        """Return a uniformly random element from a non-empty sequence."""
        return self._rng.choice(seq)

    def weighted_choice(self, seq: Sequence[T], weights: Sequence[float]) -> T:
        """Return an element of *seq* with probability proportional to *weights*."""
        return self._rng.choices(seq, weights=weights, k=1)[0]

    def fork(self, name: str) -> GameRNG:
        """Create a child RNG whose seed is derived from this seed and *name*.

        Forking with the same *name* always yields the same child stream,
        so e.g. ``"battle"`` and ``"teams"`` never perturb each other.
        """
        digest = hashlib.sha256(f"{self._seed}:{name}".encode()).digest()
        child_seed = int.from_bytes(digest[:8], "big")
        return GameRNG(child_seed)

    def __repr__(self) -> str:
        return f"GameRNG(seed={self._seed})"
