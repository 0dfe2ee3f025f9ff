"""Seedable uniform sampling for case allocation."""

from __future__ import annotations

import random
from collections.abc import Collection


class CaseSampler:
    """Uniform without-replacement selection with an explicit, seedable generator.

    Candidates are sorted before sampling so the same seed yields the same
    picks regardless of the order the store returned them in.
    """

    def __init__(self, seed: int | None = None) -> None:
        self._rng = random.Random(seed)

    def choose(self, candidates: Collection[str], count: int) -> list[str]:
        if count < 0:
            raise ValueError("count must be non-negative")
        pool = sorted(set(candidates))
        return self._rng.sample(pool, min(count, len(pool)))

    def pick_target(self, low: int, high: int) -> int:
        """Inclusive on both ends."""
        return self._rng.randint(low, high)
