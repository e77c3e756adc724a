"""Deterministic random source for Grim.

Every random decision in a match (shuffles, the coin toss, the
pre-declared trump, bot choices) is drawn from a ``SeededRandom``
built from a string seed.  Independent decisions use independent
sub-streams obtained with :func:`derive`, so replaying a match with the
same seed and the same human inputs reproduces it exactly.
"""

from __future__ import annotations

import random
import uuid
from typing import Sequence, TypeVar

T = TypeVar("T")


def derive(seed: str, *parts: object) -> str:
    """Sub-stream seed, e.g. ``derive("abc", "deal", 3) == "abc_deal_3"``."""
    return "_".join([seed, *(str(p) for p in parts)])


def generate_seed() -> str:
    """Fresh, unpredictable seed for a new match."""
    return uuid.uuid4().hex


class SeededRandom:
    """Reproducible generator driven by a string seed.

    String seeds are hashed by :class:`random.Random` itself (SHA-512),
    so the sequence does not depend on ``PYTHONHASHSEED`` or the process.
    """

    __slots__ = ("seed", "_rng")

    def __init__(self, seed: str) -> None:
        self.seed = seed
        self._rng = random.Random(seed)

    def next(self) -> float:
        """Next float in ``[0, 1)``."""
        return self._rng.random()

    def next_int(self, lo: int, hi: int) -> int:
        """Integer in the inclusive range ``[lo, hi]``."""
        if hi < lo:
            raise ValueError(f"empty range [{lo}, {hi}]")
        return lo + int(self.next() * (hi - lo + 1))

    def next_bool(self) -> bool:
        return self.next() < 0.5

    def shuffle(self, items: Sequence[T]) -> list[T]:
        """Return a shuffled copy (Fisher–Yates); *items* is left untouched."""
        result = list(items)
        for i in range(len(result) - 1, 0, -1):
            j = self.next_int(0, i)
            result[i], result[j] = result[j], result[i]
        return result

    def choice(self, items: Sequence[T]) -> T:
        if not items:
            raise ValueError("cannot choose from an empty sequence")
        return items[self.next_int(0, len(items) - 1)]

    def weighted_choice(self, items: Sequence[T], weights: Sequence[float]) -> T:
        """Pick one of *items* with probability proportional to *weights*."""
        if len(items) != len(weights) or not items:
            raise ValueError("items and weights must be non-empty and equal length")
        total = float(sum(weights))
        if total <= 0:
            raise ValueError("weights must sum to a positive value")
        r = self.next() * total
        acc = 0.0
        for item, w in zip(items, weights):
            acc += w
            if r < acc:
                return item
        return items[-1]
