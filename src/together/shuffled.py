"""Randomized sequence of worker identifiers."""

import random
from typing import Iterator, List, Optional


class Shuffled:
    """
    Integers ``0..size-1`` in a random order.

    Each call to ``iter()`` reshuffles, so two iterations of the same instance
    usually produce different orders.  Only the order in which tasks are handed
    to the pool depends on it; every task still waits for the release gate.
    """

    def __init__(self, size: int, rng: Optional[random.Random] = None):
        if size < 0:
            raise ValueError(f"size must not be negative, got {size}")
        self.size = size
        self._rng = rng

    def __iter__(self) -> Iterator[int]:
        items: List[int] = list(range(self.size))
        if self._rng is None:
            random.shuffle(items)
        else:
            self._rng.shuffle(items)
        return iter(items)

    def __len__(self) -> int:
        return self.size
