"""
Adaptive card selection for practice sessions
"""

import logging
import random
from collections.abc import Callable
from typing import Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def selection_weight(weakness: int) -> int:
    """Weaker items weigh more, every item keeps a weight of at least 1"""
    return max(1, 1 + 2 * weakness)


def weighted_random_index(weights: list[int], rng: random.Random) -> int:
    """
    Pick an index with probability proportional to its weight

    Args:
        weights: Positive weight per candidate
        rng: Random source

    Returns:
        Index of the selected candidate
    """
    if not weights:
        raise ValueError("Cannot select from an empty pool")

    total = sum(weights)
    point = rng.random() * total
    running = 0
    for index, weight in enumerate(weights):
        running += weight
        if running > point:
            return index
    return len(weights) - 1


class WeightedSampler(Generic[T]):
    """Weighted sampling without replacement, weakness-biased"""

    def __init__(
        self,
        items: list[T],
        weakness_fn: Callable[[T], int],
        rng: random.Random | None = None,
    ):
        self.pool: list[T] = list(items)
        self.weakness_fn = weakness_fn
        self.rng = rng or random.Random()

    def draw(self) -> T | None:
        """Remove and return the next item, weights computed at draw time"""
        if not self.pool:
            return None
        weights = [selection_weight(self.weakness_fn(item)) for item in self.pool]
        index = weighted_random_index(weights, self.rng)
        return self.pool.pop(index)

    def return_item(self, item: T) -> None:
        """Put a missed item back and reshuffle the remaining pool"""
        self.pool.append(item)
        self.rng.shuffle(self.pool)

    def __len__(self) -> int:
        return len(self.pool)


class UniformSampler(Generic[T]):
    """Uniform sampling without replacement, shuffled once up front"""

    def __init__(self, items: list[T], rng: random.Random | None = None):
        self.rng = rng or random.Random()
        self.pool: list[T] = list(items)
        self.rng.shuffle(self.pool)

    def draw(self) -> T | None:
        if not self.pool:
            return None
        return self.pool.pop()

    def return_item(self, item: T) -> None:
        """Missed items are not served again in uniform sessions"""

    def __len__(self) -> int:
        return len(self.pool)
