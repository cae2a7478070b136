"""Uniform sampling and shuffling shared by the draw engine and partitioner."""

from __future__ import annotations

import random
from typing import Iterator, Optional, Sequence, TypeVar

T = TypeVar("T")


def pick_uniform(pool: Sequence[T], rng: Optional[random.Random] = None) -> T:
    """Return one element of ``pool`` with every position equally likely."""

    if not pool:
        raise ValueError("cannot pick from an empty pool")
    rng = rng or random.Random()
    return pool[rng.randrange(len(pool))]


def shuffled(items: Sequence[T], rng: Optional[random.Random] = None) -> list[T]:
    """Return a uniformly random permutation of ``items``.

    ``random.Random.shuffle`` is an unbiased Fisher-Yates shuffle; ``items``
    itself is left untouched.
    """

    rng = rng or random.Random()
    result = list(items)
    rng.shuffle(result)
    return result


def rolling_duration(
    low: float, high: float, rng: Optional[random.Random] = None
) -> float:
    """Return a duration uniformly distributed in ``[low, high)``."""

    if high < low:
        raise ValueError("high must not be smaller than low")
    rng = rng or random.Random()
    return low + rng.random() * (high - low)


def display_samples(
    pool: Sequence[T], count: int, rng: Optional[random.Random] = None
) -> Iterator[T]:
    """Lazily yield ``count`` independent uniform samples from ``pool``.

    Values already yielded are not excluded; the sequence only drives the
    rolling display and has no bearing on the winner.
    """

    rng = rng or random.Random()
    snapshot = tuple(pool)
    for _ in range(count):
        yield pick_uniform(snapshot, rng)


__all__ = ["display_samples", "pick_uniform", "rolling_duration", "shuffled"]
