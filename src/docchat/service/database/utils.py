"""Utility functions for vector store operations."""

import math
from collections.abc import Iterator, Sequence
from typing import TypeVar

T = TypeVar("T")


def l2_normalize(vector: list[float]) -> list[float]:
    """Scale a vector to unit length. Zero vectors are returned unchanged."""
    norm = math.sqrt(sum(v * v for v in vector))
    if norm == 0:
        return list(vector)
    return [v / norm for v in vector]


def batched(items: Sequence[T], size: int) -> Iterator[Sequence[T]]:
    """Yield consecutive slices of at most `size` items."""
    if size <= 0:
        raise ValueError(f"batch size must be positive, got {size}")
    for start in range(0, len(items), size):
        yield items[start:start + size]
