"""
Descriptive statistics shared by the aggregator and the scoring engine.
"""

import math
from typing import Sequence


def round_half_up(value: float) -> int:
    """Round to the nearest integer, halves away from zero for positives."""
    return int(math.floor(value + 0.5))


def mean(values: Sequence[float]) -> float:
    """Arithmetic mean. Caller guarantees a non-empty sample."""
    if not values:
        raise ValueError("mean of empty sample")
    return sum(values) / len(values)


def upper_median(values: Sequence[float]) -> float:
    """
    Median using the upper-middle element for even-length samples.

    Returns sorted(values)[n // 2]; the two middle elements are NOT
    averaged.
    """
    if not values:
        raise ValueError("median of empty sample")
    ordered = sorted(values)
    return ordered[len(ordered) // 2]
