"""
Scoring primitives.

Downstream bounds assume these exact definitions:
- wins(v, lo, hi)        clamp v to [lo, hi]
- lin_good(v, lo, hi)    0 at or below lo, 1 at or above hi, linear between
- logistic(x)            1 / (1 + e^-x)
- shrink(t, p, n, lam)   w*t + (1-w)*p with w = n / (n + lam)
- weighted_avg           masked weighted mean
"""

import math
from typing import Optional, Sequence


def wins(value: float, low: float, high: float) -> float:
    """Winsorize: clamp value to [low, high]."""
    if high < low:
        raise ValueError(f"wins bounds inverted: [{low}, {high}]")
    return max(low, min(high, value))


def lin_good(value: float, low: float, high: float) -> float:
    """Linear ramp from 0 at `low` to 1 at `high`."""
    if not high > low:
        raise ValueError(f"lin_good requires high > low, got [{low}, {high}]")
    if value <= low:
        return 0.0
    if value >= high:
        return 1.0
    return (value - low) / (high - low)


def logistic(value: float) -> float:
    """Standard logistic squashing."""
    # Split on sign so exp never overflows
    if value >= 0:
        return 1.0 / (1.0 + math.exp(-value))
    z = math.exp(value)
    return z / (1.0 + z)


def shrink(theta: float, prior: float, n: float, lam: float) -> float:
    """
    Empirical-Bayes shrinkage of an observed rate toward a prior.

    With n = 0 the prior is returned; as n grows the observed rate
    dominates.
    """
    if lam <= 0:
        raise ValueError("shrinkage pseudo-count must be positive")
    if n < 0:
        raise ValueError("sample size cannot be negative")
    weight = n / (n + lam)
    return weight * theta + (1 - weight) * prior


def weighted_avg(
    values: Sequence[float],
    weights: Sequence[float],
    available_mask: Optional[Sequence[bool]] = None,
) -> float:
    """
    Weighted aggregate of values.

    With a mask, unavailable entries are dropped and the result is
    sum(value * weight) / sum(weight) over the available entries. Without
    a mask the plain sum(value * weight) is returned.

    Raises:
        ValueError: on length mismatches, or if the mask leaves no weight
    """
    if len(values) != len(weights):
        raise ValueError(
            f"values and weights differ in length ({len(values)} != {len(weights)})"
        )
    if available_mask is None:
        return sum(v * w for v, w in zip(values, weights))

    if len(available_mask) != len(values):
        raise ValueError(
            f"mask and values differ in length ({len(available_mask)} != {len(values)})"
        )
    pairs = [(v, w) for v, w, ok in zip(values, weights, available_mask) if ok]
    total_weight = sum(w for _, w in pairs)
    if total_weight <= 0:
        raise ValueError("no available weight to average over")
    return sum(v * w for v, w in pairs) / total_weight
