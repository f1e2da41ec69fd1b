"""
Scoring configuration tables.

Every weight, bound and fallback used by the scoring engine lives here as
a named, versioned constant. Changing a weight means editing one table
and bumping its version.
"""

from dataclasses import dataclass
from typing import Tuple


WEIGHT_TOLERANCE = 1e-9


@dataclass(frozen=True)
class Band:
    """A (low, high) interval used by wins / lin_good."""
    low: float
    high: float

    def __post_init__(self) -> None:
        if not self.high > self.low:
            raise ValueError(f"Band high ({self.high}) must exceed low ({self.low})")


@dataclass(frozen=True)
class ScoringConfig:
    """
    Complete parameter set for one version of the market score.

    Invariants:
        - metric_weights has one non-negative weight per sub-metric
        - metric_weights sums to 1
        - market_weight + preference_weight sums to 1
    """
    version: str

    # Aggregate weights for s1..s6
    metric_weights: Tuple[float, float, float, float, float, float]

    # s1: price positioning
    sold_share: float
    listed_share: float
    ratio_clamp: Band
    price_position_band: Band

    # s2: growth
    growth_delta_clamp: Band
    growth_scale: float
    fallback_property_cagr: float
    fallback_area_cagr: float

    # s3: time on market
    grace_days: float
    decay_days: float

    # s4: street turnover
    turnover_pseudo_count: float
    turnover_clamp: Band
    turnover_band: Band
    fallback_turnover_prior: float

    # s5: competition
    competition_offset: float
    competition_band: Band

    # s6: 90-day band
    recent_sold_band: Band

    # Coverage and blending
    coverage_floor: float
    neutral_market_score: float
    neutral_preference_score: float
    market_weight: float
    preference_weight: float
    score_scale: int

    def __post_init__(self) -> None:
        """Validate the table at construction time."""
        if len(self.metric_weights) != 6:
            raise ValueError("metric_weights must have exactly 6 entries")
        if any(w < 0 for w in self.metric_weights):
            raise ValueError("metric_weights cannot be negative")
        if abs(sum(self.metric_weights) - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError("metric_weights must sum to 1")
        if abs(self.sold_share + self.listed_share - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError("sold_share + listed_share must sum to 1")
        if abs(self.market_weight + self.preference_weight - 1.0) > WEIGHT_TOLERANCE:
            raise ValueError("market_weight + preference_weight must sum to 1")
        if not 0 <= self.coverage_floor <= 1:
            raise ValueError("coverage_floor must be within [0, 1]")
        if self.decay_days <= 0 or self.growth_scale <= 0:
            raise ValueError("decay_days and growth_scale must be positive")
        if self.turnover_pseudo_count <= 0:
            raise ValueError("turnover_pseudo_count must be positive")


SCORING_CONFIG_V1 = ScoringConfig(
    version="1.0",
    metric_weights=(0.30, 0.10, 0.10, 0.15, 0.10, 0.25),
    sold_share=0.6,
    listed_share=0.4,
    ratio_clamp=Band(0.6, 1.6),
    price_position_band=Band(0.85, 1.15),
    growth_delta_clamp=Band(-0.05, 0.05),
    growth_scale=0.01,
    fallback_property_cagr=0.02,
    fallback_area_cagr=0.021,
    grace_days=7,
    decay_days=45,
    turnover_pseudo_count=10,
    turnover_clamp=Band(0.0, 0.3),
    turnover_band=Band(0.04, 0.12),
    fallback_turnover_prior=0.08,
    competition_offset=5,
    competition_band=Band(0.6, 1.4),
    recent_sold_band=Band(0.9, 1.1),
    coverage_floor=0.9,
    neutral_market_score=0.5,
    neutral_preference_score=0.5,
    market_weight=0.5,
    preference_weight=0.5,
    score_scale=999,
)

DEFAULT_SCORING_CONFIG = SCORING_CONFIG_V1
