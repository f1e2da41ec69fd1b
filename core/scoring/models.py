"""
Data models for the market scoring engine.

ScoringInput is the single-use input aggregate for one request;
CompositeScore is the auditable output.
"""

import math
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, List, Mapping, Optional, Sequence, Tuple


def _clean_samples(values: Sequence[float]) -> Tuple[float, ...]:
    """Keep positive, finite price-per-area samples."""
    cleaned = []
    for v in values or ():
        if isinstance(v, bool):
            continue
        try:
            number = float(v)
        except (TypeError, ValueError):
            continue
        if math.isfinite(number) and number > 0:
            cleaned.append(number)
    return tuple(cleaned)


@dataclass(frozen=True)
class ComparableSet:
    """
    Price-per-area samples for a subject property.

    Each sequence is unordered and may be empty; an empty sequence
    excludes the sub-metric that needs it. Non-positive and non-finite
    samples are discarded on construction.
    """
    listed: Tuple[float, ...] = ()
    sold_30d: Tuple[float, ...] = ()
    sold_90d_band: Tuple[float, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "listed", _clean_samples(self.listed))
        object.__setattr__(self, "sold_30d", _clean_samples(self.sold_30d))
        object.__setattr__(self, "sold_90d_band", _clean_samples(self.sold_90d_band))

    def to_dict(self) -> dict:
        return {
            "listed": list(self.listed),
            "sold_30d": list(self.sold_30d),
            "sold_90d_band": list(self.sold_90d_band),
        }


# Demonstration values used when no real comparables are available.
# Inputs built from them are flagged synthetic and earn no coverage.
SYNTHETIC_LISTED_COMPS = (3800, 3900, 4000, 3850, 3950)
SYNTHETIC_SOLD_30D_COMPS = (3700, 3750, 3800, 3850)
SYNTHETIC_SOLD_90D_BAND = (3600, 3700, 3800, 3900, 4000)
SYNTHETIC_ROAD_SALES_12M = 3
SYNTHETIC_TOTAL_ROAD_PROPERTIES = 50
SYNTHETIC_ACTIVE_COMPS = 2
SYNTHETIC_ROLLING_MEDIAN_ACTIVE = 3
SYNTHETIC_TURNOVER_PRIOR = 0.08
SYNTHETIC_AREA_CAGR = 0.021


@dataclass(frozen=True)
class ScoringInput:
    """
    Everything the engine needs to score one property.

    None marks an input as unavailable. The engine never fills gaps by
    fetching; missing inputs are masked out and reduce coverage.

    Invariants:
        - ask_price is positive and finite
        - postcode_turnover_prior, when given, is within [0, 1]
        - ScoringInput is immutable (frozen dataclass, read-only mappings)
    """
    ask_price: float
    living_area: float
    days_on_market: Optional[float] = None
    comparables: ComparableSet = field(default_factory=ComparableSet)

    # Street turnover
    road_sales_12m: Optional[int] = None
    total_road_properties: Optional[int] = None
    postcode_turnover_prior: Optional[float] = None

    # Competition
    active_comps: Optional[int] = None
    rolling_median_active_comps: Optional[float] = None

    # Growth
    property_cagr: Optional[float] = None
    area_cagr: Optional[float] = None

    # Buyer preferences
    preference_weights: Mapping[str, Any] = field(default_factory=dict)
    feature_matches: Mapping[str, Any] = field(default_factory=dict)

    synthetic: bool = False

    def __post_init__(self) -> None:
        """Validate constraints and freeze mutable containers."""
        if not math.isfinite(self.ask_price) or self.ask_price <= 0:
            raise ValueError("ask_price must be a positive number")
        if not math.isfinite(self.living_area):
            raise ValueError("living_area must be finite")
        if self.postcode_turnover_prior is not None and not (
            0 <= self.postcode_turnover_prior <= 1
        ):
            raise ValueError("postcode_turnover_prior must be within [0, 1]")

        object.__setattr__(
            self, "preference_weights", MappingProxyType(dict(self.preference_weights or {}))
        )
        object.__setattr__(
            self, "feature_matches", MappingProxyType(dict(self.feature_matches or {}))
        )

    @classmethod
    def create_synthetic(
        cls,
        ask_price: float,
        living_area: float,
        days_on_market: Optional[float] = None,
        property_cagr: Optional[float] = None,
        preference_weights: Optional[Mapping[str, Any]] = None,
        feature_matches: Optional[Mapping[str, Any]] = None,
    ) -> "ScoringInput":
        """
        Build an input from fixed demonstration market data.

        Only the subject's own facts come from the caller. The result is
        marked synthetic so it is never mistaken for sparse real data.
        """
        return cls(
            ask_price=ask_price,
            living_area=living_area,
            days_on_market=days_on_market,
            comparables=ComparableSet(
                listed=SYNTHETIC_LISTED_COMPS,
                sold_30d=SYNTHETIC_SOLD_30D_COMPS,
                sold_90d_band=SYNTHETIC_SOLD_90D_BAND,
            ),
            road_sales_12m=SYNTHETIC_ROAD_SALES_12M,
            total_road_properties=SYNTHETIC_TOTAL_ROAD_PROPERTIES,
            postcode_turnover_prior=SYNTHETIC_TURNOVER_PRIOR,
            active_comps=SYNTHETIC_ACTIVE_COMPS,
            rolling_median_active_comps=SYNTHETIC_ROLLING_MEDIAN_ACTIVE,
            property_cagr=property_cagr,
            area_cagr=SYNTHETIC_AREA_CAGR,
            preference_weights=preference_weights or {},
            feature_matches=feature_matches or {},
            synthetic=True,
        )


@dataclass(frozen=True)
class SubMetricScores:
    """Sub-metrics s1..s6; None means excluded for missing inputs."""
    s1: Optional[float] = None
    s2: Optional[float] = None
    s3: Optional[float] = None
    s4: Optional[float] = None
    s5: Optional[float] = None
    s6: Optional[float] = None

    def values(self) -> Tuple[Optional[float], ...]:
        return (self.s1, self.s2, self.s3, self.s4, self.s5, self.s6)

    @property
    def mask(self) -> Tuple[bool, ...]:
        return tuple(v is not None for v in self.values())

    def to_dict(self) -> dict:
        return {
            "s1": self.s1,
            "s2": self.s2,
            "s3": self.s3,
            "s4": self.s4,
            "s5": self.s5,
            "s6": self.s6,
        }


@dataclass(frozen=True)
class ScoreBreakdown:
    """Intermediate values behind the sub-metrics, for audit."""
    price_per_sqm: float
    listed_mean: Optional[float] = None
    sold_30d_mean: Optional[float] = None
    sold_90d_median: Optional[float] = None
    days_on_market: Optional[float] = None
    road_turnover: Optional[float] = None
    active_comps: Optional[int] = None
    property_cagr: Optional[float] = None
    area_cagr: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "price_per_sqm": self.price_per_sqm,
            "listed_mean": self.listed_mean,
            "sold_30d_mean": self.sold_30d_mean,
            "sold_90d_median": self.sold_90d_median,
            "days_on_market": self.days_on_market,
            "road_turnover": self.road_turnover,
            "active_comps": self.active_comps,
            "property_cagr": self.property_cagr,
            "area_cagr": self.area_cagr,
        }


@dataclass(frozen=True)
class MarketFit:
    """Output of the scoring engine before preference blending."""
    metrics: SubMetricScores
    market_score: float  # M
    coverage: float  # C
    adjusted_score: float  # M_adj
    breakdown: ScoreBreakdown


@dataclass
class CompositeScore:
    """
    Final score and everything needed to explain it.

    overall, investment and personal_fit are integers in [0, 999].
    """
    overall: int
    investment: int
    personal_fit: int

    preference_score: float  # P
    market_score: float  # M
    adjusted_market_score: float  # M_adj
    coverage: float  # C

    metrics: SubMetricScores
    breakdown: ScoreBreakdown

    declared_features: List[str] = field(default_factory=list)
    matched_features: List[str] = field(default_factory=list)
    ignored_features: List[str] = field(default_factory=list)

    synthetic: bool = False
    config_version: str = ""
    notes: List[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "scores": {
                "overall": self.overall,
                "investment": self.investment,
                "personal_fit": self.personal_fit,
            },
            "metrics": {
                **self.metrics.to_dict(),
                "P": self.preference_score,
                "M": self.market_score,
                "M_adjusted": self.adjusted_market_score,
                "coverage": self.coverage,
            },
            "breakdown": self.breakdown.to_dict(),
            "preferences": {
                "declared": list(self.declared_features),
                "matched": list(self.matched_features),
                "ignored": list(self.ignored_features),
            },
            "synthetic": self.synthetic,
            "config_version": self.config_version,
            "notes": list(self.notes),
        }
