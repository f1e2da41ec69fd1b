"""
Market Scoring Engine v1.0

Deterministic comparable-market score for residential listings:
six sub-metrics (price positioning, growth, time on market, street
turnover, competition, 90-day band) combined with coverage discounting
and blended with a buyer preference score into a 0-999 composite.
"""

from .config import Band, ScoringConfig, SCORING_CONFIG_V1, DEFAULT_SCORING_CONFIG
from .primitives import wins, lin_good, logistic, shrink, weighted_avg
from .models import (
    ComparableSet,
    ScoringInput,
    SubMetricScores,
    ScoreBreakdown,
    MarketFit,
    CompositeScore,
)
from .comparables import ComparableSetBuilder, banded_average_sold_price, price_per_area
from .engine import MarketScoringEngine
from .preferences import PreferenceEngine, PreferenceFit
from .composite import CompositeScorer, score

__all__ = [
    # Configuration
    "Band",
    "ScoringConfig",
    "SCORING_CONFIG_V1",
    "DEFAULT_SCORING_CONFIG",
    # Primitives
    "wins",
    "lin_good",
    "logistic",
    "shrink",
    "weighted_avg",
    # Models
    "ComparableSet",
    "ScoringInput",
    "SubMetricScores",
    "ScoreBreakdown",
    "MarketFit",
    "CompositeScore",
    # Engines
    "ComparableSetBuilder",
    "price_per_area",
    "banded_average_sold_price",
    "MarketScoringEngine",
    "PreferenceEngine",
    "PreferenceFit",
    "CompositeScorer",
    "score",
]

__version__ = "1.0"
