"""
HomeLens Market Scoring Engine - Core Logic

Architecture Version: 1.0

This package provides the market-comparison scoring pipeline:
1. Sale Record Normalization (Price Paid Data rows -> SaleRecord)
2. Market Aggregation (postcode prefix / property type / year)
3. Comparable Sets (listed, 30-day sold, 90-day sold band per sqm)
4. Market Scoring (six sub-metrics, coverage discount)
5. Preference Scoring (buyer feature importances)
6. Composite Score (0-999 blend with auditable breakdown)
"""

from .cache import MarketDataCache

# Land Registry market data
from .land_registry import (
    PropertyType,
    SaleRecord,
    MarketSnapshot,
    SaleRecordNormalizer,
    NormalizationReport,
    LandRegistryService,
    matches_postcode,
    within_rolling_window,
    group_by_year,
    aggregate,
    street_sales_count,
    compound_annual_growth_rate,
)

# Scoring engine
from .scoring import (
    ComparableSet,
    ComparableSetBuilder,
    ScoringInput,
    SubMetricScores,
    CompositeScore,
    ScoringConfig,
    SCORING_CONFIG_V1,
    MarketScoringEngine,
    PreferenceEngine,
    CompositeScorer,
    score,
)

# Property Analyzer - integrated pipeline
from .property_analyzer import PropertyAnalyzer, PropertyAnalysis, SubjectListing

__all__ = [
    "MarketDataCache",
    # Land Registry
    "PropertyType",
    "SaleRecord",
    "MarketSnapshot",
    "SaleRecordNormalizer",
    "NormalizationReport",
    "LandRegistryService",
    "matches_postcode",
    "within_rolling_window",
    "group_by_year",
    "aggregate",
    "street_sales_count",
    "compound_annual_growth_rate",
    # Scoring
    "ComparableSet",
    "ComparableSetBuilder",
    "ScoringInput",
    "SubMetricScores",
    "CompositeScore",
    "ScoringConfig",
    "SCORING_CONFIG_V1",
    "MarketScoringEngine",
    "PreferenceEngine",
    "CompositeScorer",
    "score",
    # Property Analyzer
    "PropertyAnalyzer",
    "PropertyAnalysis",
    "SubjectListing",
]
