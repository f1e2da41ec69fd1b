"""
Land Registry Market Data

Sale record normalization and market aggregation over UK Land Registry
Price Paid Data.

Data Source: UK Land Registry Price Paid Data (completed sales only)
"""

from .models import (
    PropertyType,
    SaleRecord,
    MarketSnapshot,
    normalise_postcode,
    property_type_code,
)
from .normalizer import SaleRecordNormalizer, NormalizationReport
from .aggregator import (
    matches_postcode,
    within_rolling_window,
    group_by_year,
    aggregate,
    street_sales_count,
    street_average_price,
    year_over_year_growth,
    compound_annual_growth_rate,
    sale_history,
    property_growth_rate,
    sold_price_change_pct,
    similar_sales,
)
from .service import LandRegistryService, trend_years

__all__ = [
    # Models
    "PropertyType",
    "SaleRecord",
    "MarketSnapshot",
    "normalise_postcode",
    "property_type_code",
    # Normalizer
    "SaleRecordNormalizer",
    "NormalizationReport",
    # Aggregator
    "matches_postcode",
    "within_rolling_window",
    "group_by_year",
    "aggregate",
    "street_sales_count",
    "street_average_price",
    "year_over_year_growth",
    "compound_annual_growth_rate",
    "sale_history",
    "property_growth_rate",
    "sold_price_change_pct",
    "similar_sales",
    # Service
    "LandRegistryService",
    "trend_years",
]
