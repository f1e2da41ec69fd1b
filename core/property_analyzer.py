"""
Property Analyzer - Integrated Scoring Pipeline

Wires the stages together for one listing:
1. Sale records (supplied, or loaded through LandRegistryService)
2. Market aggregation (area snapshots, street turnover, growth)
3. Comparable set (supplied by the caller)
4. Composite scoring

Everything the scorer consumes is assembled here, before scoring starts.
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Mapping, Optional, Sequence

from .land_registry import (
    LandRegistryService,
    MarketSnapshot,
    SaleRecord,
    aggregate,
    compound_annual_growth_rate,
    normalise_postcode,
    property_growth_rate,
    sale_history,
    street_sales_count,
    trend_years,
)
from .land_registry.aggregator import STREET_WINDOW_MONTHS
from .scoring import ComparableSet, CompositeScore, CompositeScorer, ScoringInput


logger = logging.getLogger(__name__)


# Length of the UK inward code ("5PR" in "S10 5PR")
INWARD_CODE_LENGTH = 3


def area_prefix(postcode: str) -> str:
    """Outward code of a postcode ("S10 5PR" -> "S10", "S105PR" -> "S10")."""
    parts = postcode.upper().split()
    if len(parts) > 1:
        return parts[0]
    compact = normalise_postcode(postcode)
    if len(compact) > INWARD_CODE_LENGTH + 1:
        return compact[:-INWARD_CODE_LENGTH]
    return compact


@dataclass
class SubjectListing:
    """
    A listing being scored, with the market facts supplied alongside it.

    Road size, competitor counts and the turnover prior come from
    external collaborators; leave them as None when unknown.
    """
    postcode: str
    property_type: str
    ask_price: float
    living_area: float

    street: str = ""
    paon: str = ""
    days_on_market: Optional[float] = None

    total_road_properties: Optional[int] = None
    active_comps: Optional[int] = None
    rolling_median_active_comps: Optional[float] = None
    postcode_turnover_prior: Optional[float] = None

    preference_weights: Mapping[str, Any] = field(default_factory=dict)
    feature_matches: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate listing after initialization."""
        if not self.postcode:
            raise ValueError("postcode is required")
        if self.ask_price <= 0:
            raise ValueError("ask_price must be positive")


@dataclass
class PropertyAnalysis:
    """Score for a listing plus the market context it was derived from."""
    listing: SubjectListing
    score: CompositeScore
    snapshots: Dict[int, MarketSnapshot] = field(default_factory=dict)
    road_sales_12m: Optional[int] = None
    area_cagr: Optional[float] = None
    property_cagr: Optional[float] = None

    @property
    def overall(self) -> int:
        return self.score.overall

    def to_dict(self) -> dict:
        return {
            **self.score.to_dict(),
            "market": {
                "snapshots": [s.to_dict() for s in self.snapshots.values()],
                "road_sales_12m": self.road_sales_12m,
                "area_cagr": self.area_cagr,
                "property_cagr": self.property_cagr,
            },
        }


class PropertyAnalyzer:
    """
    Scores listings against Land Registry history.

    Records may be passed per call; otherwise they are loaded for the
    trend window through the service.
    """

    def __init__(
        self,
        service: Optional[LandRegistryService] = None,
        scorer: Optional[CompositeScorer] = None,
        reference_date: date = None,
        trend_year_count: int = 5,
        street_window_months: int = STREET_WINDOW_MONTHS,
    ):
        """
        Initialize the analyzer.

        Args:
            service: Source of sale records when none are passed in
            scorer: Composite scorer (default configuration if omitted)
            reference_date: Date rolling windows end on (default: today)
            trend_year_count: Calendar years of history to aggregate
            street_window_months: Rolling window for street turnover
        """
        self._service = service
        self._scorer = scorer or CompositeScorer()
        self._reference_date = reference_date or date.today()
        self._trend_year_count = trend_year_count
        self._street_window_months = street_window_months

    def analyze(
        self,
        listing: SubjectListing,
        comparables: ComparableSet = None,
        records: Optional[Sequence[SaleRecord]] = None,
    ) -> PropertyAnalysis:
        """
        Analyze a single listing.

        Args:
            listing: The listing to score
            comparables: Price-per-area samples (empty if omitted)
            records: Pre-loaded sale records (loaded if not provided)

        Returns:
            PropertyAnalysis with the composite score
        """
        if records is None:
            records = self._load_records()
        records = list(records)

        snapshots = aggregate(records, area_prefix(listing.postcode), listing.property_type)
        area_cagr = compound_annual_growth_rate(snapshots)

        property_cagr = None
        if listing.paon:
            history = sale_history(records, listing.postcode, listing.paon, listing.street)
            property_cagr = property_growth_rate(history)

        # No records means turnover is unknown, not zero
        road_sales = None
        if records and listing.street:
            road_sales = street_sales_count(
                records,
                listing.street,
                months=self._street_window_months,
                reference_date=self._reference_date,
            )

        scoring_input = ScoringInput(
            ask_price=listing.ask_price,
            living_area=listing.living_area,
            days_on_market=listing.days_on_market,
            comparables=comparables or ComparableSet(),
            road_sales_12m=road_sales,
            total_road_properties=listing.total_road_properties,
            postcode_turnover_prior=listing.postcode_turnover_prior,
            active_comps=listing.active_comps,
            rolling_median_active_comps=listing.rolling_median_active_comps,
            property_cagr=property_cagr,
            area_cagr=area_cagr,
            preference_weights=listing.preference_weights,
            feature_matches=listing.feature_matches,
        )
        composite = self._scorer.score(scoring_input)

        logger.info(
            "Scored %s (%s): overall=%d coverage=%.2f",
            listing.postcode,
            listing.property_type,
            composite.overall,
            composite.coverage,
        )

        return PropertyAnalysis(
            listing=listing,
            score=composite,
            snapshots=snapshots,
            road_sales_12m=road_sales,
            area_cagr=area_cagr,
            property_cagr=property_cagr,
        )

    def analyze_batch(
        self,
        listings: List[SubjectListing],
        comparables: Optional[Mapping[int, ComparableSet]] = None,
        records: Optional[Sequence[SaleRecord]] = None,
    ) -> List[PropertyAnalysis]:
        """
        Analyze multiple listings against one set of records.

        Args:
            listings: Listings to score
            comparables: Comparable sets keyed by listing index
            records: Pre-loaded sale records (loaded once if not provided)

        Returns:
            Analyses sorted by overall score (descending)
        """
        if records is None:
            records = self._load_records()
        comparables = comparables or {}
        analyses = [
            self.analyze(listing, comparables.get(i), records)
            for i, listing in enumerate(listings)
        ]
        return sorted(analyses, key=lambda a: a.overall, reverse=True)

    def _load_records(self) -> List[SaleRecord]:
        if self._service is None:
            return []
        years = trend_years(self._reference_date.year, self._trend_year_count)
        return self._service.load_years(years)
