"""
FastAPI application for the scoring engine.

JSON endpoints only:
- POST /api/score-property    composite score for one property
- POST /api/land-registry     yearly market snapshots for an area
- POST /api/analyze-property  score a listing against sale history
- POST /api/clear-cache       drop cached Land Registry data

Production deployment configuration via environment variables.
"""

import logging
import os
from datetime import date
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from core import (
    ComparableSet,
    LandRegistryService,
    MarketDataCache,
    PropertyType,
    ScoringInput,
    CompositeScorer,
    PropertyAnalyzer,
    SubjectListing,
)
from core.land_registry import compound_annual_growth_rate, trend_years, year_over_year_growth
from utils.config import Config


logger = logging.getLogger(__name__)


# =============================================================================
# Environment Configuration
# =============================================================================

# Production mode detection
IS_PRODUCTION = os.getenv("RAILWAY_ENVIRONMENT") is not None or os.getenv("PRODUCTION", "").lower() == "true"

# CORS configuration - locked down for production
ALLOWED_ORIGINS = os.getenv("ALLOWED_ORIGINS", "").split(",") if os.getenv("ALLOWED_ORIGINS") else []
if not ALLOWED_ORIGINS and not IS_PRODUCTION:
    # Development fallback only
    ALLOWED_ORIGINS = ["http://localhost:3000", "http://127.0.0.1:3000"]

APP_VERSION = "1.0.0"


# =============================================================================
# Request Models
# =============================================================================

class ComparablesInput(BaseModel):
    """Price-per-sqm samples supplied by the caller."""
    listed: List[float] = []
    sold_30d: List[float] = []
    sold_90d_band: List[float] = []


class ScorePropertyRequest(BaseModel):
    """Request body for property scoring."""
    ask_price: float
    living_area: float
    days_on_market: Optional[float] = None
    comparables: ComparablesInput = ComparablesInput()
    road_sales_12m: Optional[int] = None
    total_road_properties: Optional[int] = None
    postcode_turnover_prior: Optional[float] = None
    active_comps: Optional[int] = None
    rolling_median_active_comps: Optional[float] = None
    property_cagr: Optional[float] = None
    area_cagr: Optional[float] = None
    preference_weights: Dict[str, Any] = {}
    feature_matches: Dict[str, Any] = {}
    # Score against fixed demonstration market data
    synthetic: bool = False

    def to_scoring_input(self) -> ScoringInput:
        if self.synthetic:
            return ScoringInput.create_synthetic(
                ask_price=self.ask_price,
                living_area=self.living_area,
                days_on_market=self.days_on_market,
                property_cagr=self.property_cagr,
                preference_weights=self.preference_weights,
                feature_matches=self.feature_matches,
            )
        return ScoringInput(
            ask_price=self.ask_price,
            living_area=self.living_area,
            days_on_market=self.days_on_market,
            comparables=ComparableSet(
                listed=tuple(self.comparables.listed),
                sold_30d=tuple(self.comparables.sold_30d),
                sold_90d_band=tuple(self.comparables.sold_90d_band),
            ),
            road_sales_12m=self.road_sales_12m,
            total_road_properties=self.total_road_properties,
            postcode_turnover_prior=self.postcode_turnover_prior,
            active_comps=self.active_comps,
            rolling_median_active_comps=self.rolling_median_active_comps,
            property_cagr=self.property_cagr,
            area_cagr=self.area_cagr,
            preference_weights=self.preference_weights,
            feature_matches=self.feature_matches,
        )


class AnalyzePropertyRequest(BaseModel):
    """Request body for scoring a listing against Land Registry history."""
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
    comparables: ComparablesInput = ComparablesInput()
    preference_weights: Dict[str, Any] = {}
    feature_matches: Dict[str, Any] = {}

    def to_listing(self) -> SubjectListing:
        return SubjectListing(
            postcode=self.postcode,
            property_type=self.property_type,
            ask_price=self.ask_price,
            living_area=self.living_area,
            street=self.street,
            paon=self.paon,
            days_on_market=self.days_on_market,
            total_road_properties=self.total_road_properties,
            active_comps=self.active_comps,
            rolling_median_active_comps=self.rolling_median_active_comps,
            postcode_turnover_prior=self.postcode_turnover_prior,
            preference_weights=self.preference_weights,
            feature_matches=self.feature_matches,
        )

    def to_comparables(self) -> ComparableSet:
        return ComparableSet(
            listed=tuple(self.comparables.listed),
            sold_30d=tuple(self.comparables.sold_30d),
            sold_90d_band=tuple(self.comparables.sold_90d_band),
        )


class LandRegistryRequest(BaseModel):
    """Request body for area market statistics."""
    postcode: str
    property_type: str
    window_months: Optional[int] = None
    years: Optional[List[int]] = None


def create_app(
    config: Optional[Config] = None,
    service: Optional[LandRegistryService] = None,
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application config (default: loaded from environment)
        service: Land Registry service (default: built from config)
    """
    config = config or Config.load()
    if service is None:
        service = LandRegistryService(
            config.data_dir,
            cache=MarketDataCache(ttl_seconds=config.cache_ttl_seconds),
        )

    app = FastAPI(
        title="HomeLens Scoring Engine",
        description="Comparable-market scoring for residential listings",
        version=APP_VERSION,
        # Production settings: disable docs/redoc for private deployment
        docs_url=None if IS_PRODUCTION else "/docs",
        redoc_url=None if IS_PRODUCTION else "/redoc",
        openapi_url=None if IS_PRODUCTION else "/openapi.json",
        debug=config.debug and not IS_PRODUCTION,
    )
    app.state.config = config
    app.state.service = service
    app.state.scorer = CompositeScorer()

    @app.get("/", include_in_schema=False)
    def root():
        """Root healthcheck. No dependencies, no IO."""
        return {"status": "ok"}

    @app.get("/health", include_in_schema=False)
    def health():
        """Secondary health endpoint. No dependencies, no IO."""
        return {"status": "healthy"}

    # CORS middleware - locked down for production
    if ALLOWED_ORIGINS:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=ALLOWED_ORIGINS,
            allow_credentials=True,
            allow_methods=["GET", "POST"],
            allow_headers=["*"],
        )

    @app.post("/api/score-property")
    def score_property(request_data: ScorePropertyRequest):
        """
        Score a property against its market and the buyer's preferences.

        Missing market inputs never fail the request; they are masked
        and reported through coverage and notes.
        """
        try:
            scoring_input = request_data.to_scoring_input()
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        result = app.state.scorer.score(scoring_input)
        logger.info(
            "Scored property: overall=%d investment=%d personal_fit=%d synthetic=%s",
            result.overall,
            result.investment,
            result.personal_fit,
            result.synthetic,
        )
        return JSONResponse({"success": True, **result.to_dict()})

    @app.post("/api/land-registry")
    def land_registry(request_data: LandRegistryRequest):
        """
        Yearly market snapshots for a postcode prefix and property type.

        Years without data files are skipped, not reported as errors.
        """
        property_type = PropertyType.from_string(request_data.property_type)
        if property_type is None:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown property type: {request_data.property_type}",
            )
        if not request_data.postcode.strip():
            raise HTTPException(status_code=400, detail="Postcode is required")
        if request_data.window_months is not None and request_data.window_months < 0:
            raise HTTPException(status_code=400, detail="window_months must not be negative")

        years = request_data.years or trend_years(date.today().year, config.trend_years)
        snapshots = app.state.service.market_snapshots(
            request_data.postcode,
            property_type,
            years,
            window_months=request_data.window_months,
        )
        return JSONResponse({
            "success": True,
            "data": {
                "postcode": request_data.postcode.upper(),
                "property_type": property_type.value,
                "snapshots": [s.to_dict() for s in snapshots.values()],
                "year_over_year_growth": year_over_year_growth(snapshots),
                "compound_annual_growth_rate": compound_annual_growth_rate(snapshots),
                "normalization": {
                    str(year): report.to_dict()
                    for year, report in sorted(
                        app.state.service.normalization_reports(years).items()
                    )
                },
            },
        })

    @app.post("/api/analyze-property")
    def analyze_property(request_data: AnalyzePropertyRequest):
        """
        Score a listing against sale history from the data directory.

        Area growth, the property's own growth and street turnover are
        derived from the records; everything else comes from the body.
        """
        if PropertyType.from_string(request_data.property_type) is None:
            raise HTTPException(
                status_code=400,
                detail=f"Unknown property type: {request_data.property_type}",
            )
        try:
            listing = request_data.to_listing()
            comparables = request_data.to_comparables()
            analyzer = PropertyAnalyzer(
                service=app.state.service,
                scorer=app.state.scorer,
                trend_year_count=config.trend_years,
                street_window_months=config.rolling_window_months,
            )
            analysis = analyzer.analyze(listing, comparables)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))

        return JSONResponse({"success": True, **analysis.to_dict()})

    @app.post("/api/clear-cache")
    def clear_cache():
        """Drop all cached Land Registry data."""
        removed = app.state.service.clear_cache()
        return JSONResponse({
            "success": True,
            "message": "All caches cleared successfully",
            "entries_removed": removed,
        })

    @app.get("/api/health")
    def api_health():
        """Health check endpoint."""
        return {
            "status": "healthy",
            "version": APP_VERSION,
            "environment": "production" if IS_PRODUCTION else "development",
        }

    return app


# Create app instance for uvicorn
app = create_app()
