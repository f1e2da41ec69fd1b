"""
Market Scoring Engine

Converts a ScoringInput into six sub-metrics and a coverage-adjusted
market-fit score.

Sub-metrics (A = ask price, a = living area):
- s1 Price positioning vs listed (L) and 30-day sold (S) comps per sqm
- s2 Property growth vs area growth, logistic on the winsorized gap
- s3 Time on market, exponential decay after a 7-day grace period
- s4 Street turnover, shrunk toward the postcode prior
- s5 Active competition vs its rolling median
- s6 Ask price vs the median of the 90-day sold band

Aggregation:
    M     = weighted_avg(s, weights, mask)
    M_adj = M * (0.9 + 0.1 * C)

The engine is pure: no I/O, no state between calls.
"""

import logging
import math
from typing import Optional, Tuple

from core.stats import mean, upper_median

from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .models import MarketFit, ScoreBreakdown, ScoringInput, SubMetricScores
from .primitives import lin_good, logistic, shrink, weighted_avg, wins


logger = logging.getLogger(__name__)


def _finite(value) -> Optional[float]:
    """The value as a float if present and finite, else None."""
    if value is None or isinstance(value, bool):
        return None
    value = float(value)
    return value if math.isfinite(value) else None


def _unit(value: float) -> float:
    return max(0.0, min(1.0, value))


class MarketScoringEngine:
    """
    Computes sub-metrics, market fit and coverage for one input.

    Args:
        config: Versioned weights and bounds (default: SCORING_CONFIG_V1)
    """

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.config = config

    def evaluate(self, scoring_input: ScoringInput) -> MarketFit:
        """
        Score the market side of a property.

        Never raises for missing data: unavailable sub-metrics are masked
        out and lower the coverage term instead.
        """
        cfg = self.config

        s1, ppsqm, listed_mean, sold_mean = self.price_position(scoring_input)
        s2, prop_cagr, area_cagr = self.growth(scoring_input)
        s3 = self.time_on_market(scoring_input)
        s4, turnover = self.road_turnover(scoring_input)
        s5 = self.competition(scoring_input)
        s6, band_median = self.recent_sold_band(scoring_input)

        metrics = SubMetricScores(s1=s1, s2=s2, s3=s3, s4=s4, s5=s5, s6=s6)
        mask = metrics.mask

        if any(mask):
            values = [v if v is not None else 0.0 for v in metrics.values()]
            market_score = _unit(weighted_avg(values, cfg.metric_weights, mask))
        else:
            market_score = cfg.neutral_market_score

        coverage = self.coverage(scoring_input)
        adjusted = _unit(
            market_score * (cfg.coverage_floor + (1 - cfg.coverage_floor) * coverage)
        )

        logger.debug(
            "Market fit M=%.4f C=%.2f M_adj=%.4f mask=%s",
            market_score,
            coverage,
            adjusted,
            mask,
        )

        breakdown = ScoreBreakdown(
            price_per_sqm=ppsqm,
            listed_mean=listed_mean,
            sold_30d_mean=sold_mean,
            sold_90d_median=band_median,
            days_on_market=_finite(scoring_input.days_on_market),
            road_turnover=turnover,
            active_comps=scoring_input.active_comps,
            property_cagr=prop_cagr,
            area_cagr=area_cagr,
        )
        return MarketFit(
            metrics=metrics,
            market_score=market_score,
            coverage=coverage,
            adjusted_score=adjusted,
            breakdown=breakdown,
        )

    # =========================================================================
    # Sub-metrics
    # =========================================================================

    def price_position(
        self, scoring_input: ScoringInput
    ) -> Tuple[Optional[float], float, Optional[float], Optional[float]]:
        """
        s1: asking price per sqm against listed and 30-day sold comps.

        Returns:
            (s1 or None, ppsqm, L, S)
        """
        cfg = self.config
        comps = scoring_input.comparables
        ppsqm = scoring_input.ask_price / max(scoring_input.living_area, 1)

        listed_mean = mean(comps.listed) if comps.listed else None
        sold_mean = mean(comps.sold_30d) if comps.sold_30d else None
        if listed_mean is None or sold_mean is None:
            return None, ppsqm, listed_mean, sold_mean

        clamp, band = cfg.ratio_clamp, cfg.price_position_band
        r_sold = wins(ppsqm / sold_mean, clamp.low, clamp.high)
        r_listed = wins(ppsqm / listed_mean, clamp.low, clamp.high)
        s_sold = lin_good(r_sold, band.low, band.high)
        s_listed = lin_good(r_listed, band.low, band.high)
        s1 = cfg.sold_share * s_sold + cfg.listed_share * s_listed
        return _unit(s1), ppsqm, listed_mean, sold_mean

    def growth(self, scoring_input: ScoringInput) -> Tuple[float, float, float]:
        """
        s2: property CAGR against area CAGR.

        Falls back to fixed rates when either growth figure is missing,
        so s2 is always available.
        """
        cfg = self.config
        prop = _finite(scoring_input.property_cagr)
        area = _finite(scoring_input.area_cagr)
        if prop is None:
            prop = cfg.fallback_property_cagr
        if area is None:
            area = cfg.fallback_area_cagr

        clamp = cfg.growth_delta_clamp
        delta = wins(prop - area, clamp.low, clamp.high)
        return _unit(logistic(delta / cfg.growth_scale)), prop, area

    def time_on_market(self, scoring_input: ScoringInput) -> Optional[float]:
        """s3: exp(-max(days - 7, 0) / 45)."""
        days = _finite(scoring_input.days_on_market)
        if days is None:
            return None
        cfg = self.config
        return _unit(math.exp(-max(days - cfg.grace_days, 0) / cfg.decay_days))

    def road_turnover(
        self, scoring_input: ScoringInput
    ) -> Tuple[Optional[float], Optional[float]]:
        """
        s4: street turnover rate shrunk toward the postcode prior.

        Returns:
            (s4 or None, shrunk turnover or None)
        """
        sales = _finite(scoring_input.road_sales_12m)
        total = _finite(scoring_input.total_road_properties)
        if sales is None or total is None:
            return None, None

        cfg = self.config
        prior = _finite(scoring_input.postcode_turnover_prior)
        if prior is None:
            prior = cfg.fallback_turnover_prior

        sales = max(sales, 0.0)
        theta = sales / max(total, 1)
        theta_hat = shrink(theta, prior, sales, cfg.turnover_pseudo_count)
        clamp, band = cfg.turnover_clamp, cfg.turnover_band
        s4 = lin_good(wins(theta_hat, clamp.low, clamp.high), band.low, band.high)
        return _unit(s4), theta_hat

    def competition(self, scoring_input: ScoringInput) -> Optional[float]:
        """s5: log-ratio of active competitors to their rolling median."""
        active = _finite(scoring_input.active_comps)
        rolling = _finite(scoring_input.rolling_median_active_comps)
        if active is None or rolling is None:
            return None

        cfg = self.config
        ratio = math.log(1 + max(active, 0.0)) / math.log(
            1 + max(rolling, 0.0) + cfg.competition_offset
        )
        band = cfg.competition_band
        return _unit(lin_good(ratio, band.low, band.high))

    def recent_sold_band(
        self, scoring_input: ScoringInput
    ) -> Tuple[Optional[float], Optional[float]]:
        """
        s6: ask price against the median of the 90-day sold band.

        Uses the same upper-median convention as the market aggregator.
        """
        band_values = scoring_input.comparables.sold_90d_band
        if not band_values:
            return None, None

        cfg = self.config
        band_median = upper_median(band_values)
        clamp, band = cfg.ratio_clamp, cfg.recent_sold_band
        ratio = wins(scoring_input.ask_price / band_median, clamp.low, clamp.high)
        return _unit(lin_good(ratio, band.low, band.high)), band_median

    # =========================================================================
    # Coverage
    # =========================================================================

    def coverage_flags(self, scoring_input: ScoringInput) -> dict:
        """Which comparable and turnover inputs were genuinely observed."""
        comps = scoring_input.comparables
        return {
            "listed_comps": bool(comps.listed),
            "sold_30d_comps": bool(comps.sold_30d),
            "sold_90d_band": bool(comps.sold_90d_band),
            "road_sales": (
                _finite(scoring_input.road_sales_12m) is not None
                and _finite(scoring_input.total_road_properties) is not None
            ),
            "turnover_prior": _finite(scoring_input.postcode_turnover_prior) is not None,
            "active_competition": (
                _finite(scoring_input.active_comps) is not None
                and _finite(scoring_input.rolling_median_active_comps) is not None
            ),
        }

    def coverage(self, scoring_input: ScoringInput) -> float:
        """
        C in [0, 1]: share of observed inputs.

        Synthetic inputs are demonstration data, not observations, and
        always report zero coverage.
        """
        if scoring_input.synthetic:
            return 0.0
        flags = self.coverage_flags(scoring_input)
        return sum(flags.values()) / len(flags)
