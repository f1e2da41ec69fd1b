"""
Composite Scorer

Blends market fit and preference fit into the final 0-999 score.

Scoring methodology:
- Investment (50%): coverage-adjusted market fit M_adj
- Personal fit (50%): preference fit P

    overall      = round(999 * (0.5 * P + 0.5 * M_adj))
    investment   = round(999 * M_adj)
    personal_fit = round(999 * P)
"""

from typing import List

from core.stats import round_half_up

from .config import DEFAULT_SCORING_CONFIG, ScoringConfig
from .engine import MarketScoringEngine
from .models import CompositeScore, MarketFit, ScoringInput
from .preferences import PreferenceEngine, PreferenceFit


# Note thresholds
OVERPRICED_RATIO = 1.15
UNDERPRICED_RATIO = 0.85
STALE_LISTING_DAYS = 60
FRESH_LISTING_DAYS = 7
LOW_COVERAGE = 0.5


class CompositeScorer:
    """
    Produces a CompositeScore for a ScoringInput.

    Always returns a score: missing data lowers coverage and masks
    sub-metrics, it never raises.
    """

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.config = config
        self.market_engine = MarketScoringEngine(config)
        self.preference_engine = PreferenceEngine(config)

    def score(self, scoring_input: ScoringInput) -> CompositeScore:
        """
        Score one property.

        Args:
            scoring_input: Fully or partially populated input

        Returns:
            CompositeScore with the breakdown needed to audit it
        """
        cfg = self.config
        market = self.market_engine.evaluate(scoring_input)
        preference = self.preference_engine.evaluate(
            scoring_input.preference_weights,
            scoring_input.feature_matches,
        )

        blended = (
            cfg.preference_weight * preference.score
            + cfg.market_weight * market.adjusted_score
        )

        return CompositeScore(
            overall=self._to_scale(blended),
            investment=self._to_scale(market.adjusted_score),
            personal_fit=self._to_scale(preference.score),
            preference_score=preference.score,
            market_score=market.market_score,
            adjusted_market_score=market.adjusted_score,
            coverage=market.coverage,
            metrics=market.metrics,
            breakdown=market.breakdown,
            declared_features=list(preference.declared_features),
            matched_features=list(preference.matched_features),
            ignored_features=list(preference.ignored_features),
            synthetic=scoring_input.synthetic,
            config_version=cfg.version,
            notes=self._generate_notes(scoring_input, market, preference),
        )

    def _to_scale(self, unit_value: float) -> int:
        scale = self.config.score_scale
        return max(0, min(scale, round_half_up(scale * unit_value)))

    def _generate_notes(
        self,
        scoring_input: ScoringInput,
        market: MarketFit,
        preference: PreferenceFit,
    ) -> List[str]:
        """Generate plain-language notes for the score."""
        notes = []
        breakdown = market.breakdown

        # Pricing notes
        if breakdown.sold_30d_mean:
            ratio = breakdown.price_per_sqm / breakdown.sold_30d_mean
            if ratio >= OVERPRICED_RATIO:
                notes.append(
                    f"Asking {(ratio - 1) * 100:.1f}% above recent sold price per sqm"
                )
            elif ratio <= UNDERPRICED_RATIO:
                notes.append(
                    f"Asking {(1 - ratio) * 100:.1f}% below recent sold price per sqm"
                )

        # Time on market notes
        days = breakdown.days_on_market
        if days is not None:
            if days >= STALE_LISTING_DAYS:
                notes.append(f"Long time on market ({days:.0f} days)")
            elif days <= FRESH_LISTING_DAYS:
                notes.append("New listing - within grace period")

        # Data quality notes
        excluded = [
            f"s{i}" for i, available in enumerate(market.metrics.mask, start=1)
            if not available
        ]
        if excluded:
            notes.append(f"Excluded for missing data: {', '.join(excluded)}")
        if scoring_input.synthetic:
            notes.append("Synthetic market data - not based on real comparables")
        elif market.coverage < LOW_COVERAGE:
            notes.append(f"Low data coverage ({market.coverage:.0%})")

        if not preference.declared_features:
            notes.append("No preferences declared - neutral personal fit")

        return notes


def score(scoring_input: ScoringInput) -> CompositeScore:
    """Score with the default configuration."""
    return CompositeScorer().score(scoring_input)
