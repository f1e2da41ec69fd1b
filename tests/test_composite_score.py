"""
Tests for the Preference Engine and Composite Scorer.

Verifies:
- P is the mean of importance / 10 over declared features
- No declared preferences gives a neutral P of 0.5
- Composite scores stay within 0-999 and are deterministic
- Total input loss still returns a score
- Notes explain pricing, exclusions, coverage and synthetic data
"""

import pytest
from pathlib import Path
import sys

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.scoring import (
    ComparableSet,
    CompositeScorer,
    PreferenceEngine,
    ScoringInput,
    score,
)


# =============================================================================
# Test Fixtures
# =============================================================================

@pytest.fixture
def scorer():
    return CompositeScorer()


@pytest.fixture
def preference_engine():
    return PreferenceEngine()


@pytest.fixture
def observed_input():
    return ScoringInput(
        ask_price=350000,
        living_area=108,
        days_on_market=21,
        comparables=ComparableSet(
            listed=(3800, 3900, 4000),
            sold_30d=(3750, 3800),
            sold_90d_band=(3600, 3700, 3800, 3900),
        ),
        road_sales_12m=3,
        total_road_properties=50,
        postcode_turnover_prior=0.08,
        active_comps=2,
        rolling_median_active_comps=3,
        preference_weights={"garden": 8, "parking": 4},
        feature_matches={"garden": True, "parking": "no"},
    )


# =============================================================================
# Test: Preference Engine
# =============================================================================

class TestPreferenceEngine:
    """Tests for preference fit."""

    def test_mean_of_scaled_importances(self, preference_engine):
        fit = preference_engine.evaluate({"garden": 8, "parking": 4})
        assert fit.score == pytest.approx(0.6)
        assert fit.declared_features == ["garden", "parking"]

    def test_no_preferences_is_neutral(self, preference_engine):
        assert preference_engine.evaluate({}).score == 0.5

    def test_non_numeric_entries_ignored(self, preference_engine):
        fit = preference_engine.evaluate({"garden": 8, "notes": "big", "pets": True})
        assert fit.score == pytest.approx(0.8)
        assert fit.ignored_features == ["notes", "pets"]

    def test_only_non_numeric_entries_is_neutral(self, preference_engine):
        assert preference_engine.evaluate({"notes": "big"}).score == 0.5

    def test_score_clamped_to_unit_interval(self, preference_engine):
        assert preference_engine.evaluate({"garden": 15}).score == 1.0
        assert preference_engine.evaluate({"garden": -3}).score == 0.0

    def test_matches_reported_but_do_not_weight(self, preference_engine):
        matched = preference_engine.evaluate(
            {"garden": 8, "parking": 4}, {"garden": True, "parking": "yes"}
        )
        unmatched = preference_engine.evaluate(
            {"garden": 8, "parking": 4}, {"garden": False, "parking": 0}
        )
        assert matched.score == unmatched.score
        assert matched.matched_features == ["garden", "parking"]
        assert unmatched.matched_features == []


# =============================================================================
# Test: Composite Scorer
# =============================================================================

class TestCompositeScorer:
    """Tests for the 0-999 blend."""

    def test_overall_blends_preference_and_market(self, scorer, observed_input):
        result = scorer.score(observed_input)

        expected = round(999 * (0.5 * 0.6 + 0.5 * result.adjusted_market_score))
        assert result.overall == expected
        assert result.personal_fit == round(999 * 0.6)
        assert result.investment == round(999 * result.adjusted_market_score)
        assert result.config_version == "1.0"

    def test_deterministic(self, scorer, observed_input):
        first = scorer.score(observed_input).to_dict()
        second = scorer.score(observed_input).to_dict()
        assert first == second

    def test_module_level_score_matches_scorer(self, scorer, observed_input):
        assert score(observed_input).to_dict() == scorer.score(observed_input).to_dict()

    def test_total_input_loss_still_scores(self, scorer):
        bare = ScoringInput(ask_price=1, living_area=0)
        result = scorer.score(bare)

        assert result.preference_score == 0.5
        assert result.coverage == 0.0
        assert result.metrics.mask == (False, True, False, False, False, False)
        assert result.overall == 463
        assert result.investment == 427
        # 999 * 0.5 = 499.5 rounds half up
        assert result.personal_fit == 500

    @pytest.mark.parametrize("ask_price", [1, 120000, 350000, 9_999_999])
    def test_scores_within_range(self, scorer, ask_price):
        result = scorer.score(
            ScoringInput.create_synthetic(
                ask_price=ask_price,
                living_area=90,
                days_on_market=30,
                preference_weights={"garden": 10},
            )
        )
        for value in (result.overall, result.investment, result.personal_fit):
            assert isinstance(value, int)
            assert 0 <= value <= 999

    def test_to_dict_shape(self, scorer, observed_input):
        data = scorer.score(observed_input).to_dict()

        assert set(data["scores"]) == {"overall", "investment", "personal_fit"}
        assert set(data["metrics"]) == {
            "s1", "s2", "s3", "s4", "s5", "s6", "P", "M", "M_adjusted", "coverage",
        }
        assert data["synthetic"] is False
        assert isinstance(data["notes"], list)

    def test_preference_audit_carried_into_score(self, scorer, observed_input):
        result = scorer.score(observed_input)

        assert result.declared_features == ["garden", "parking"]
        assert result.matched_features == ["garden"]
        assert result.ignored_features == []

    def test_preference_audit_in_dict(self, scorer):
        data = scorer.score(ScoringInput(
            ask_price=350000,
            living_area=108,
            preference_weights={"garden": 8, "view": "lovely"},
            feature_matches={"garden": True},
        )).to_dict()

        assert data["preferences"] == {
            "declared": ["garden"],
            "matched": ["garden"],
            "ignored": ["view"],
        }


# =============================================================================
# Test: Notes
# =============================================================================

class TestNotes:
    """Plain-language notes attached to each score."""

    def test_underpriced_note(self, scorer):
        cheap = ScoringInput(
            ask_price=300000,
            living_area=108,
            comparables=ComparableSet(listed=(3900,), sold_30d=(3775,)),
        )
        notes = scorer.score(cheap).notes
        assert any("below recent sold price per sqm" in n for n in notes)

    def test_no_pricing_note_inside_band(self, scorer, observed_input):
        notes = scorer.score(observed_input).notes
        assert not any("recent sold price per sqm" in n for n in notes)

    def test_excluded_metrics_listed(self, scorer):
        notes = scorer.score(ScoringInput(ask_price=350000, living_area=108)).notes
        assert "Excluded for missing data: s1, s3, s4, s5, s6" in notes
        assert any(n.startswith("Low data coverage") for n in notes)
        assert "No preferences declared - neutral personal fit" in notes

    def test_synthetic_note(self, scorer):
        result = scorer.score(ScoringInput.create_synthetic(ask_price=350000, living_area=108))
        assert result.synthetic is True
        assert "Synthetic market data - not based on real comparables" in result.notes
        assert not any(n.startswith("Low data coverage") for n in result.notes)

    def test_stale_listing_note(self, scorer):
        result = scorer.score(ScoringInput(ask_price=350000, living_area=108, days_on_market=90))
        assert "Long time on market (90 days)" in result.notes
