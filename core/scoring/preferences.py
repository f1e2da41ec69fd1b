"""
Preference Engine

Turns the buyer's feature importances (0-10) into a preference-fit score.

P is the plain mean of importance / 10 over the declared features,
clamped to [0, 1]. Match indicators are reported alongside but do not
weight P. With no declared features P is neutral (0.5).
"""

import math
from dataclasses import dataclass, field
from typing import Any, List, Mapping

from .config import DEFAULT_SCORING_CONFIG, ScoringConfig


IMPORTANCE_SCALE = 10.0


@dataclass(frozen=True)
class PreferenceFit:
    """Preference-fit score with the features it was computed from."""
    score: float
    declared_features: List[str] = field(default_factory=list)
    matched_features: List[str] = field(default_factory=list)
    ignored_features: List[str] = field(default_factory=list)


def _is_importance(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def _is_match(value: Any) -> bool:
    """A feature counts as matched when its indicator is truthy and positive."""
    if isinstance(value, bool):
        return value
    if isinstance(value, (int, float)):
        return value > 0
    if isinstance(value, str):
        return value.strip().lower() in ("yes", "y", "true")
    return False


class PreferenceEngine:
    """Scores how well a property suits the buyer's stated preferences."""

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self.config = config

    def evaluate(
        self,
        importances: Mapping[str, Any],
        feature_matches: Mapping[str, Any] = None,
    ) -> PreferenceFit:
        """
        Args:
            importances: Feature name -> importance (0-10); non-numeric
                entries are ignored
            feature_matches: Feature name -> match indicator, reported only

        Returns:
            PreferenceFit with P in [0, 1]
        """
        feature_matches = feature_matches or {}
        declared = [name for name, value in importances.items() if _is_importance(value)]
        ignored = [name for name in importances if name not in declared]
        matched = [name for name in declared if _is_match(feature_matches.get(name))]

        if not declared:
            return PreferenceFit(
                score=self.config.neutral_preference_score,
                ignored_features=ignored,
            )

        total = sum(importances[name] / IMPORTANCE_SCALE for name in declared)
        score = max(0.0, min(1.0, total / len(declared)))
        return PreferenceFit(
            score=score,
            declared_features=declared,
            matched_features=matched,
            ignored_features=ignored,
        )
