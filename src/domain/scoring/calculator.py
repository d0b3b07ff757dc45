"""Point values for a prediction against a final match result."""

from __future__ import annotations

from enum import Enum

from domain.scoring.common import Match, Prediction

EXACT_RESULT_POINTS = 3
TREND_POINTS = 1
MISS_POINTS = 0
MAX_POINTS_PER_MATCH = EXACT_RESULT_POINTS


class Trend(str, Enum):
    """Categorical outcome of a result pair."""

    FIRST_WINS = "first_wins"
    SECOND_WINS = "second_wins"
    TIE = "tie"


def classify_trend(result1: int, result2: int) -> Trend:
    if result1 > result2:
        return Trend.FIRST_WINS
    if result1 < result2:
        return Trend.SECOND_WINS
    return Trend.TIE


def compute_score(match: Match, prediction: Prediction) -> int:
    """Score one prediction: 3 for the exact result, 1 for the right trend, else 0."""
    if match.result1 == prediction.result1 and match.result2 == prediction.result2:
        return EXACT_RESULT_POINTS
    if classify_trend(match.result1, match.result2) == classify_trend(
        prediction.result1, prediction.result2
    ):
        return TREND_POINTS
    return MISS_POINTS


__all__ = [
    "EXACT_RESULT_POINTS",
    "MAX_POINTS_PER_MATCH",
    "MISS_POINTS",
    "TREND_POINTS",
    "Trend",
    "classify_trend",
    "compute_score",
]
