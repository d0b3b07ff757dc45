"""Prediction scoring and team accuracy aggregation."""

from domain.scoring.calculator import Trend, classify_trend, compute_score
from domain.scoring.common import Match, MatchFinished, Participant, Prediction, TeamSnapshot
from domain.scoring.config import ScoringConfig, load_scoring_config
from domain.scoring.errors import (
    ConcurrentUpdateError,
    EntityFailure,
    NotFoundError,
    PartialBatchFailure,
    PersistenceError,
    ScoringError,
)
from domain.scoring.pipeline import MatchScoringSummary, on_match_finished, retry_failed
from domain.scoring.protocol import ActivityPublisher, DocumentStore, Kind
from domain.scoring.series import RunningAverageSeries

__all__ = [
    "ActivityPublisher",
    "ConcurrentUpdateError",
    "DocumentStore",
    "EntityFailure",
    "Kind",
    "Match",
    "MatchFinished",
    "MatchScoringSummary",
    "NotFoundError",
    "PartialBatchFailure",
    "Participant",
    "PersistenceError",
    "Prediction",
    "RunningAverageSeries",
    "ScoringConfig",
    "ScoringError",
    "TeamSnapshot",
    "Trend",
    "classify_trend",
    "compute_score",
    "load_scoring_config",
    "on_match_finished",
    "retry_failed",
]
