"""Match-finished trigger: user scores first, then team accuracies."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from domain.scoring.common import MatchFinished
from domain.scoring.config import ScoringConfig, default_scoring_config
from domain.scoring.errors import EntityFailure, PartialBatchFailure
from domain.scoring.protocol import ActivityPublisher, StoreScope
from domain.scoring.team_accuracy import TeamAccuracyAggregator, TeamAccuracySummary
from domain.scoring.user_scores import UserScoreAggregator, UserScoreSummary

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MatchScoringSummary:
    """Outcome of one match-finished run."""

    tournament_id: int
    match_id: int
    users: UserScoreSummary | None
    teams: TeamAccuracySummary | None

    @property
    def updated_user_count(self) -> int:
        return 0 if self.users is None else len(self.users.updated)

    @property
    def updated_team_count(self) -> int:
        return 0 if self.teams is None else len(self.teams.updated)


def on_match_finished(
    event: MatchFinished,
    *,
    store_scope: StoreScope,
    config: ScoringConfig | None = None,
    publisher: ActivityPublisher | None = None,
) -> MatchScoringSummary:
    """Score every participant and update every subscribed team for one match.

    Both passes always run. When either reports failures a single
    ``PartialBatchFailure`` is raised whose ``summary`` is the
    ``MatchScoringSummary`` of what was applied.
    """
    config = config or default_scoring_config()
    users_aggregator = UserScoreAggregator.from_config(store_scope, config)
    teams_aggregator = TeamAccuracyAggregator.from_config(store_scope, config, publisher=publisher)

    logger.info(
        "match id=%s finished in tournament id=%s: participants=%d teams=%d",
        event.match.match_id,
        event.tournament_id,
        len(event.participants),
        len(event.teams),
    )

    failures: list[EntityFailure] = []
    users_summary: UserScoreSummary | None
    teams_summary: TeamAccuracySummary | None

    try:
        users_summary = users_aggregator.update_users_score(event)
    except PartialBatchFailure as exc:
        failures.extend(exc.failures)
        users_summary = exc.summary

    try:
        teams_summary = teams_aggregator.update_teams_accuracy(event)
    except PartialBatchFailure as exc:
        failures.extend(exc.failures)
        teams_summary = exc.summary

    summary = MatchScoringSummary(
        tournament_id=event.tournament_id,
        match_id=event.match.match_id,
        users=users_summary,
        teams=teams_summary,
    )
    logger.info(
        "match id=%s scored: users_updated=%d teams_updated=%d failures=%d",
        event.match.match_id,
        summary.updated_user_count,
        summary.updated_team_count,
        len(failures),
    )
    if failures:
        raise PartialBatchFailure(tuple(failures), summary)
    return summary


def retry_failed(event: MatchFinished, failure: PartialBatchFailure) -> MatchFinished:
    """Narrow ``event`` to the users and teams that failed in ``failure``."""
    return event.restricted_to(
        user_ids=failure.failed_user_ids,
        team_ids=failure.failed_team_ids,
    )


__all__ = ["MatchScoringSummary", "on_match_finished", "retry_failed"]
