"""Read-only views over score and accuracy history."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass

from domain.scoring.protocol import DocumentStore, Kind
from domain.scoring.records import UserRecord, find_ref

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScoreOverall:
    record_id: int
    tournament_id: int
    latest: float | None
    progression: tuple[float, ...]


@dataclass(frozen=True)
class AccuracyOverall:
    record_id: int
    tournament_id: int
    latest: float | None
    progression: tuple[float, ...]


def user_tournament_scores(
    store: DocumentStore,
    user_id: int,
    *,
    limit: int | None = None,
) -> list[ScoreOverall]:
    """Per-tournament score history of one user, newest value first."""
    user = store.get(Kind.USER, user_id)
    records = store.get_multi(Kind.SCORE, [ref.record_id for ref in user.score_refs])

    scores: list[ScoreOverall] = []
    for ref, record in zip(user.score_refs, records):
        if record is None:
            logger.error("user id=%s: score record id=%s not found", user_id, ref.record_id)
            continue
        scores.append(
            ScoreOverall(
                record_id=record.id,
                tournament_id=record.tournament_id,
                latest=record.series.latest,
                progression=tuple(record.series.progression(limit)),
            )
        )
    return scores


def team_tournament_accuracies(
    store: DocumentStore,
    team_id: int,
    *,
    limit: int | None = None,
) -> list[AccuracyOverall]:
    """Per-tournament accuracy history of one team, newest value first."""
    team = store.get(Kind.TEAM, team_id)
    records = store.get_multi(Kind.ACCURACY, [ref.record_id for ref in team.accuracy_refs])

    accuracies: list[AccuracyOverall] = []
    for ref, record in zip(team.accuracy_refs, records):
        if record is None:
            logger.error("team id=%s: accuracy record id=%s not found", team_id, ref.record_id)
            continue
        accuracies.append(
            AccuracyOverall(
                record_id=record.id,
                tournament_id=record.tournament_id,
                latest=record.series.latest,
                progression=tuple(record.series.progression(limit)),
            )
        )
    return accuracies


def team_accuracy_for_tournament(
    store: DocumentStore,
    team_id: int,
    tournament_id: int,
) -> AccuracyOverall | None:
    """Full progression for one tournament, or ``None`` when nothing is recorded."""
    team = store.get(Kind.TEAM, team_id)
    ref = find_ref(team.accuracy_refs, tournament_id)
    if ref is None:
        return None

    record = store.get(Kind.ACCURACY, ref.record_id)
    return AccuracyOverall(
        record_id=record.id,
        tournament_id=record.tournament_id,
        latest=record.series.latest,
        progression=tuple(record.series.progression()),
    )


def rank_members_by_score(
    store: DocumentStore,
    member_ids: Sequence[int],
    *,
    limit: int | None = None,
) -> list[UserRecord]:
    """Members ordered by lifetime score, highest first; missing users are dropped."""
    if limit is not None and limit < 0:
        raise ValueError("limit must be >= 0")

    users = [user for user in store.get_multi(Kind.USER, list(member_ids)) if user is not None]
    users.sort(key=lambda user: (-user.score, user.id))
    if limit is None:
        return users
    return users[:limit]


__all__ = [
    "AccuracyOverall",
    "ScoreOverall",
    "rank_members_by_score",
    "team_accuracy_for_tournament",
    "team_tournament_accuracies",
    "user_tournament_scores",
]
