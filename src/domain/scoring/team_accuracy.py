"""Per-match team accuracy and cross-tournament overall accuracy."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, replace

from domain.scoring.activity import LoggingActivityPublisher
from domain.scoring.calculator import MAX_POINTS_PER_MATCH, compute_score
from domain.scoring.common import Match, MatchFinished, Prediction, TeamSnapshot
from domain.scoring.config import ScoringConfig
from domain.scoring.errors import PartialBatchFailure
from domain.scoring.fanout import fan_out, run_with_retries
from domain.scoring.ledger import already_applied, mark_applied
from domain.scoring.protocol import ActivityPublisher, DocumentStore, Kind, StoreScope
from domain.scoring.records import AccuracyRecord, TeamRecord, find_ref

logger = logging.getLogger(__name__)

ENTITY_KIND = "team"
ACCURACY_ACTIVITY = "accuracy"


@dataclass(frozen=True)
class TeamAccuracyUpdate:
    """Outcome for one subscribed team."""

    team_id: int
    sum_points: int
    max_points: int
    ratio: float
    tournament_accuracy: float
    overall_accuracy: float | None
    accuracy_record_id: int
    created_record: bool = False
    duplicate: bool = False
    accuracy_changed: bool = False


@dataclass(frozen=True)
class TeamAccuracySummary:
    tournament_id: int
    match_id: int
    updated: tuple[TeamAccuracyUpdate, ...] = ()
    skipped_team_ids: tuple[int, ...] = ()
    duplicate_team_ids: tuple[int, ...] = ()


def team_match_points(
    match: Match,
    member_ids: Iterable[int],
    predictions: Mapping[int, Prediction],
) -> tuple[int, int]:
    """Return ``(sum_points, max_points)``; members without a prediction score 0."""
    members = list(member_ids)
    sum_points = 0
    for member_id in members:
        prediction = predictions.get(member_id)
        if prediction is not None:
            sum_points += compute_score(match, prediction)
    return sum_points, MAX_POINTS_PER_MATCH * len(members)


def mean_of_latest(latest_values: Iterable[float | None]) -> float | None:
    """Unweighted mean over tournaments that have recorded at least one value."""
    recorded = [value for value in latest_values if value is not None]
    if not recorded:
        return None
    return sum(recorded) / len(recorded)


def overall_accuracy(
    store: DocumentStore,
    team: TeamRecord,
    *,
    tournament_id: int,
    computed_accuracy: float,
) -> float | None:
    """Mean of the latest value of every tournament series the team owns.

    The series of ``tournament_id`` contributes ``computed_accuracy`` rather
    than its stored value, which may not be written yet.
    """
    other_refs = [ref for ref in team.accuracy_refs if ref.tournament_id != tournament_id]
    records = store.get_multi(Kind.ACCURACY, [ref.record_id for ref in other_refs])

    latest_values: list[float | None] = []
    if find_ref(team.accuracy_refs, tournament_id) is not None:
        latest_values.append(computed_accuracy)
    for ref, record in zip(other_refs, records):
        if record is None:
            logger.info(
                "team id=%s: accuracy record id=%s for tournament id=%s not found",
                team.id,
                ref.record_id,
                ref.tournament_id,
            )
            continue
        latest_values.append(record.series.latest)
    return mean_of_latest(latest_values)


class TeamAccuracyAggregator:
    """Apply one finished match to every team subscribed to its tournament."""

    def __init__(
        self,
        store_scope: StoreScope,
        *,
        publisher: ActivityPublisher | None = None,
        max_workers: int = 1,
        max_write_retries: int = 3,
        deduplicate: bool = True,
    ) -> None:
        self._store_scope = store_scope
        self.publisher = publisher or LoggingActivityPublisher()
        self.max_workers = max_workers
        self.max_write_retries = max_write_retries
        self.deduplicate = deduplicate

    @classmethod
    def from_config(
        cls,
        store_scope: StoreScope,
        config: ScoringConfig,
        *,
        publisher: ActivityPublisher | None = None,
    ) -> TeamAccuracyAggregator:
        return cls(
            store_scope,
            publisher=publisher,
            max_workers=config.max_workers,
            max_write_retries=config.max_write_retries,
            deduplicate=config.deduplicate,
        )

    def update_teams_accuracy(self, event: MatchFinished) -> TeamAccuracySummary:
        """Update every team; raises ``PartialBatchFailure`` after the full pass."""
        predictions = event.predictions_by_user()

        to_update: list[TeamSnapshot] = []
        skipped: list[int] = []
        for team in event.teams:
            if not team.member_ids:
                logger.info("team id=%s has no members, skipping", team.team_id)
                skipped.append(team.team_id)
                continue
            to_update.append(team)

        updates, failures = fan_out(
            to_update,
            lambda team: self._update_and_publish(event, team, predictions),
            entity_kind=ENTITY_KIND,
            entity_id=lambda team: team.team_id,
            max_workers=self.max_workers,
        )

        summary = TeamAccuracySummary(
            tournament_id=event.tournament_id,
            match_id=event.match.match_id,
            updated=tuple(update for update in updates if not update.duplicate),
            skipped_team_ids=tuple(skipped),
            duplicate_team_ids=tuple(update.team_id for update in updates if update.duplicate),
        )
        if failures:
            raise PartialBatchFailure(tuple(failures), summary)
        return summary

    def _update_and_publish(
        self,
        event: MatchFinished,
        team: TeamSnapshot,
        predictions: Mapping[int, Prediction],
    ) -> TeamAccuracyUpdate:
        update = run_with_retries(
            lambda: self._apply(event, team, predictions),
            attempts=self.max_write_retries,
            label=f"team id={team.team_id}",
        )
        if update.accuracy_changed:
            self._publish(update)
        return update

    def _apply(
        self,
        event: MatchFinished,
        snapshot: TeamSnapshot,
        predictions: Mapping[int, Prediction],
    ) -> TeamAccuracyUpdate:
        tournament_id = event.tournament_id
        match_id = event.match.match_id
        sum_points, max_points = team_match_points(event.match, snapshot.member_ids, predictions)
        ratio = sum_points / max_points
        logger.debug(
            "team id=%s sum_points=%s max_points=%s ratio=%.4f",
            snapshot.team_id,
            sum_points,
            max_points,
            ratio,
        )

        with self._store_scope() as store:
            if self.deduplicate and already_applied(
                store,
                entity_kind=ENTITY_KIND,
                entity_id=snapshot.team_id,
                tournament_id=tournament_id,
                match_id=match_id,
            ):
                logger.info(
                    "team id=%s already has accuracy for match id=%s, skipping",
                    snapshot.team_id,
                    match_id,
                )
                return TeamAccuracyUpdate(
                    team_id=snapshot.team_id,
                    sum_points=sum_points,
                    max_points=max_points,
                    ratio=ratio,
                    tournament_accuracy=0.0,
                    overall_accuracy=None,
                    accuracy_record_id=0,
                    duplicate=True,
                )

            team: TeamRecord = store.get(Kind.TEAM, snapshot.team_id)
            record, created = _accuracy_record_for(store, team, tournament_id)

            series, tournament_accuracy = record.series.append(ratio)
            record = replace(record, series=series)
            team = team.with_accuracy_ref(tournament_id, record.id)

            overall = overall_accuracy(
                store,
                team,
                tournament_id=tournament_id,
                computed_accuracy=tournament_accuracy,
            )
            previous_accuracy = team.accuracy
            changed = overall is not None and not math.isclose(overall, previous_accuracy)
            if overall is not None:
                team = replace(team, accuracy=overall)

            store.put(Kind.ACCURACY, record.id, record)
            store.put(Kind.TEAM, team.id, team)
            if self.deduplicate:
                mark_applied(
                    store,
                    entity_kind=ENTITY_KIND,
                    entity_id=team.id,
                    tournament_id=tournament_id,
                    match_id=match_id,
                )

        return TeamAccuracyUpdate(
            team_id=team.id,
            sum_points=sum_points,
            max_points=max_points,
            ratio=ratio,
            tournament_accuracy=tournament_accuracy,
            overall_accuracy=overall,
            accuracy_record_id=record.id,
            created_record=created,
            accuracy_changed=changed,
        )

    def _publish(self, update: TeamAccuracyUpdate) -> None:
        message = f"has a new accuracy of {update.tournament_accuracy * 100:.2f}%"
        try:
            self.publisher.publish_team_activity(update.team_id, ACCURACY_ACTIVITY, message)
        except Exception:
            logger.warning(
                "team id=%s: unable to publish accuracy activity",
                update.team_id,
                exc_info=True,
            )


def _accuracy_record_for(
    store: DocumentStore,
    team: TeamRecord,
    tournament_id: int,
) -> tuple[AccuracyRecord, bool]:
    """Locate the team's record for the tournament, creating it when absent."""
    ref = find_ref(team.accuracy_refs, tournament_id)
    if ref is not None:
        return store.get(Kind.ACCURACY, ref.record_id), False

    existing = [
        record
        for record in store.query(Kind.ACCURACY, "team_id", team.id)
        if record.tournament_id == tournament_id
    ]
    if existing:
        logger.warning(
            "team id=%s had no ref to accuracy record id=%s for tournament id=%s, relinking",
            team.id,
            existing[0].id,
            tournament_id,
        )
        return existing[0], False

    record = AccuracyRecord(
        id=store.allocate_id(Kind.ACCURACY),
        team_id=team.id,
        tournament_id=tournament_id,
    )
    logger.info(
        "created accuracy record id=%s for team id=%s tournament id=%s",
        record.id,
        team.id,
        tournament_id,
    )
    return record, True


__all__ = [
    "TeamAccuracyAggregator",
    "TeamAccuracySummary",
    "TeamAccuracyUpdate",
    "mean_of_latest",
    "overall_accuracy",
    "team_match_points",
]
