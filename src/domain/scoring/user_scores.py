"""Lifetime and per-tournament score updates for tournament participants."""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from domain.scoring.calculator import compute_score
from domain.scoring.common import MatchFinished, Prediction
from domain.scoring.config import ScoringConfig
from domain.scoring.errors import PartialBatchFailure
from domain.scoring.fanout import fan_out, run_with_retries
from domain.scoring.ledger import already_applied, mark_applied
from domain.scoring.protocol import DocumentStore, Kind, StoreScope
from domain.scoring.records import ScoreRecord, UserRecord, find_ref

logger = logging.getLogger(__name__)

ENTITY_KIND = "user"


@dataclass(frozen=True)
class UserScoreUpdate:
    """Outcome for one participant."""

    user_id: int
    points: int
    total_score: int
    score_record_id: int
    tournament_score: float
    created_record: bool = False
    duplicate: bool = False


@dataclass(frozen=True)
class UserScoreSummary:
    tournament_id: int
    match_id: int
    updated: tuple[UserScoreUpdate, ...] = ()
    skipped_user_ids: tuple[int, ...] = ()
    duplicate_user_ids: tuple[int, ...] = ()


class UserScoreAggregator:
    """Apply one finished match to every participant of its tournament."""

    def __init__(
        self,
        store_scope: StoreScope,
        *,
        max_workers: int = 1,
        max_write_retries: int = 3,
        deduplicate: bool = True,
    ) -> None:
        self._store_scope = store_scope
        self.max_workers = max_workers
        self.max_write_retries = max_write_retries
        self.deduplicate = deduplicate

    @classmethod
    def from_config(cls, store_scope: StoreScope, config: ScoringConfig) -> UserScoreAggregator:
        return cls(
            store_scope,
            max_workers=config.max_workers,
            max_write_retries=config.max_write_retries,
            deduplicate=config.deduplicate,
        )

    def update_users_score(self, event: MatchFinished) -> UserScoreSummary:
        """Score every participant; raises ``PartialBatchFailure`` after the full pass."""
        predictions = event.predictions_by_user()

        to_score: list[Prediction] = []
        skipped: list[int] = []
        for participant in event.participants_to_score():
            prediction = predictions.get(participant.user_id)
            if prediction is None:
                logger.info(
                    "user id=%s has no prediction for match id=%s, skipping",
                    participant.user_id,
                    event.match.match_id,
                )
                skipped.append(participant.user_id)
                continue
            to_score.append(prediction)

        updates, failures = fan_out(
            to_score,
            lambda prediction: run_with_retries(
                lambda: self._apply(event, prediction),
                attempts=self.max_write_retries,
                label=f"user id={prediction.user_id}",
            ),
            entity_kind=ENTITY_KIND,
            entity_id=lambda prediction: prediction.user_id,
            max_workers=self.max_workers,
        )

        summary = UserScoreSummary(
            tournament_id=event.tournament_id,
            match_id=event.match.match_id,
            updated=tuple(update for update in updates if not update.duplicate),
            skipped_user_ids=tuple(skipped),
            duplicate_user_ids=tuple(update.user_id for update in updates if update.duplicate),
        )
        if failures:
            raise PartialBatchFailure(tuple(failures), summary)
        return summary

    def _apply(self, event: MatchFinished, prediction: Prediction) -> UserScoreUpdate:
        tournament_id = event.tournament_id
        match_id = event.match.match_id
        points = compute_score(event.match, prediction)

        with self._store_scope() as store:
            if self.deduplicate and already_applied(
                store,
                entity_kind=ENTITY_KIND,
                entity_id=prediction.user_id,
                tournament_id=tournament_id,
                match_id=match_id,
            ):
                logger.info(
                    "user id=%s already scored for match id=%s, skipping",
                    prediction.user_id,
                    match_id,
                )
                return UserScoreUpdate(
                    user_id=prediction.user_id,
                    points=0,
                    total_score=0,
                    score_record_id=0,
                    tournament_score=0.0,
                    duplicate=True,
                )

            user: UserRecord = store.get(Kind.USER, prediction.user_id)
            record, created = _score_record_for(store, user, tournament_id)

            series, tournament_score = record.series.append(points)
            record = replace(record, series=series)
            user = replace(
                user.with_score_ref(tournament_id, record.id),
                score=user.score + points,
            )

            store.put(Kind.SCORE, record.id, record)
            store.put(Kind.USER, user.id, user)
            if self.deduplicate:
                mark_applied(
                    store,
                    entity_kind=ENTITY_KIND,
                    entity_id=user.id,
                    tournament_id=tournament_id,
                    match_id=match_id,
                )

        return UserScoreUpdate(
            user_id=user.id,
            points=points,
            total_score=user.score,
            score_record_id=record.id,
            tournament_score=tournament_score,
            created_record=created,
        )


def _score_record_for(
    store: DocumentStore,
    user: UserRecord,
    tournament_id: int,
) -> tuple[ScoreRecord, bool]:
    """Locate the user's record for the tournament, creating it when absent."""
    ref = find_ref(user.score_refs, tournament_id)
    if ref is not None:
        return store.get(Kind.SCORE, ref.record_id), False

    existing = [
        record
        for record in store.query(Kind.SCORE, "user_id", user.id)
        if record.tournament_id == tournament_id
    ]
    if existing:
        logger.warning(
            "user id=%s had no ref to score record id=%s for tournament id=%s, relinking",
            user.id,
            existing[0].id,
            tournament_id,
        )
        return existing[0], False

    record = ScoreRecord(
        id=store.allocate_id(Kind.SCORE),
        user_id=user.id,
        tournament_id=tournament_id,
    )
    logger.info(
        "created score record id=%s for user id=%s tournament id=%s",
        record.id,
        user.id,
        tournament_id,
    )
    return record, True


__all__ = ["UserScoreAggregator", "UserScoreSummary", "UserScoreUpdate"]
