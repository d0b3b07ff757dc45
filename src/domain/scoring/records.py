"""Persisted documents touched by the scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime

from domain.scoring.series import RunningAverageSeries


@dataclass(frozen=True)
class TournamentRef:
    """Owner-side pointer to a per-tournament record."""

    tournament_id: int
    record_id: int


def find_ref(refs: tuple[TournamentRef, ...], tournament_id: int) -> TournamentRef | None:
    for ref in refs:
        if ref.tournament_id == tournament_id:
            return ref
    return None


@dataclass(frozen=True)
class UserRecord:
    id: int
    score: int = 0
    score_refs: tuple[TournamentRef, ...] = ()
    name: str | None = None
    version: int = 0

    def with_score_ref(self, tournament_id: int, record_id: int) -> UserRecord:
        if find_ref(self.score_refs, tournament_id) is not None:
            return self
        return replace(self, score_refs=self.score_refs + (TournamentRef(tournament_id, record_id),))


@dataclass(frozen=True)
class TeamRecord:
    id: int
    member_ids: tuple[int, ...] = ()
    accuracy: float = 0.0
    accuracy_refs: tuple[TournamentRef, ...] = ()
    name: str | None = None
    version: int = 0

    def with_accuracy_ref(self, tournament_id: int, record_id: int) -> TeamRecord:
        if find_ref(self.accuracy_refs, tournament_id) is not None:
            return self
        return replace(
            self,
            accuracy_refs=self.accuracy_refs + (TournamentRef(tournament_id, record_id),),
        )


@dataclass(frozen=True)
class ScoreRecord:
    """Per user and tournament history of score contributions."""

    id: int
    user_id: int
    tournament_id: int
    series: RunningAverageSeries = field(default_factory=RunningAverageSeries)
    version: int = 0


@dataclass(frozen=True)
class AccuracyRecord:
    """Per team and tournament history of match accuracy ratios."""

    id: int
    team_id: int
    tournament_id: int
    series: RunningAverageSeries = field(default_factory=RunningAverageSeries)
    version: int = 0


@dataclass(frozen=True)
class LedgerEntry:
    """Marks one (entity, match) pair as already applied."""

    id: int
    key: str
    recorded_at: datetime | None = None


def ledger_key(entity_kind: str, entity_id: int, tournament_id: int, match_id: int) -> str:
    return f"{entity_kind}:{entity_id}:{tournament_id}:{match_id}"


__all__ = [
    "AccuracyRecord",
    "LedgerEntry",
    "ScoreRecord",
    "TeamRecord",
    "TournamentRef",
    "UserRecord",
    "find_ref",
    "ledger_key",
]
