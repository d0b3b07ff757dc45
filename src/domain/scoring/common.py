"""Shared input types for the match-finished scoring engine."""

from __future__ import annotations

from dataclasses import dataclass, replace
from datetime import datetime


@dataclass(frozen=True)
class Match:
    """Final result of a finished match."""

    match_id: int
    result1: int
    result2: int


@dataclass(frozen=True)
class Prediction:
    """One user's guessed result for one match."""

    user_id: int
    match_id: int
    result1: int
    result2: int
    created_at: datetime | None = None


@dataclass(frozen=True)
class Participant:
    """Tournament participant as captured when the match finished."""

    user_id: int
    prediction: Prediction | None = None


@dataclass(frozen=True)
class TeamSnapshot:
    """Team subscribed to the tournament, with its member list at trigger time."""

    team_id: int
    member_ids: tuple[int, ...] = ()


@dataclass(frozen=True)
class MatchFinished:
    """Snapshot handed over by the match lifecycle when a match is finalized."""

    tournament_id: int
    match: Match
    participants: tuple[Participant, ...] = ()
    teams: tuple[TeamSnapshot, ...] = ()
    scored_user_ids: frozenset[int] | None = None

    def predictions_by_user(self) -> dict[int, Prediction]:
        """Map user id to that user's prediction for this match."""
        predictions: dict[int, Prediction] = {}
        for participant in self.participants:
            prediction = participant.prediction
            if prediction is None or prediction.match_id != self.match.match_id:
                continue
            predictions[participant.user_id] = prediction
        return predictions

    def participants_to_score(self) -> tuple[Participant, ...]:
        """Participants whose own score is updated; ``scored_user_ids`` narrows it on retries."""
        if self.scored_user_ids is None:
            return self.participants
        return tuple(p for p in self.participants if p.user_id in self.scored_user_ids)

    def restricted_to(
        self,
        *,
        user_ids: set[int] | frozenset[int],
        team_ids: set[int] | frozenset[int],
    ) -> MatchFinished:
        """Return a copy that only updates the given users and teams.

        Every participant stays in the copy so team accuracy still sees the
        predictions of members whose own score was already applied.
        """
        return replace(
            self,
            scored_user_ids=frozenset(user_ids),
            teams=tuple(t for t in self.teams if t.team_id in team_ids),
        )


__all__ = ["Match", "MatchFinished", "Participant", "Prediction", "TeamSnapshot"]
