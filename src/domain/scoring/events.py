"""Build ``MatchFinished`` snapshots from plain JSON-like payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from domain.scoring.common import Match, MatchFinished, Participant, Prediction, TeamSnapshot


def match_finished_from_dict(raw: dict[str, Any]) -> MatchFinished:
    """Parse a payload shaped like::

        {"tournament_id": 1,
         "match": {"id": 7, "result1": 2, "result2": 0},
         "participants": [{"user_id": 10, "prediction": {"result1": 2, "result2": 0}}],
         "teams": [{"team_id": 5, "member_ids": [10]}]}
    """
    try:
        tournament_id = int(raw["tournament_id"])
        match_raw = raw["match"]
        match = Match(
            match_id=int(match_raw["id"]),
            result1=int(match_raw["result1"]),
            result2=int(match_raw["result2"]),
        )
        participants = tuple(
            _parse_participant(item, match.match_id) for item in raw.get("participants", ())
        )
        teams = tuple(
            TeamSnapshot(
                team_id=int(item["team_id"]),
                member_ids=tuple(int(member_id) for member_id in item.get("member_ids", ())),
            )
            for item in raw.get("teams", ())
        )
    except (KeyError, TypeError) as exc:
        raise ValueError(f"malformed match-finished payload: {exc!r}") from exc

    user_ids = [participant.user_id for participant in participants]
    if len(user_ids) != len(set(user_ids)):
        raise ValueError(f"duplicate participant ids in payload: {user_ids}")
    team_ids = [team.team_id for team in teams]
    if len(team_ids) != len(set(team_ids)):
        raise ValueError(f"duplicate team ids in payload: {team_ids}")
    for team in teams:
        if len(team.member_ids) != len(set(team.member_ids)):
            raise ValueError(
                f"duplicate member ids in team {team.team_id}: {list(team.member_ids)}"
            )

    return MatchFinished(
        tournament_id=tournament_id,
        match=match,
        participants=participants,
        teams=teams,
    )


def _parse_participant(item: dict[str, Any], match_id: int) -> Participant:
    user_id = int(item["user_id"])
    prediction_raw = item.get("prediction")
    if prediction_raw is None:
        return Participant(user_id=user_id)

    created_raw = prediction_raw.get("created_at")
    return Participant(
        user_id=user_id,
        prediction=Prediction(
            user_id=user_id,
            match_id=int(prediction_raw.get("match_id", match_id)),
            result1=int(prediction_raw["result1"]),
            result2=int(prediction_raw["result2"]),
            created_at=None if created_raw is None else datetime.fromisoformat(str(created_raw)),
        ),
    )


__all__ = ["match_finished_from_dict"]
