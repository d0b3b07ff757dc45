from __future__ import annotations

from collections.abc import Callable

import pytest

from domain.scoring.errors import NotFoundError
from domain.scoring.protocol import Kind, StoreScope
from domain.scoring.records import AccuracyRecord, ScoreRecord, TournamentRef, UserRecord
from domain.scoring.reporting import (
    rank_members_by_score,
    team_accuracy_for_tournament,
    team_tournament_accuracies,
    user_tournament_scores,
)
from domain.scoring.series import RunningAverageSeries


@pytest.fixture
def seeded_history(
    store_scope: StoreScope,
    seed_team: Callable[..., None],
) -> None:
    seed_team(
        1,
        (10, 11, 12),
        accuracy_refs=(
            TournamentRef(tournament_id=1, record_id=500),
            TournamentRef(tournament_id=2, record_id=501),
        ),
    )
    with store_scope() as store:
        store.put_multi(
            Kind.USER,
            [10, 11, 12],
            [
                UserRecord(id=10, score=4, score_refs=(TournamentRef(tournament_id=1, record_id=300),)),
                UserRecord(id=11, score=9),
                UserRecord(id=12, score=4),
            ],
        )
        store.put(
            Kind.SCORE,
            300,
            ScoreRecord(
                id=300,
                user_id=10,
                tournament_id=1,
                series=RunningAverageSeries.from_values([3.0, 2.0, 1.5, 1.25]),
            ),
        )
        store.put_multi(
            Kind.ACCURACY,
            [500, 501],
            [
                AccuracyRecord(
                    id=500,
                    team_id=1,
                    tournament_id=1,
                    series=RunningAverageSeries.from_values([0.5, 0.25, 0.5]),
                ),
                AccuracyRecord(id=501, team_id=1, tournament_id=2),
            ],
        )


@pytest.mark.usefixtures("seeded_history")
def test_user_scores_are_listed_newest_first(store_scope: StoreScope) -> None:
    with store_scope() as store:
        scores = user_tournament_scores(store, 10, limit=2)

    assert len(scores) == 1
    assert scores[0].tournament_id == 1
    assert scores[0].latest == pytest.approx(1.25)
    assert scores[0].progression == pytest.approx((1.25, 1.5))


@pytest.mark.usefixtures("seeded_history")
def test_team_accuracies_report_empty_series_without_latest(store_scope: StoreScope) -> None:
    with store_scope() as store:
        accuracies = team_tournament_accuracies(store, 1)

    assert [item.tournament_id for item in accuracies] == [1, 2]
    assert accuracies[0].progression == pytest.approx((0.5, 0.25, 0.5))
    assert accuracies[1].latest is None
    assert accuracies[1].progression == ()


@pytest.mark.usefixtures("seeded_history")
def test_team_accuracy_for_single_tournament(store_scope: StoreScope) -> None:
    with store_scope() as store:
        found = team_accuracy_for_tournament(store, 1, 1)
        missing = team_accuracy_for_tournament(store, 1, 7)

    assert found is not None
    assert found.record_id == 500
    assert found.latest == pytest.approx(0.5)
    assert missing is None


def test_unknown_team_raises_not_found(store_scope: StoreScope) -> None:
    with pytest.raises(NotFoundError):
        with store_scope() as store:
            team_tournament_accuracies(store, 404)


@pytest.mark.usefixtures("seeded_history")
def test_members_ranked_by_score_with_id_tiebreak(store_scope: StoreScope) -> None:
    with store_scope() as store:
        ranked = rank_members_by_score(store, [12, 10, 11, 99])
        top_two = rank_members_by_score(store, [12, 10, 11], limit=2)

    assert [user.id for user in ranked] == [11, 10, 12]
    assert [user.id for user in top_two] == [11, 10]


def test_negative_rank_limit_is_rejected(store_scope: StoreScope) -> None:
    with store_scope() as store:
        with pytest.raises(ValueError, match="limit"):
            rank_members_by_score(store, [1], limit=-1)
