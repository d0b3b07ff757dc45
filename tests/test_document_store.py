"""Tests for the SQLAlchemy-backed document store."""

from __future__ import annotations

from dataclasses import replace

import pytest
from sqlalchemy.engine import Engine

from db import create_session_factory
from domain.scoring.errors import ConcurrentUpdateError, NotFoundError
from domain.scoring.protocol import DocumentStore, Kind, StoreScope
from domain.scoring.records import AccuracyRecord, ScoreRecord, TeamRecord, TournamentRef, UserRecord
from domain.scoring.series import RunningAverageSeries
from repositories.store import SqlAlchemyDocumentStore


def test_store_satisfies_protocol(engine: Engine) -> None:
    with create_session_factory(engine)() as session:
        assert isinstance(SqlAlchemyDocumentStore(session), DocumentStore)


def test_put_and_get_user(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put(
            Kind.USER,
            10,
            UserRecord(id=10, score=4, score_refs=(TournamentRef(1, 100),), name="ana"),
        )

    with store_scope() as store:
        user = store.get(Kind.USER, 10)

    assert user.score == 4
    assert user.name == "ana"
    assert user.score_refs == (TournamentRef(tournament_id=1, record_id=100),)
    assert user.version == 1


def test_put_and_get_accuracy_series(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put(Kind.TEAM, 5, TeamRecord(id=5, member_ids=(10, 11)))
        store.put(
            Kind.ACCURACY,
            7,
            AccuracyRecord(id=7, team_id=5, tournament_id=1, series=RunningAverageSeries((0.5, 0.25))),
        )

    with store_scope() as store:
        record = store.get(Kind.ACCURACY, 7)
        team = store.get(Kind.TEAM, 5)

    assert record.series.values == (0.5, 0.25)
    assert team.member_ids == (10, 11)
    assert team.accuracy == 0.0


def test_get_missing_raises_not_found(store_scope: StoreScope) -> None:
    with store_scope() as store:
        with pytest.raises(NotFoundError, match="user id=404 not found"):
            store.get(Kind.USER, 404)


def test_get_multi_keeps_order_and_fills_missing_with_none(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put_multi(Kind.USER, [1, 2], [UserRecord(id=1, score=1), UserRecord(id=2, score=2)])

    with store_scope() as store:
        users = store.get_multi(Kind.USER, [2, 3, 1])

    assert [None if user is None else user.score for user in users] == [2, None, 1]


def test_put_multi_rejects_mismatched_lengths(store_scope: StoreScope) -> None:
    with store_scope() as store:
        with pytest.raises(ValueError, match="put_multi got 2 ids but 1 values"):
            store.put_multi(Kind.USER, [1, 2], [UserRecord(id=1)])


def test_put_rejects_mismatched_id_and_type(store_scope: StoreScope) -> None:
    with store_scope() as store:
        with pytest.raises(ValueError, match="does not match key"):
            store.put(Kind.USER, 1, UserRecord(id=2))
        with pytest.raises(TypeError, match="expected UserRecord"):
            store.put(Kind.USER, 1, TeamRecord(id=1))


def test_allocate_id_continues_after_existing_rows(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put(Kind.USER, 10, UserRecord(id=10))
        store.put(Kind.SCORE, 41, ScoreRecord(id=41, user_id=10, tournament_id=1))

    with store_scope() as store:
        first = store.allocate_id(Kind.SCORE)
        second = store.allocate_id(Kind.SCORE)
    with store_scope() as store:
        third = store.allocate_id(Kind.SCORE)

    assert (first, second, third) == (42, 43, 44)


def test_allocate_id_is_per_kind(store_scope: StoreScope) -> None:
    with store_scope() as store:
        assert store.allocate_id(Kind.SCORE) == 1
        assert store.allocate_id(Kind.ACCURACY) == 1
        assert store.allocate_id(Kind.SCORE) == 2


def test_query_by_field(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put(Kind.USER, 10, UserRecord(id=10))
        store.put(Kind.SCORE, 1, ScoreRecord(id=1, user_id=10, tournament_id=1))
        store.put(Kind.SCORE, 2, ScoreRecord(id=2, user_id=10, tournament_id=2))

    with store_scope() as store:
        records = store.query(Kind.SCORE, "user_id", 10)
        assert [record.tournament_id for record in records] == [1, 2]
        assert store.query(Kind.SCORE, "tournament_id", 3) == []
        with pytest.raises(ValueError, match="no queryable field"):
            store.query(Kind.SCORE, "colour", "red")


def test_stale_version_raises_concurrent_update(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put(Kind.USER, 10, UserRecord(id=10))

    with store_scope() as store:
        stale = store.get(Kind.USER, 10)

    with store_scope() as store:
        fresh = store.get(Kind.USER, 10)
        store.put(Kind.USER, 10, replace(fresh, score=3))

    with pytest.raises(ConcurrentUpdateError, match="version"):
        with store_scope() as store:
            store.put(Kind.USER, 10, replace(stale, score=1))

    with store_scope() as store:
        assert store.get(Kind.USER, 10).score == 3


def test_duplicate_tournament_record_is_rejected(store_scope: StoreScope) -> None:
    with store_scope() as store:
        store.put(Kind.USER, 10, UserRecord(id=10))
        store.put(Kind.SCORE, 1, ScoreRecord(id=1, user_id=10, tournament_id=1))

    with pytest.raises(ConcurrentUpdateError):
        with store_scope() as store:
            store.put(Kind.SCORE, 2, ScoreRecord(id=2, user_id=10, tournament_id=1))


def test_scope_rolls_back_on_error(store_scope: StoreScope) -> None:
    with pytest.raises(RuntimeError):
        with store_scope() as store:
            store.put(Kind.USER, 10, UserRecord(id=10))
            raise RuntimeError("boom")

    with store_scope() as store:
        assert store.get_multi(Kind.USER, [10]) == [None]
