"""Shared fixtures: an in-memory SQLite database behind the real document store."""

from __future__ import annotations

from collections.abc import Callable, Iterator

import pytest
from sqlalchemy.engine import Engine

from db import create_db_engine, create_session_factory
from domain.scoring.protocol import Kind, StoreScope
from domain.scoring.records import TeamRecord, UserRecord
from repositories.unit_of_work import ensure_scoring_schema, store_scope_factory


@pytest.fixture
def engine() -> Iterator[Engine]:
    engine = create_db_engine("sqlite://")
    ensure_scoring_schema(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store_scope(engine: Engine) -> StoreScope:
    return store_scope_factory(create_session_factory(engine))


@pytest.fixture
def seed_users(store_scope: StoreScope) -> Callable[..., None]:
    def _seed(*user_ids: int) -> None:
        with store_scope() as store:
            store.put_multi(Kind.USER, list(user_ids), [UserRecord(id=user_id) for user_id in user_ids])

    return _seed


@pytest.fixture
def seed_team(store_scope: StoreScope) -> Callable[..., None]:
    def _seed(team_id: int, member_ids: tuple[int, ...] = (), **fields) -> None:
        with store_scope() as store:
            store.put(Kind.TEAM, team_id, TeamRecord(id=team_id, member_ids=member_ids, **fields))

    return _seed
