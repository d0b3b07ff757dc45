"""Transaction scopes that hand out one document store per unit of work."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager

from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from domain.scoring.protocol import StoreScope
from models.base import Base
from models.ledger import IdAllocation, ScoringLedgerEntry
from models.team import Team
from models.team_accuracy import TeamAccuracy
from models.tournament_score import TournamentScore
from models.user import User
from repositories.store import SqlAlchemyDocumentStore, translate_errors

SCORING_TABLES = (
    User.__table__,
    Team.__table__,
    TournamentScore.__table__,
    TeamAccuracy.__table__,
    ScoringLedgerEntry.__table__,
    IdAllocation.__table__,
)


def ensure_scoring_schema(engine: Engine) -> None:
    """Create the scoring tables and indexes if they do not exist."""
    with engine.begin() as connection:
        Base.metadata.create_all(bind=connection, tables=list(SCORING_TABLES), checkfirst=True)


def store_scope_factory(session_factory: sessionmaker[Session]) -> StoreScope:
    """Build a ``StoreScope`` that commits on success and rolls back on error."""

    @contextmanager
    def store_scope() -> Iterator[SqlAlchemyDocumentStore]:
        with session_factory() as session:
            try:
                yield SqlAlchemyDocumentStore(session)
                with translate_errors("commit"):
                    session.commit()
            except Exception:
                session.rollback()
                raise

    return store_scope


__all__ = ["SCORING_TABLES", "ensure_scoring_schema", "store_scope_factory"]
