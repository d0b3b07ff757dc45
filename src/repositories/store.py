"""SQLAlchemy implementation of the scoring document store."""

from __future__ import annotations

from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session
from sqlalchemy.orm.exc import StaleDataError

from domain.scoring.errors import ConcurrentUpdateError, NotFoundError, PersistenceError
from domain.scoring.protocol import Kind
from domain.scoring.records import (
    AccuracyRecord,
    LedgerEntry,
    ScoreRecord,
    TeamRecord,
    TournamentRef,
    UserRecord,
)
from domain.scoring.series import RunningAverageSeries
from models.ledger import IdAllocation, ScoringLedgerEntry
from models.team import Team
from models.team_accuracy import TeamAccuracy
from models.tournament_score import TournamentScore
from models.user import User


@contextmanager
def translate_errors(action: str) -> Iterator[None]:
    """Re-raise SQLAlchemy failures as scoring persistence errors."""
    try:
        yield
    except (StaleDataError, IntegrityError) as exc:
        raise ConcurrentUpdateError(f"{action}: {exc}") from exc
    except SQLAlchemyError as exc:
        raise PersistenceError(f"{action}: {exc}") from exc


def _refs_to_json(refs: Sequence[TournamentRef]) -> list[dict[str, int]]:
    return [{"tournament_id": ref.tournament_id, "record_id": ref.record_id} for ref in refs]


def _refs_from_json(raw: Sequence[dict[str, Any]] | None) -> tuple[TournamentRef, ...]:
    return tuple(
        TournamentRef(tournament_id=int(item["tournament_id"]), record_id=int(item["record_id"]))
        for item in raw or ()
    )


def _user_to_document(row: User) -> UserRecord:
    return UserRecord(
        id=row.id,
        score=row.score,
        score_refs=_refs_from_json(row.score_refs),
        name=row.name,
        version=row.version,
    )


def _apply_user(row: User, document: UserRecord) -> None:
    row.name = document.name
    row.score = document.score
    row.score_refs = _refs_to_json(document.score_refs)


def _team_to_document(row: Team) -> TeamRecord:
    return TeamRecord(
        id=row.id,
        member_ids=tuple(int(member_id) for member_id in row.member_ids or ()),
        accuracy=row.accuracy,
        accuracy_refs=_refs_from_json(row.accuracy_refs),
        name=row.name,
        version=row.version,
    )


def _apply_team(row: Team, document: TeamRecord) -> None:
    row.name = document.name
    row.member_ids = list(document.member_ids)
    row.accuracy = document.accuracy
    row.accuracy_refs = _refs_to_json(document.accuracy_refs)


def _score_to_document(row: TournamentScore) -> ScoreRecord:
    return ScoreRecord(
        id=row.id,
        user_id=row.user_id,
        tournament_id=row.tournament_id,
        series=RunningAverageSeries.from_values(row.scores or ()),
        version=row.version,
    )


def _apply_score(row: TournamentScore, document: ScoreRecord) -> None:
    row.user_id = document.user_id
    row.tournament_id = document.tournament_id
    row.scores = list(document.series.values)


def _accuracy_to_document(row: TeamAccuracy) -> AccuracyRecord:
    return AccuracyRecord(
        id=row.id,
        team_id=row.team_id,
        tournament_id=row.tournament_id,
        series=RunningAverageSeries.from_values(row.accuracies or ()),
        version=row.version,
    )


def _apply_accuracy(row: TeamAccuracy, document: AccuracyRecord) -> None:
    row.team_id = document.team_id
    row.tournament_id = document.tournament_id
    row.accuracies = list(document.series.values)


def _ledger_to_document(row: ScoringLedgerEntry) -> LedgerEntry:
    return LedgerEntry(id=row.id, key=row.key, recorded_at=row.recorded_at)


def _apply_ledger(row: ScoringLedgerEntry, document: LedgerEntry) -> None:
    row.key = document.key
    if document.recorded_at is not None:
        row.recorded_at = document.recorded_at


@dataclass(frozen=True)
class DocumentMapping:
    """How one document kind maps onto one ORM model."""

    model: type[Any]
    document_type: type[Any]
    to_document: Callable[[Any], Any]
    apply_document: Callable[[Any, Any], None]
    versioned: bool = True


DOCUMENT_MAPPINGS: dict[Kind, DocumentMapping] = {
    Kind.USER: DocumentMapping(User, UserRecord, _user_to_document, _apply_user),
    Kind.TEAM: DocumentMapping(Team, TeamRecord, _team_to_document, _apply_team),
    Kind.SCORE: DocumentMapping(TournamentScore, ScoreRecord, _score_to_document, _apply_score),
    Kind.ACCURACY: DocumentMapping(
        TeamAccuracy, AccuracyRecord, _accuracy_to_document, _apply_accuracy
    ),
    Kind.LEDGER: DocumentMapping(
        ScoringLedgerEntry, LedgerEntry, _ledger_to_document, _apply_ledger, versioned=False
    ),
}


class SqlAlchemyDocumentStore:
    """Document store bound to one session; the caller owns commit/rollback."""

    def __init__(self, session: Session) -> None:
        self.session = session

    def allocate_id(self, kind: Kind) -> int:
        mapping = DOCUMENT_MAPPINGS[kind]
        with translate_errors(f"allocate {kind.value} id"):
            allocation = self.session.get(IdAllocation, kind.value, with_for_update=True)
            if allocation is None:
                current_max = self.session.scalar(select(func.max(mapping.model.id)))
                allocation = IdAllocation(kind=kind.value, next_id=int(current_max or 0) + 1)
                self.session.add(allocation)
            allocated = allocation.next_id
            allocation.next_id = allocated + 1
            self.session.flush()
        return allocated

    def get(self, kind: Kind, entity_id: int) -> Any:
        mapping = DOCUMENT_MAPPINGS[kind]
        with translate_errors(f"get {kind.value} id={entity_id}"):
            row = self.session.get(mapping.model, entity_id)
        if row is None:
            raise NotFoundError(kind.value, entity_id)
        return mapping.to_document(row)

    def get_multi(self, kind: Kind, entity_ids: Sequence[int]) -> list[Any | None]:
        if not entity_ids:
            return []
        mapping = DOCUMENT_MAPPINGS[kind]
        with translate_errors(f"get_multi {kind.value}"):
            rows = self.session.scalars(
                select(mapping.model).where(mapping.model.id.in_(list(entity_ids)))
            ).all()
        by_id = {row.id: row for row in rows}
        return [
            mapping.to_document(by_id[entity_id]) if entity_id in by_id else None
            for entity_id in entity_ids
        ]

    def put(self, kind: Kind, entity_id: int, value: Any) -> None:
        mapping = DOCUMENT_MAPPINGS[kind]
        self._check_document(mapping, entity_id, value)
        with translate_errors(f"put {kind.value} id={entity_id}"):
            self._stage(mapping, entity_id, value)
            self.session.flush()

    def put_multi(self, kind: Kind, entity_ids: Sequence[int], values: Sequence[Any]) -> None:
        if len(entity_ids) != len(values):
            raise ValueError(
                f"put_multi got {len(entity_ids)} ids but {len(values)} values for {kind.value}"
            )
        mapping = DOCUMENT_MAPPINGS[kind]
        for entity_id, value in zip(entity_ids, values):
            self._check_document(mapping, entity_id, value)
        with translate_errors(f"put_multi {kind.value}"):
            for entity_id, value in zip(entity_ids, values):
                self._stage(mapping, entity_id, value)
            self.session.flush()

    def query(self, kind: Kind, field: str, value: Any) -> list[Any]:
        mapping = DOCUMENT_MAPPINGS[kind]
        column = getattr(mapping.model, field, None)
        if column is None:
            raise ValueError(f"{kind.value} has no queryable field {field!r}")
        with translate_errors(f"query {kind.value} {field}={value!r}"):
            rows = self.session.scalars(
                select(mapping.model).where(column == value).order_by(mapping.model.id)
            ).all()
        return [mapping.to_document(row) for row in rows]

    def _check_document(self, mapping: DocumentMapping, entity_id: int, value: Any) -> None:
        if not isinstance(value, mapping.document_type):
            raise TypeError(
                f"expected {mapping.document_type.__name__}, got {type(value).__name__}"
            )
        if value.id != entity_id:
            raise ValueError(f"document id={value.id} does not match key id={entity_id}")

    def _stage(self, mapping: DocumentMapping, entity_id: int, value: Any) -> None:
        row = self.session.get(mapping.model, entity_id)
        if row is None:
            if mapping.versioned and value.version != 0:
                raise ConcurrentUpdateError(
                    f"{mapping.model.__tablename__} id={entity_id} disappeared since version {value.version}"
                )
            row = mapping.model(id=entity_id)
            mapping.apply_document(row, value)
            self.session.add(row)
            return

        if mapping.versioned and value.version != row.version:
            raise ConcurrentUpdateError(
                f"{mapping.model.__tablename__} id={entity_id} is at version {row.version}, "
                f"write was based on version {value.version}"
            )
        mapping.apply_document(row, value)


__all__ = ["DOCUMENT_MAPPINGS", "DocumentMapping", "SqlAlchemyDocumentStore", "translate_errors"]
