"""Error taxonomy for match-finished scoring."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any


class ScoringError(Exception):
    """Base class for scoring engine errors."""


class NotFoundError(ScoringError):
    def __init__(self, kind: str, entity_id: int) -> None:
        super().__init__(f"{kind} id={entity_id} not found")
        self.kind = kind
        self.entity_id = entity_id


class PersistenceError(ScoringError):
    """The underlying store rejected a read or write."""


class ConcurrentUpdateError(PersistenceError):
    """Another writer changed the entity between read and write."""


@dataclass(frozen=True)
class EntityFailure:
    entity_kind: str
    entity_id: int
    error: Exception

    def __str__(self) -> str:
        return f"{self.entity_kind} id={self.entity_id}: {self.error}"


class PartialBatchFailure(ScoringError):
    """Some per-entity updates failed while the rest were applied.

    Applied writes are not rolled back. ``summary`` holds whatever the
    aggregator managed to produce.
    """

    def __init__(self, failures: tuple[EntityFailure, ...], summary: Any = None) -> None:
        details = "; ".join(str(failure) for failure in failures)
        super().__init__(f"{len(failures)} update(s) failed: {details}")
        self.failures = failures
        self.summary = summary

    def failed_ids(self, entity_kind: str) -> frozenset[int]:
        return frozenset(f.entity_id for f in self.failures if f.entity_kind == entity_kind)

    @property
    def failed_user_ids(self) -> frozenset[int]:
        return self.failed_ids("user")

    @property
    def failed_team_ids(self) -> frozenset[int]:
        return self.failed_ids("team")


__all__ = [
    "ConcurrentUpdateError",
    "EntityFailure",
    "NotFoundError",
    "PartialBatchFailure",
    "PersistenceError",
    "ScoringError",
]
