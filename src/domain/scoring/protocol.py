"""Collaborator contracts for the scoring engine."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from contextlib import AbstractContextManager
from enum import Enum
from typing import Any, Protocol, runtime_checkable


class Kind(str, Enum):
    """Document kinds held by the store."""

    USER = "user"
    TEAM = "team"
    SCORE = "score"
    ACCURACY = "accuracy"
    LEDGER = "ledger"


@runtime_checkable
class DocumentStore(Protocol):
    """Key/document persistence used by the aggregators.

    ``get`` raises ``NotFoundError`` for a missing id; ``get_multi`` returns
    ``None`` in place of missing ids. Store failures raise ``PersistenceError``.
    """

    def allocate_id(self, kind: Kind) -> int: ...

    def get(self, kind: Kind, entity_id: int) -> Any: ...

    def put(self, kind: Kind, entity_id: int, value: Any) -> None: ...

    def get_multi(self, kind: Kind, entity_ids: Sequence[int]) -> list[Any | None]: ...

    def put_multi(self, kind: Kind, entity_ids: Sequence[int], values: Sequence[Any]) -> None: ...

    def query(self, kind: Kind, field: str, value: Any) -> list[Any]: ...


StoreScope = Callable[[], AbstractContextManager[DocumentStore]]
"""Opens one unit of work; commits when the block exits cleanly."""


@runtime_checkable
class ActivityPublisher(Protocol):
    """Fire-and-forget sink for team activity events."""

    def publish_team_activity(self, team_id: int, activity_type: str, message: str) -> None: ...


__all__ = ["ActivityPublisher", "DocumentStore", "Kind", "StoreScope"]
