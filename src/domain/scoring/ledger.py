"""De-duplication ledger for (entity, match) applications."""

from __future__ import annotations

from datetime import UTC, datetime

from domain.scoring.protocol import DocumentStore, Kind
from domain.scoring.records import LedgerEntry, ledger_key


def already_applied(
    store: DocumentStore,
    *,
    entity_kind: str,
    entity_id: int,
    tournament_id: int,
    match_id: int,
) -> bool:
    key = ledger_key(entity_kind, entity_id, tournament_id, match_id)
    return bool(store.query(Kind.LEDGER, "key", key))


def mark_applied(
    store: DocumentStore,
    *,
    entity_kind: str,
    entity_id: int,
    tournament_id: int,
    match_id: int,
) -> LedgerEntry:
    """Write the ledger entry inside the caller's unit of work."""
    entry = LedgerEntry(
        id=store.allocate_id(Kind.LEDGER),
        key=ledger_key(entity_kind, entity_id, tournament_id, match_id),
        recorded_at=datetime.now(UTC).replace(tzinfo=None),
    )
    store.put(Kind.LEDGER, entry.id, entry)
    return entry


__all__ = ["already_applied", "mark_applied"]
