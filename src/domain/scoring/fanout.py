"""Per-entity fan-out with optimistic retries and failure collection."""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import TypeVar

from domain.scoring.errors import ConcurrentUpdateError, EntityFailure

logger = logging.getLogger(__name__)

ItemT = TypeVar("ItemT")
ResultT = TypeVar("ResultT")


def run_with_retries(
    update: Callable[[], ResultT],
    *,
    attempts: int,
    label: str,
) -> ResultT:
    """Run one read-modify-write, re-running it when a concurrent writer won."""
    if attempts <= 0:
        raise ValueError("attempts must be greater than 0")

    attempt = 1
    while True:
        try:
            return update()
        except ConcurrentUpdateError as exc:
            if attempt >= attempts:
                raise
            logger.warning(
                "%s: concurrent update detected (%s), retrying %d/%d",
                label,
                exc,
                attempt,
                attempts - 1,
            )
            attempt += 1


def fan_out(
    items: Sequence[ItemT],
    update: Callable[[ItemT], ResultT],
    *,
    entity_kind: str,
    entity_id: Callable[[ItemT], int],
    max_workers: int = 1,
) -> tuple[list[ResultT], list[EntityFailure]]:
    """Apply ``update`` to every item, collecting failures instead of stopping.

    Results and failures keep the input order regardless of ``max_workers``.
    """
    if max_workers <= 0:
        raise ValueError("max_workers must be greater than 0")

    def _guarded(item: ItemT) -> tuple[ResultT | None, EntityFailure | None]:
        try:
            return update(item), None
        except Exception as exc:
            logger.exception("%s id=%s: update failed", entity_kind, entity_id(item))
            return None, EntityFailure(entity_kind=entity_kind, entity_id=entity_id(item), error=exc)

    if max_workers > 1 and len(items) > 1:
        with ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix=f"score-{entity_kind}") as executor:
            outcomes = list(executor.map(_guarded, items))
    else:
        outcomes = [_guarded(item) for item in items]

    results: list[ResultT] = []
    failures: list[EntityFailure] = []
    for result, failure in outcomes:
        if failure is not None:
            failures.append(failure)
        elif result is not None:
            results.append(result)
    return results, failures


__all__ = ["fan_out", "run_with_retries"]
