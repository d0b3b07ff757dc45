"""Append-only running-average series used for score and accuracy history."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class RunningAverageSeries:
    """Sequence of derived averages, oldest first.

    Each append stores ``(sum(values) + sample) / (len(values) + 1)``. Once two or
    more values exist this averages the stored averages together with the new
    raw sample, which is not the arithmetic mean of the raw samples. The
    ordering of appends therefore matters.
    """

    values: tuple[float, ...] = ()

    @classmethod
    def from_values(cls, values: Iterable[float]) -> RunningAverageSeries:
        return cls(tuple(float(value) for value in values))

    def __len__(self) -> int:
        return len(self.values)

    @property
    def is_empty(self) -> bool:
        return not self.values

    @property
    def latest(self) -> float | None:
        """Current value, or ``None`` when nothing has been recorded yet."""
        if not self.values:
            return None
        return self.values[-1]

    def append(self, sample: float) -> tuple[RunningAverageSeries, float]:
        """Return the extended series and the value that was appended."""
        computed = (sum(self.values) + float(sample)) / (len(self.values) + 1)
        return RunningAverageSeries(self.values + (computed,)), computed

    def progression(self, limit: int | None = None) -> list[float]:
        """Values newest first, capped to the ``limit`` most recent when positive."""
        newest_first = list(reversed(self.values))
        if limit is not None and limit > 0:
            return newest_first[:limit]
        return newest_first


__all__ = ["RunningAverageSeries"]
