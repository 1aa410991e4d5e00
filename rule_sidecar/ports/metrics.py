"""Metrics port definition (interface and DTO)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

__all__ = ["CycleOutcomeDto", "MetricsPort"]


@dataclass(slots=True, frozen=True)
class CycleOutcomeDto:
    """Immutable snapshot of a single reconciliation cycle.

    Attributes:
        started_at_sec: Monotonic seconds when the cycle began.
        finished_at_sec: Monotonic seconds when the cycle ended.
        is_failed: True if fetch or write failed.
        reordered: True if a corrected list was written.
    """

    started_at_sec: float
    finished_at_sec: float
    is_failed: bool = False
    reordered: bool = False


class MetricsPort(Protocol):
    """Interface for recording cycle outcomes.

    Core calls update() after each cycle; the loop logs __str__().
    """

    def update(self, outcome: CycleOutcomeDto, /) -> None:
        """Record a finished cycle.

        Args:
            outcome: The cycle to record.
        """
        ...

    def __str__(self) -> str:
        """Return concise textual summary for humans."""
        ...
