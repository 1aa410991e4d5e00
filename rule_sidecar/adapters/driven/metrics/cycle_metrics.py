"""In-memory sliding-window metrics for reconciliation cycles."""

from __future__ import annotations

import statistics
from collections import deque
from dataclasses import dataclass

from rule_sidecar.ports.metrics import CycleOutcomeDto, MetricsPort

__all__ = ["CycleMetrics"]


@dataclass(slots=True, frozen=True)
class _Sample:
    """Internal record for one cycle."""

    duration_ms: float
    failed: bool
    reordered: bool


class CycleMetrics(MetricsPort):
    """Lock-free metrics for async context.

    Tracks:
    - Average cycle duration.
    - Failure rate.
    - Number of corrective writes in the window.
    - Total cycles seen.

    Not thread-safe; create one instance per event loop.
    """

    def __init__(self, *, window_size: int = 100) -> None:
        """Initialize metrics collector.

        Args:
            window_size: Number of recent cycles to keep for statistics.
        """
        self._window: deque[_Sample] = deque(maxlen=window_size)
        self._total_seen: int = 0

    def update(self, outcome: CycleOutcomeDto) -> None:
        """Record a finished cycle.

        Args:
            outcome: Cycle with timing and result info.
        """
        duration_ms = (outcome.finished_at_sec - outcome.started_at_sec) * 1_000.0
        self._window.append(
            _Sample(
                duration_ms=duration_ms,
                failed=outcome.is_failed,
                reordered=outcome.reordered,
            )
        )
        self._total_seen += 1

    def __str__(self) -> str:
        """Return human-readable one-line summary for logging."""
        if not self._window:
            return "Metrics: waiting for data …"

        n_window = len(self._window)
        failures = sum(1 for s in self._window if s.failed)
        fail_pct = (failures / n_window) * 100
        reorders = sum(1 for s in self._window if s.reordered)
        avg_duration = statistics.fmean(s.duration_ms for s in self._window)
        last = "failed" if self._window[-1].failed else "ok"

        return (
            f"duration={avg_duration:6.1f} ms | "
            f"last={last} | "
            f"fail={fail_pct:5.1f}% | "
            f"reorders={reorders} | "
            f"win={n_window}/{self._window.maxlen} | "
            f"total={self._total_seen}"
        )
