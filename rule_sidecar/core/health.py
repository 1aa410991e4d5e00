"""Health state shared between the reconciliation loop and the probes."""

from __future__ import annotations

import threading
from dataclasses import dataclass

__all__ = ["HealthSnapshot", "HealthState"]


@dataclass(slots=True, frozen=True)
class HealthSnapshot:
    """Point-in-time copy of the health flags."""

    server_up: bool
    last_cycle_ok: bool

    @property
    def is_healthy(self) -> bool:
        return self.server_up and self.last_cycle_ok


class HealthState:
    """Thread-safe holder for the two health flags.

    The loop writes after every cycle, the liveness surface reads on every
    probe. The lock only guards attribute access and is never held across
    I/O.
    """

    def __init__(self, *, server_up: bool = True, last_cycle_ok: bool = True) -> None:
        self._lock = threading.Lock()
        self._server_up = server_up
        self._last_cycle_ok = last_cycle_ok

    @property
    def server_up(self) -> bool:
        with self._lock:
            return self._server_up

    @server_up.setter
    def server_up(self, value: bool) -> None:
        with self._lock:
            self._server_up = value

    @property
    def last_cycle_ok(self) -> bool:
        with self._lock:
            return self._last_cycle_ok

    @last_cycle_ok.setter
    def last_cycle_ok(self, value: bool) -> None:
        with self._lock:
            self._last_cycle_ok = value

    def snapshot(self) -> HealthSnapshot:
        """Return both flags read together."""
        with self._lock:
            return HealthSnapshot(server_up=self._server_up, last_cycle_ok=self._last_cycle_ok)
