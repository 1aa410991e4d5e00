"""Rules port definition (interface and errors)."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

__all__ = ["RulesPort", "RulesError", "TransportError", "ProtocolError"]


class RulesError(Exception):
    """Base class for failures while talking to the rules API."""


class TransportError(RulesError):
    """Connection-level failure: unreachable host, timeout, reset."""


class ProtocolError(RulesError):
    """The API answered, but not with what we expected.

    Attributes:
        status_code: HTTP status of the response, None for decode errors.
    """

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RulesPort(Protocol):
    """Interface to the remote ordered rule list.

    Both operations make exactly one network call and never retry.
    """

    async def fetch(self) -> list[str]:
        """Read the current ordered user rules.

        Raises:
            TransportError: On connection failures or timeouts.
            ProtocolError: On non-success status or undecodable body.
        """
        ...

    async def write(self, rules: Sequence[str], /) -> None:
        """Replace the whole user rule list.

        Raises:
            TransportError: On connection failures or timeouts.
            ProtocolError: On non-success status.
        """
        ...
