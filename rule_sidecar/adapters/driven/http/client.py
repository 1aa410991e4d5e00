"""AdGuard Home HTTP client adapter for the user rules list."""

import asyncio
import base64
import logging
from collections.abc import Sequence
from types import TracebackType
from typing import Literal

import aiohttp
from aiohttp import ClientTimeout
from pydantic import BaseModel, ValidationError

from rule_sidecar.ports.rules import ProtocolError, TransportError

__all__ = ["AdGuardClient", "FilteringStatus", "RulesFormat"]

logger = logging.getLogger(__name__)

STATUS_PATH = "/control/filtering/status"
SET_RULES_PATH = "/control/filtering/set_rules"
REQUEST_TIMEOUT = 10
HTTP_OK = 200

RulesFormat = Literal["json", "text"]

_CONTENT_TYPES: dict[str, str] = {
    "json": "application/json",
    "text": "text/plain",
}


class FilteringStatus(BaseModel):
    """Subset of the filtering status response we rely on."""

    user_rules: list[str] | None = None


class AdGuardClient:
    """Reads and replaces the AdGuard user rules.

    Features:
    - Basic authentication on every call.
    - Fixed per-call timeout, one attempt per call.
    - Write body encoding chosen by configuration (JSON envelope or
      newline-joined plain text).
    - Context manager for proper resource cleanup.
    """

    def __init__(
        self,
        base_url: str,
        username: str,
        password: str,
        *,
        rules_format: RulesFormat = "json",
        timeout: float = REQUEST_TIMEOUT,
    ) -> None:
        """Initialize AdGuard client.

        Args:
            base_url: AdGuard Home address without trailing slash.
            username: Basic auth user.
            password: Basic auth password.
            rules_format: Body encoding for set_rules ("json" or "text").
            timeout: Total timeout for each call in seconds.
        """
        if rules_format not in _CONTENT_TYPES:
            raise ValueError(f"Unsupported rules format: {rules_format}")
        self.base_url = base_url.rstrip("/")
        self.rules_format = rules_format
        token = base64.b64encode(f"{username}:{password}".encode()).decode("ascii")
        self._headers = {"Authorization": f"Basic {token}"}
        self._timeout = ClientTimeout(total=timeout)
        self.session: aiohttp.ClientSession | None = None

    def __repr__(self) -> str:
        return f"AdGuardClient(base_url={self.base_url!r}, rules_format={self.rules_format!r})"

    async def __aenter__(self) -> "AdGuardClient":
        """Enter async context manager (start session).

        Returns:
            Self for use in async with statement.
        """
        self.session = aiohttp.ClientSession(headers=self._headers, timeout=self._timeout)
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        """Exit async context manager (close session)."""
        if self.session:
            await self.session.close()

    def _session(self) -> aiohttp.ClientSession:
        if self.session is None:
            raise RuntimeError("Session not initialized; use 'async with' context manager")
        return self.session

    async def _send(self, method: str, path: str, **kwargs: object) -> bytes:
        """Send one request and return the raw response body.

        Raises:
            TransportError: On connection failures or timeouts.
            ProtocolError: On a non-200 status.
        """
        url = f"{self.base_url}{path}"
        try:
            async with self._session().request(method, url, **kwargs) as resp:
                status = resp.status
                body = await resp.read()
        except asyncio.TimeoutError as e:
            raise TransportError(f"{method} {path} timed out") from e
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {path} failed: {e}") from e

        if status != HTTP_OK:
            text = body.decode(errors="replace").strip()
            raise ProtocolError(
                f"{method} {path}: unexpected status code {status}: {text}",
                status_code=status,
            )
        return body

    async def fetch(self) -> list[str]:
        """Fetch the current user rules.

        Returns:
            Rules in stored order; a missing list is returned as empty.

        Raises:
            TransportError: On connection failures or timeouts.
            ProtocolError: On non-200 status or undecodable body.
        """
        body = await self._send("GET", STATUS_PATH)
        try:
            status = FilteringStatus.model_validate_json(body)
        except (UnicodeDecodeError, ValidationError) as e:
            raise ProtocolError(f"GET {STATUS_PATH}: cannot decode response: {e}") from e

        return list(status.user_rules or [])

    async def write(self, rules: Sequence[str]) -> None:
        """Replace the user rules with the given list.

        The whole list is submitted; anything omitted is deleted remotely.

        Raises:
            TransportError: On connection failures or timeouts.
            ProtocolError: On non-200 status.
        """
        headers = {"Content-Type": _CONTENT_TYPES[self.rules_format]}
        if self.rules_format == "json":
            kwargs: dict[str, object] = {"json": {"rules": list(rules)}}
        else:
            kwargs = {"data": "\n".join(rules).encode()}

        logger.debug(f"Submitting {len(rules)} rules as {self.rules_format}")
        await self._send("POST", SET_RULES_PATH, headers=headers, **kwargs)
