"""Healthcheck client for container orchestration.

Probes the liveness endpoint of an already-running sidecar on this host.
"""

import asyncio
import logging
import os

import aiohttp
from aiohttp import ClientTimeout

from rule_sidecar.adapters.driven.config.settings import DEFAULT_HEALTH_PORT
from rule_sidecar.adapters.driven.logging.logging_config import configure_logs

__all__ = ["main", "probe"]

logger = logging.getLogger(__name__)

PROBE_TIMEOUT = 5


async def probe(url: str, timeout: float = PROBE_TIMEOUT) -> bool:
    """Check if the liveness endpoint answers 200.

    Args:
        url: URL to probe.
        timeout: Timeout in seconds.

    Returns:
        True if the endpoint returned 200, False on any other status or error.
    """
    try:
        async with aiohttp.ClientSession(timeout=ClientTimeout(total=timeout)) as session:
            async with session.get(url) as resp:
                logger.debug(f"Probe for {url} returned status {resp.status}")
                return resp.status == 200
    except (aiohttp.ClientError, asyncio.TimeoutError) as e:
        logger.warning(f"Probe failed for {url}: {e}")
        return False


def main() -> int:
    """Run one liveness probe against the local instance.

    Only HEALTH_PORT is read from the environment; the rest of the
    configuration is not required in this mode.

    Returns:
        0 if healthy, 1 if unhealthy.
    """
    configure_logs("WARNING")

    port = os.getenv("HEALTH_PORT") or str(DEFAULT_HEALTH_PORT)
    url = f"http://localhost:{port}/healthz"

    if not asyncio.run(probe(url)):
        logger.error(f"Sidecar healthcheck FAILED ({url})")
        return 1

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
