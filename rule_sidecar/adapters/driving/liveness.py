"""Liveness and readiness endpoints for container orchestration."""

import logging

from aiohttp import web

from rule_sidecar.core.health import HealthState

__all__ = ["HEALTH_KEY", "make_app", "start_liveness_server"]

logger = logging.getLogger(__name__)

HEALTH_KEY = web.AppKey("health", HealthState)


async def healthz(request: web.Request) -> web.Response:
    """Healthy only while the server is up and the last cycle succeeded."""
    if request.app[HEALTH_KEY].snapshot().is_healthy:
        return web.Response(status=200, text="OK")
    return web.Response(status=503, text="UNHEALTHY")


async def readyz(request: web.Request) -> web.Response:
    """Ready as soon as the server is listening."""
    return web.Response(status=200, text="READY")


def make_app(health: HealthState) -> web.Application:
    """Build the probe application reading from the given health state."""
    app = web.Application()
    app[HEALTH_KEY] = health
    app.router.add_get("/healthz", healthz)
    app.router.add_get("/readyz", readyz)
    return app


async def start_liveness_server(
    health: HealthState, port: int, host: str = "0.0.0.0"
) -> web.AppRunner:
    """Serve the probe endpoints in the running event loop.

    Probes only read the health state; they never wait for or trigger a
    reconciliation cycle. If the port cannot be bound, the failure is
    logged and health.server_up is cleared so /healthz-based checks fail.

    Args:
        health: Shared health state.
        port: TCP port to listen on.
        host: Interface to bind.

    Returns:
        The runner; call cleanup() on shutdown.
    """
    runner = web.AppRunner(make_app(health), access_log=None)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    try:
        await site.start()
    except OSError as e:
        logger.error(f"Health server error: {e}")
        health.server_up = False
        return runner

    logger.info(f"Health server listening on port {port}")
    return runner
