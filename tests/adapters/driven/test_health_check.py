"""Tests for the local liveness probe client."""

from unittest.mock import AsyncMock, patch

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from rule_sidecar.adapters.driven.config.health_check import main, probe

__all__ = []


def make_app(status: int) -> web.Application:
    async def healthz(request: web.Request) -> web.Response:
        return web.Response(status=status, text="OK" if status == 200 else "UNHEALTHY")

    app = web.Application()
    app.router.add_get("/healthz", healthz)
    return app


@pytest.mark.asyncio
async def test_probe_success() -> None:
    """probe() should return True on a 200 response."""
    async with TestServer(make_app(200)) as server:
        assert await probe(str(server.make_url("/healthz"))) is True


@pytest.mark.asyncio
async def test_probe_unhealthy_status() -> None:
    """probe() should return False on 503."""
    async with TestServer(make_app(503)) as server:
        assert await probe(str(server.make_url("/healthz"))) is False


@pytest.mark.asyncio
async def test_probe_connection_refused() -> None:
    """probe() should return False when nothing listens."""
    async with TestServer(make_app(200)) as server:
        url = str(server.make_url("/healthz"))

    assert await probe(url) is False


def test_health_check_success(monkeypatch: pytest.MonkeyPatch) -> None:
    """Health check should return 0 when the local probe succeeds."""
    monkeypatch.setenv("HEALTH_PORT", "9123")
    with (
        patch("rule_sidecar.adapters.driven.config.health_check.configure_logs"),
        patch(
            "rule_sidecar.adapters.driven.config.health_check.probe",
            new_callable=AsyncMock,
        ) as mock_probe,
    ):
        mock_probe.return_value = True
        result = main()

    assert result == 0
    mock_probe.assert_awaited_once_with("http://localhost:9123/healthz")


def test_health_check_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    """Health check should return 1 when the local probe fails."""
    monkeypatch.delenv("HEALTH_PORT", raising=False)
    with (
        patch("rule_sidecar.adapters.driven.config.health_check.configure_logs"),
        patch(
            "rule_sidecar.adapters.driven.config.health_check.probe",
            new_callable=AsyncMock,
        ) as mock_probe,
    ):
        mock_probe.return_value = False
        result = main()

    assert result == 1
    mock_probe.assert_awaited_once_with("http://localhost:8080/healthz")


def test_health_check_does_not_need_full_config(monkeypatch: pytest.MonkeyPatch) -> None:
    """The probe mode works without the AdGuard settings."""
    for name in ("ADGUARD_URL", "ADGUARD_USER", "ADGUARD_PASS", "TARGET_RULE"):
        monkeypatch.delenv(name, raising=False)
    with (
        patch("rule_sidecar.adapters.driven.config.health_check.configure_logs"),
        patch(
            "rule_sidecar.adapters.driven.config.health_check.probe",
            new_callable=AsyncMock,
            return_value=True,
        ),
    ):
        assert main() == 0
