"""Tests for main application entrypoint."""

import asyncio
from unittest.mock import AsyncMock, Mock, patch

import pytest
from pydantic import SecretStr

from rule_sidecar.adapters.driven.config.settings import ConfigError, Settings
from rule_sidecar.main import main, run
from rule_sidecar.ports.settings import SettingsPort

__all__ = []


def make_config() -> Settings:
    return Settings(
        adguard_url="http://adguard.local:3000",
        adguard_user="admin",
        adguard_pass=SecretStr("s3cr3t-pass"),
        target_rule="target",
        check_interval_sec=30,
        health_port=9090,
        rules_format="text",
    )


@pytest.mark.asyncio
async def test_main_exits_non_zero_on_config_error() -> None:
    """A configuration error aborts before any network activity."""
    with (
        patch("rule_sidecar.main.configure_logs"),
        patch("rule_sidecar.main.load_settings", side_effect=ConfigError("TARGET_RULE")),
        patch("rule_sidecar.main.start_liveness_server", new_callable=AsyncMock) as mock_server,
        patch("rule_sidecar.main.AdGuardClient") as mock_client_class,
        patch("rule_sidecar.main.start_main_loop", new_callable=AsyncMock) as mock_loop,
    ):
        result = await main()

    assert result == 1
    mock_server.assert_not_called()
    mock_client_class.assert_not_called()
    mock_loop.assert_not_called()


@pytest.mark.asyncio
async def test_main_starts_and_runs_successfully() -> None:
    """Main wires settings, client, liveness server and loop together."""
    runner = AsyncMock()
    stop = asyncio.Event()
    with (
        patch("rule_sidecar.main.configure_logs"),
        patch("rule_sidecar.main.register_secret") as mock_register,
        patch("rule_sidecar.main.load_settings", return_value=make_config()),
        patch("rule_sidecar.main.make_stop_on_sigterm", return_value=stop),
        patch(
            "rule_sidecar.main.start_liveness_server",
            new_callable=AsyncMock,
            return_value=runner,
        ) as mock_server,
        patch("rule_sidecar.main.AdGuardClient") as mock_client_class,
        patch("rule_sidecar.main.start_main_loop", new_callable=AsyncMock) as mock_loop,
    ):
        mock_client = AsyncMock()
        mock_client_class.return_value = mock_client
        mock_client.__aenter__.return_value = mock_client

        result = await main()

    assert result == 0
    mock_register.assert_called_once_with("s3cr3t-pass")
    mock_client_class.assert_called_once_with(
        "http://adguard.local:3000",
        "admin",
        "s3cr3t-pass",
        rules_format="text",
        timeout=10,
    )
    health = mock_server.call_args.args[0]
    assert mock_server.call_args.args[1] == 9090

    kwargs = mock_loop.call_args.kwargs
    assert kwargs["settings"] == SettingsPort(target_rule="target", period_in_sec=30, health_port=9090)
    assert kwargs["rules"] is mock_client
    assert kwargs["health"] is health
    assert kwargs["stop"] is stop
    runner.cleanup.assert_awaited_once()


@pytest.mark.asyncio
async def test_main_logs_and_fails_on_loop_exception() -> None:
    """An exception escaping the loop is logged and the runner still cleaned up."""
    runner = AsyncMock()
    with (
        patch("rule_sidecar.main.configure_logs"),
        patch("rule_sidecar.main.register_secret"),
        patch("rule_sidecar.main.load_settings", return_value=make_config()),
        patch("rule_sidecar.main.make_stop_on_sigterm", return_value=asyncio.Event()),
        patch(
            "rule_sidecar.main.start_liveness_server",
            new_callable=AsyncMock,
            return_value=runner,
        ),
        patch("rule_sidecar.main.AdGuardClient") as mock_client_class,
        patch(
            "rule_sidecar.main.start_main_loop",
            new_callable=AsyncMock,
            side_effect=RuntimeError("Test error in loop"),
        ),
        patch("rule_sidecar.main.logger") as mock_logger,
    ):
        mock_client = AsyncMock()
        mock_client_class.return_value = mock_client
        mock_client.__aenter__.return_value = mock_client

        try:
            result = await main()
        except RuntimeError:
            pytest.fail("main() should not raise; exceptions are caught internally")

    assert result == 1
    mock_logger.error.assert_called()
    runner.cleanup.assert_awaited_once()


def test_run_health_mode_dispatches_to_probe() -> None:
    """--health runs the local probe instead of the loop."""
    with (
        patch("rule_sidecar.main.health_check.main", return_value=0) as mock_probe,
        patch("rule_sidecar.main.asyncio.run") as mock_run,
    ):
        assert run(["--health"]) == 0

    mock_probe.assert_called_once_with()
    mock_run.assert_not_called()


def test_run_health_mode_propagates_failure() -> None:
    """A failed probe gives a non-zero exit code."""
    with patch("rule_sidecar.main.health_check.main", return_value=1):
        assert run(["--health"]) == 1


def test_run_default_mode_runs_main() -> None:
    """Without flags the reconciliation service is started."""
    with (
        patch("rule_sidecar.main.main", new=Mock(return_value="coro")),
        patch("rule_sidecar.main.asyncio.run", return_value=0) as mock_run,
    ):
        assert run([]) == 0

    mock_run.assert_called_once_with("coro")
