"""Application entrypoint."""

import argparse
import asyncio
import logging
import os

from rule_sidecar.adapters.driven.config import health_check
from rule_sidecar.adapters.driven.config.settings import ConfigError, load_settings
from rule_sidecar.adapters.driven.http.client import AdGuardClient
from rule_sidecar.adapters.driven.logging.logging_config import configure_logs, register_secret
from rule_sidecar.adapters.driven.metrics.cycle_metrics import CycleMetrics
from rule_sidecar.adapters.driving.liveness import start_liveness_server
from rule_sidecar.adapters.driving.signals import make_stop_on_sigterm
from rule_sidecar.core.event_loop import start_main_loop
from rule_sidecar.core.health import HealthState
from rule_sidecar.ports.settings import SettingsPort

__all__ = ["main", "run"]

logger = logging.getLogger(__name__)


async def main() -> int:
    """Start the rule sidecar.

    Startup sequence:
    1. Configure logging.
    2. Load and validate configuration (exit 1 on error, before any I/O).
    3. Start the liveness surface.
    4. Run the reconciliation loop, first cycle immediately.
    5. Gracefully shutdown on SIGTERM.

    Returns:
        Process exit code.
    """
    configure_logs(os.getenv("LOG_LEVEL") or "INFO")
    logger.info("Starting AdGuard rule sidecar...")

    try:
        config = load_settings()
    except ConfigError as exc:
        logger.error(
            "Configuration error: %s\n"
            "Hint: check ADGUARD_URL, ADGUARD_USER, ADGUARD_PASS, TARGET_RULE "
            "and the optional CHECK_INTERVAL, HEALTH_PORT, RULES_FORMAT, HTTP_TIMEOUT.",
            exc,
        )
        return 1

    register_secret(config.adguard_pass.get_secret_value())

    # Wrap config into port so core depends on interface (hexagonal)
    settings_port = SettingsPort(
        target_rule=config.target_rule,
        period_in_sec=config.check_interval_sec,
        health_port=config.health_port,
    )

    health = HealthState()
    stop = make_stop_on_sigterm()
    runner = await start_liveness_server(health, settings_port.health_port)

    client = AdGuardClient(
        config.adguard_url,
        config.adguard_user,
        config.adguard_pass.get_secret_value(),
        rules_format=config.rules_format,
        timeout=config.http_timeout_sec,
    )

    try:
        async with client as rules:
            await start_main_loop(
                settings=settings_port,
                rules=rules,
                health=health,
                stop=stop,
                metrics=CycleMetrics(),
            )
    except Exception as e:
        logger.error(f"Unhandled exception in main loop: {e}", exc_info=True)
        return 1
    finally:
        await runner.cleanup()

    logger.info("Rule sidecar stopped.")
    return 0


def run(argv: list[str] | None = None) -> int:
    """Parse the command line and dispatch to the selected mode.

    Args:
        argv: Arguments without the program name; defaults to sys.argv.

    Returns:
        Process exit code.
    """
    parser = argparse.ArgumentParser(
        prog="rule-sidecar",
        description="Keep one AdGuard Home user rule at the bottom of the list.",
    )
    parser.add_argument(
        "--health",
        action="store_true",
        help="Probe the local instance's liveness endpoint and exit",
    )
    args = parser.parse_args(argv)

    if args.health:
        return health_check.main()

    try:
        return asyncio.run(main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user (Ctrl+C).")
        return 0


if __name__ == "__main__":
    raise SystemExit(run())
