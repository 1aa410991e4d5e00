"""Main loop that periodically enforces the target rule position."""

import asyncio
import contextlib
import logging

from rule_sidecar.core.health import HealthState
from rule_sidecar.core.reconciler import Action, NoOp, decide
from rule_sidecar.ports.metrics import CycleOutcomeDto, MetricsPort
from rule_sidecar.ports.rules import ProtocolError, RulesError, RulesPort
from rule_sidecar.ports.settings import SettingsPort

__all__ = ["run_cycle", "start_main_loop", "get_now_time"]

logger = logging.getLogger(__name__)


def get_now_time() -> float:
    """Get current monotonic time in seconds.

    Uses event loop's monotonic clock for accurate scheduling
    without wall-clock drift.

    Returns:
        Current time in seconds (monotonic).
    """
    return asyncio.get_running_loop().time()


async def run_cycle(settings: SettingsPort, rules: RulesPort) -> Action:
    """Run one fetch, decide, write sequence.

    Makes exactly one fetch and at most one write, never retries.

    Args:
        settings: Runtime configuration (target rule).
        rules: Port to the remote rule list.

    Returns:
        The action that was decided (and applied, for Reorder).

    Raises:
        RulesError: If fetching or writing the rules failed.
    """
    current = await rules.fetch()
    logger.info(f"Fetched {len(current)} user rules")

    action = decide(current, settings.target_rule)
    if isinstance(action, NoOp):
        logger.info("Target rule is already at the bottom. No action needed.")
        return action

    total = len(action.rules)
    logger.info(f"Moving target rule to bottom position (rule {total} of {total})")
    await rules.write(action.rules)
    logger.info("Successfully updated user rules")
    return action


async def _reconcile_once(
    settings: SettingsPort,
    rules: RulesPort,
    health: HealthState,
    metrics: MetricsPort | None,
) -> None:
    """Run one cycle, log its outcome and publish it to health and metrics."""
    started = get_now_time()
    ok = False
    reordered = False
    try:
        action = await run_cycle(settings, rules)
        ok = True
        reordered = not isinstance(action, NoOp)
    except ProtocolError as e:
        if e.status_code is None:
            logger.error(f"Reconciliation failed: {e}")
        else:
            logger.error(f"Reconciliation failed (status={e.status_code}): {e}")
    except RulesError as e:
        logger.error(f"Reconciliation failed: {e}")
    except Exception as e:  # noqa: BLE001
        logger.error(f"Unexpected error in reconciliation cycle: {e}", exc_info=True)

    health.last_cycle_ok = ok

    if metrics is not None:
        metrics.update(
            CycleOutcomeDto(
                started_at_sec=started,
                finished_at_sec=get_now_time(),
                is_failed=not ok,
                reordered=reordered,
            )
        )
        logger.info(f"Cycle metrics: {metrics}")


async def _wait(stop: asyncio.Event, delay_sec: float) -> None:
    """Sleep for delay_sec, waking early if stop gets set."""
    with contextlib.suppress(asyncio.TimeoutError):
        await asyncio.wait_for(stop.wait(), timeout=delay_sec)


async def start_main_loop(
    settings: SettingsPort,
    rules: RulesPort,
    health: HealthState,
    stop: asyncio.Event,
    metrics: MetricsPort | None = None,
) -> None:
    """Run the reconciliation loop until stop is set.

    Runs one cycle immediately, then one per period on the monotonic clock.
    Cycles run strictly one after the other: ticks that elapse while a slow
    cycle is still running are dropped rather than fired in a burst.

    Args:
        settings: Runtime configuration (target rule, period).
        rules: Port to the remote rule list.
        health: Shared health state, updated after every cycle.
        stop: Event that ends the loop once set.
        metrics: Optional collector for cycle outcomes.

    Notes:
        - A failed cycle never stops the loop and there is no backoff: the
          next cycle always happens at the normal period.
    """
    period = settings.period_in_sec
    next_tick: float = get_now_time()

    while not stop.is_set():
        await _reconcile_once(settings, rules, health, metrics)

        next_tick += period
        now = get_now_time()
        if period > 0 and next_tick < now:
            skipped = int((now - next_tick) // period) + 1
            logger.warning(f"Cycle overran its period, skipping {skipped} tick(s)")
            next_tick += skipped * period

        await _wait(stop, max(0, next_tick - now))

    logger.info("Reconciliation loop stopped.")
