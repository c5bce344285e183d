"""Recurring trigger for check cycles."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from wallet_gas_monitor.cycle import CycleResult
    from wallet_gas_monitor.shutdown import GracefulShutdown

logger = logging.getLogger(__name__)


class Runnable(Protocol):
    async def run(self) -> CycleResult: ...


async def run_forever(
    cycle: Runnable,
    *,
    interval_minutes: int,
    shutdown: GracefulShutdown,
    clock: Callable[[], float] | None = None,
) -> int:
    """Run a cycle now and then every ``interval_minutes`` until shutdown.

    Cycles start on a fixed period: the time a cycle takes is subtracted
    from the following wait. A cycle that overruns the interval is followed
    by the next one immediately. A cycle that raises unexpectedly is logged
    and the next tick still runs.

    Args:
        cycle: Object whose ``run()`` performs one check.
        interval_minutes: Period between cycle starts.
        shutdown: Stops the loop and wakes it from its wait.
        clock: Monotonic seconds, defaults to the running loop's clock.

    Returns:
        Number of cycles started.
    """
    if clock is None:
        clock = asyncio.get_running_loop().time
    interval_seconds = interval_minutes * 60
    runs = 0

    while not shutdown.is_shutdown_requested:
        runs += 1
        started = clock()
        try:
            await cycle.run()
        except Exception:
            logger.exception("Balance check failed unexpectedly")

        elapsed = clock() - started
        delay = max(0.0, interval_seconds - elapsed)
        logger.info("Next check in %.0f second(s)", delay)
        if await shutdown.wait_for(delay):
            break

    logger.info("Scheduler stopped after %d check(s)", runs)
    return runs
