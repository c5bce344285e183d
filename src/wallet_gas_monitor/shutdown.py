"""Signal-driven shutdown for the monitor loop.

Usage:
    ```python
    async with GracefulShutdown() as shutdown:
        await run_forever(cycle, interval_minutes=30, shutdown=shutdown)
    ```
"""

from __future__ import annotations

import asyncio
import logging
import signal
import sys
from contextlib import suppress
from typing import Any

logger = logging.getLogger(__name__)

SHUTDOWN_SIGNALS = (signal.SIGTERM, signal.SIGINT)


class GracefulShutdown:
    """Traps SIGTERM and SIGINT and exposes them as an awaitable event.

    A second signal while shutdown is already pending exits immediately.
    """

    def __init__(self) -> None:
        self._event = asyncio.Event()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._installed: list[signal.Signals] = []

    @property
    def is_shutdown_requested(self) -> bool:
        return self._event.is_set()

    def request_shutdown(self) -> None:
        """Programmatically request shutdown."""
        if not self._event.is_set():
            logger.info("Shutdown requested")
            self._event.set()

    async def wait(self) -> None:
        """Block until shutdown is requested."""
        await self._event.wait()

    async def wait_for(self, timeout: float) -> bool:
        """Wait up to ``timeout`` seconds.

        Returns:
            True if shutdown was requested, False if the timeout elapsed.
        """
        try:
            await asyncio.wait_for(self._event.wait(), timeout=timeout)
        except TimeoutError:
            return False
        return True

    def _handle_signal(self, sig: signal.Signals) -> None:
        if self._event.is_set():
            logger.warning("Received %s again - forcing exit!", sig.name)
            sys.exit(128 + sig.value)
        logger.info("Received %s - shutting down after the current check...", sig.name)
        self._event.set()

    def install_signal_handlers(self) -> None:
        self._loop = asyncio.get_running_loop()
        for sig in SHUTDOWN_SIGNALS:
            try:
                self._loop.add_signal_handler(sig, self._handle_signal, sig)
                self._installed.append(sig)
            except (NotImplementedError, ValueError, OSError) as e:
                # add_signal_handler is not available on Windows event loops
                logger.warning("Could not install handler for %s: %s", sig.name, e)

    def remove_signal_handlers(self) -> None:
        if self._loop is None:
            return
        for sig in self._installed:
            with suppress(ValueError, OSError):
                self._loop.remove_signal_handler(sig)
        self._installed.clear()

    async def __aenter__(self) -> GracefulShutdown:
        self.install_signal_handlers()
        return self

    async def __aexit__(self, *_args: Any) -> None:
        self.remove_signal_handlers()
