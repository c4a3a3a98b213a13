"""
Polling Scheduler

Provides PollingLoop, which repeats an async callback forever with a
fixed pause between runs.

The next wait starts only after the previous callback has finished, so
runs never overlap and a slow remote service is not hammered. The cost is
that cycle time drifts by however long each callback takes.

Usage:
    async def refresh():
        ...

    loop = PollingLoop(30.0, refresh, name="flags")
    await loop.start()

    # Later:
    await loop.stop()
"""

import asyncio
import time
from typing import Awaitable, Callable

from .logging_setup import ManagerLogger, NullLogger

Sleep = Callable[[float], Awaitable[None]]


class PollingLoop:
    """
    Self-rescheduling interval loop.

    A callback that raises is logged on the error channel and the loop
    keeps going; only stop() ends it.

    Attributes:
        interval: Seconds to wait between the end of one run and the next
        callback: Async function to call each interval
        name: Name for logging/identification
    """

    def __init__(
        self,
        interval_seconds: float,
        callback: Callable[[], Awaitable[object]],
        name: str = "unnamed",
        logger: ManagerLogger | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        if interval_seconds <= 0:
            raise ValueError(f"interval must be positive, got {interval_seconds}")

        self.interval = interval_seconds
        self.callback = callback
        self.name = name
        self.logger = logger or NullLogger()
        self._sleep = sleep

        self._running = False
        self._task: asyncio.Task | None = None

        # Observability metrics
        self._execution_count: int = 0
        self._error_count: int = 0
        self._last_execution_time: float = 0
        self._last_error: str | None = None

    async def start(self) -> None:
        """Start the loop in a background task."""
        if self._running:
            return

        self._running = True
        self._task = asyncio.create_task(self._run(), name=f"polling-{self.name}")

    async def stop(self) -> None:
        """Stop the loop and wait for the task to finish."""
        self._running = False
        task, self._task = self._task, None
        if task is None:
            return

        task.cancel()
        # Collects the loop's own cancellation; a cancel aimed at the caller still raises
        await asyncio.gather(task, return_exceptions=True)

    async def _run(self) -> None:
        while self._running:
            await self._sleep(self.interval)

            if not self._running:
                break

            try:
                start = time.monotonic()
                await self.callback()
                self._last_execution_time = time.monotonic() - start
                self._execution_count += 1
            except Exception as e:
                self._error_count += 1
                self._last_error = str(e)
                self.logger.error(f"scheduled refresh '{self.name}' failed: {e!r}")

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def execution_count(self) -> int:
        """Total number of successful executions."""
        return self._execution_count

    @property
    def error_count(self) -> int:
        """Number of executions that raised."""
        return self._error_count

    @property
    def last_execution_time(self) -> float:
        """Duration of last successful execution in seconds."""
        return self._last_execution_time

    def get_stats(self) -> dict:
        """Get loop statistics for observability."""
        return {
            "name": self.name,
            "interval_s": self.interval,
            "running": self._running,
            "execution_count": self._execution_count,
            "error_count": self._error_count,
            "last_error": self._last_error,
            "last_execution_s": round(self._last_execution_time, 3),
        }
