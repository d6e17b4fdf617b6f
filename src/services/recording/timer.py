"""Elapsed-time tracker for the capture phase.

Counts whole seconds on a background ``asyncio.Task`` while running.
Stopping freezes the value; resetting stops and zeroes it.
"""

import asyncio
from collections.abc import Awaitable, Callable


class ElapsedTimer:
    """Periodic second counter driven by the event loop.

    Args:
        interval: Seconds per tick (default 1.0).
        sleep: Awaitable sleep used between ticks (``asyncio.sleep``).
    """

    def __init__(
        self,
        interval: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ) -> None:
        self.elapsed = 0
        self._interval = interval
        self._sleep = sleep
        self._task: asyncio.Task | None = None

    @property
    def running(self) -> bool:
        return self._task is not None

    def start(self) -> None:
        """Begin counting from the current value. No-op if already running."""
        if self._task is None:
            self._task = asyncio.create_task(self._tick_loop())

    async def _tick_loop(self) -> None:
        while True:
            await self._sleep(self._interval)
            self.elapsed += 1

    def stop(self) -> None:
        """Cancel the periodic task and keep the current value."""
        if self._task is not None:
            self._task.cancel()
            self._task = None

    def reset(self) -> None:
        self.stop()
        self.elapsed = 0

    def close(self) -> None:
        """Teardown hook; leaves no periodic task behind."""
        self.stop()
