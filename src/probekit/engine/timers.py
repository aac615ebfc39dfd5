"""
Repeating interval timers.
"""

import asyncio
import logging
from typing import Callable, Optional

logger = logging.getLogger(__name__)


class IntervalTimer:
    """
    Calls ``callback`` every ``interval_ms`` milliseconds on the running loop.

    Ticks are scheduled against absolute deadlines, so a slow callback does
    not make the timer drift. Ticks missed while the loop was busy are
    skipped rather than fired in a burst. The event loop caps each selector
    wait internally, so very long intervals (weeks, years) are safe.
    """

    def __init__(self, interval_ms: int, callback: Callable[[], object], name: str = "timer"):
        if interval_ms <= 0:
            raise ValueError(f"interval must be positive, got {interval_ms}")
        self.interval_ms = interval_ms
        self.callback = callback
        self.name = name
        self.ticks = 0
        self._task: Optional[asyncio.Task] = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        """Start ticking. Starting a running timer does nothing."""
        if self.running:
            logger.warning(f"Timer {self.name} is already running")
            return
        self._task = asyncio.get_running_loop().create_task(
            self._run(), name=f"timer:{self.name}"
        )

    def cancel(self) -> None:
        if self._task is not None:
            self._task.cancel()
            self._task = None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        period = self.interval_ms / 1000
        deadline = loop.time()

        while True:
            deadline += period
            now = loop.time()
            if deadline < now:
                missed = int((now - deadline) // period) + 1
                deadline += missed * period
                logger.warning(f"Timer {self.name} skipped {missed} tick(s)")
            await asyncio.sleep(deadline - loop.time())

            self.ticks += 1
            try:
                self.callback()
            except Exception as e:
                logger.error(f"Timer {self.name} callback failed: {e}", exc_info=True)
