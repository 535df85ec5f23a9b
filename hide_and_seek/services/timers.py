"""
Cancellable delayed calls

A DelayedCall owns at most one pending asyncio task. Arming it again cancels
the previous task first, so a DelayedCall never fires twice for overlapping
arms. Once the delay has elapsed the task detaches itself, and disarming
during the callback has no effect on the callback.
"""

import asyncio
import inspect
import logging
from typing import Any, Awaitable, Callable, Optional, Union

logger = logging.getLogger(__name__)

TimerCallback = Callable[[], Union[None, Awaitable[Any]]]


class DelayedCall:
    """Single-slot cancellable timer running on the asyncio loop."""

    def __init__(self, name: str):
        """Initialize an unarmed timer.

        Args:
            name: Timer name used in logs and task names
        """
        self.name = name
        self._task: Optional[asyncio.Task] = None
        self.fire_count = 0

    @property
    def armed(self) -> bool:
        """True while a callback is scheduled but has not started."""
        return self._task is not None and not self._task.done()

    def arm(self, delay_seconds: float, callback: TimerCallback) -> None:
        """Schedule callback after delay_seconds, replacing any pending call.

        Must be called from a running event loop.

        Args:
            delay_seconds: Delay before firing (0 fires on the next loop tick)
            callback: Plain function or coroutine function
        """
        if delay_seconds < 0:
            raise ValueError(f"Timer delay must be >= 0, got {delay_seconds}")

        if self.disarm():
            logger.debug(f"Timer '{self.name}' re-armed (previous call cancelled)")

        loop = asyncio.get_running_loop()
        self._task = loop.create_task(
            self._run(delay_seconds, callback),
            name=f"delayed-call:{self.name}",
        )

    def disarm(self) -> bool:
        """Cancel the pending call if any.

        Returns:
            True if a pending call was cancelled
        """
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
            return True
        return False

    async def _run(self, delay_seconds: float, callback: TimerCallback) -> None:
        """Sleep, detach, then invoke the callback."""
        try:
            await asyncio.sleep(delay_seconds)
        except asyncio.CancelledError:
            logger.debug(f"Timer '{self.name}' cancelled before firing")
            return

        if self._task is asyncio.current_task():
            self._task = None
        self.fire_count += 1

        try:
            result = callback()
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"Timer '{self.name}' callback failed: {e}", exc_info=True)
