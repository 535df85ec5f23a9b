"""Peek auto-rehide timer."""

import logging

from .timers import DelayedCall, TimerCallback

logger = logging.getLogger(__name__)


class PeekTimer:
    """At most one pending auto-rehide after a peek."""

    def __init__(self) -> None:
        self._call = DelayedCall("peek")

    @property
    def armed(self) -> bool:
        return self._call.armed

    def arm(self, duration_ms: int, on_fire: TimerCallback) -> None:
        """Schedule on_fire after duration_ms, disarming any previous timer.

        Args:
            duration_ms: Delay in milliseconds (0 fires on the next loop tick)
            on_fire: Callback, may be a coroutine function
        """
        if duration_ms < 0:
            raise ValueError(f"Peek duration must be >= 0, got {duration_ms}")
        self._call.arm(duration_ms / 1000, on_fire)
        logger.debug(f"Peek timer armed for {duration_ms}ms")

    def disarm(self) -> bool:
        """Cancel a pending rehide.

        Returns:
            True if a pending rehide was cancelled
        """
        cancelled = self._call.disarm()
        if cancelled:
            logger.debug("Peek timer disarmed")
        return cancelled
