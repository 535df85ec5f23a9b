"""
Position tracking service

Records the selection and viewport of every placed view as it changes and
persists the whole cache once changes have been quiet for the save delay.
Rapid scrolling or typing therefore costs a single durable write.
"""

import logging
from typing import Iterable, Optional

from ..constants import POSITION_SAVE_DELAY_MS
from ..models.position import Position

logger = logging.getLogger(__name__)


class PositionTracker:
    """Keeps the session's position cache current and durable."""

    def __init__(self, session, snapshot_store, save_delay_ms: int = POSITION_SAVE_DELAY_MS):
        """Initialize position tracker.

        Args:
            session: SessionState owning the cache and the save timer
            snapshot_store: SnapshotStore used for the debounced write
            save_delay_ms: Quiet period before persisting (default: 5000ms)
        """
        self.session = session
        self.snapshot_store = snapshot_store
        self.save_delay_ms = save_delay_ms
        self.write_count = 0

    @staticmethod
    def capture(view) -> Position:
        """Read the current Position of a view.

        The top visible line is the start of the first visible range; with
        no visible ranges the scroll position is left unrecorded.
        """
        visible_ranges = list(view.visible_ranges)
        top_line = visible_ranges[0].start.line if visible_ranges else None
        return Position(
            selection=view.selection,
            visible_ranges=visible_ranges,
            top_visible_line=top_line,
        )

    def record(self, view) -> Optional[Position]:
        """Handle a selection or viewport change notification.

        Views the host has not placed in a pane are ignored.

        Args:
            view: ViewHandle that changed

        Returns:
            Captured Position, or None if the view was ignored
        """
        if view.pane_index is None:
            return None

        try:
            position = self.capture(view)
        except Exception as e:
            logger.warning(f"Could not capture position for {view.document_id}: {e}")
            return None

        self.session.remember_position(view.document_id, position)
        self.schedule_save()
        return position

    def record_all(self, views: Iterable) -> int:
        """Record several views at once (e.g. right before hiding)."""
        return sum(1 for view in views if self.record(view) is not None)

    def position_for(self, document_id: str) -> Optional[Position]:
        return self.session.best_position(document_id)

    def schedule_save(self) -> None:
        """(Re)start the debounce timer for persisting the cache."""
        self.session.position_save_timer.arm(self.save_delay_ms / 1000, self._save)

    @property
    def save_pending(self) -> bool:
        return self.session.position_save_timer.armed

    async def flush(self) -> bool:
        """Write immediately if a save is pending.

        Returns:
            True if a pending save was written
        """
        if not self.session.position_save_timer.disarm():
            return False
        return await self._save()

    async def _save(self) -> bool:
        positions = dict(self.session.position_cache)
        ok = await self.snapshot_store.save_positions(positions)
        if ok:
            self.write_count += 1
        else:
            # Next change event restarts the timer and retries.
            logger.warning(f"Position save failed ({len(positions)} entries), will retry on next change")
        return ok
