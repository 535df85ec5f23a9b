"""Session state for the hide-and-seek core.

Holds the visibility state, the snapshot, the position cache and both
timers. One instance per editor process, passed explicitly to the services
that need it.
"""

import logging
from enum import Enum
from typing import Dict, Optional

from .models.position import Position
from .models.snapshot import Snapshot
from .services.peek_timer import PeekTimer
from .services.timers import DelayedCall

logger = logging.getLogger(__name__)


class VisibilityState(Enum):
    """Visibility of the managed side."""
    VISIBLE = "visible"
    HIDDEN = "hidden"
    PEEKING = "peeking"


class SessionState:
    """Owns process-wide hide/show state.

    A snapshot exists exactly when the machine state is HIDDEN or PEEKING;
    the mutators below keep the two in step.
    """

    def __init__(self) -> None:
        """Initialize with nothing hidden and an empty position cache."""
        self.machine_state = VisibilityState.VISIBLE
        self.snapshot: Optional[Snapshot] = None
        self.position_cache: Dict[str, Position] = {}
        self.position_save_timer = DelayedCall("position-save")
        self.peek_timer = PeekTimer()

    @property
    def is_hidden(self) -> bool:
        """True while HIDDEN or PEEKING."""
        return self.machine_state is not VisibilityState.VISIBLE

    def install_snapshot(self, snapshot: Snapshot) -> None:
        """Record a fresh snapshot and enter HIDDEN."""
        if self.snapshot is not None:
            raise RuntimeError("A snapshot is already installed")
        self.snapshot = snapshot
        self._transition(VisibilityState.HIDDEN)

    def clear_snapshot(self) -> None:
        """Drop the snapshot and return to VISIBLE."""
        self.snapshot = None
        self._transition(VisibilityState.VISIBLE)

    def enter_peek(self) -> None:
        """HIDDEN -> PEEKING, keeping the snapshot."""
        if self.snapshot is None:
            raise RuntimeError("Cannot peek without a snapshot")
        self._transition(VisibilityState.PEEKING)

    def leave_peek(self) -> None:
        """PEEKING -> HIDDEN, keeping the snapshot."""
        if self.snapshot is None:
            raise RuntimeError("Cannot rehide without a snapshot")
        self._transition(VisibilityState.HIDDEN)

    def _transition(self, new_state: VisibilityState) -> None:
        old_state = self.machine_state
        self.machine_state = new_state
        if old_state is not new_state:
            logger.info(f"Visibility changed: {old_state.value} → {new_state.value}")

    def remember_position(self, document_id: str, position: Position) -> None:
        self.position_cache[document_id] = position

    def best_position(self, document_id: str) -> Optional[Position]:
        """Most recently observed position for a document, if any."""
        return self.position_cache.get(document_id)

    def rehydrate(self, snapshot_store, persist_across_restarts: bool) -> None:
        """Load durable state at startup.

        The position cache is always reloaded. A hidden snapshot is only
        reinstalled when persist_across_restarts is set.

        Args:
            snapshot_store: SnapshotStore to read from
            persist_across_restarts: Config flag controlling snapshot rehydration
        """
        self.position_cache.update(snapshot_store.load_positions())

        if not persist_across_restarts:
            return

        snapshot = snapshot_store.load_snapshot()
        if snapshot is not None:
            self.snapshot = snapshot
            self._transition(VisibilityState.HIDDEN)

    def shutdown(self) -> None:
        """Cancel both timers."""
        self.peek_timer.disarm()
        self.position_save_timer.disarm()
