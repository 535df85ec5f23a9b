"""
Visibility state machine

Transitions between VISIBLE, HIDDEN and PEEKING:

    VISIBLE --hide--> HIDDEN --show--> VISIBLE
    HIDDEN  --peek--> PEEKING --(timer)--> HIDDEN
    PEEKING --show--> VISIBLE

Each command is one logical operation. Re-entrant requests (hide while
hidden, peek while peeking) and requests arriving while another command is
still awaiting the host are no-ops. The timer-driven rehide is the one
exception: show and peek wait for it to finish and then run. The snapshot
is installed before the first await of a hide, so the state never
disagrees with the snapshot.
"""

import asyncio
import logging
from contextlib import contextmanager
from enum import Enum
from typing import Callable, Iterable, List, Optional, Set

from .errors import HostOperationFailed, NoTargetTabs, NothingToRestore
from .host import EditorHost
from .models.config import Config
from .models.snapshot import Snapshot, TabRecord
from .models.tabs import TabInfo
from .services.restore_sequencer import RestoreResult, RestoreSequencer
from .state import SessionState, VisibilityState

logger = logging.getLogger(__name__)


class Outcome(Enum):
    """What a command did."""
    HIDDEN = "hidden"
    SHOWN = "shown"
    PEEKING = "peeking"
    REHIDDEN = "rehidden"
    NOOP = "noop"


def _plural(count: int) -> str:
    return f"{count} file{'' if count == 1 else 's'}"


class VisibilityStateMachine:
    """Decides which tabs to close and reopen, and in what order."""

    def __init__(
        self,
        host: EditorHost,
        session: SessionState,
        tracker,
        snapshot_store,
        config_loader: Callable[[], Config],
        sequencer: Optional[RestoreSequencer] = None,
        on_state_change: Optional[Callable[[VisibilityState], None]] = None,
    ):
        """Initialize the state machine.

        Args:
            host: EditorHost implementation
            session: SessionState shared with the tracker
            tracker: PositionTracker for best-known positions
            snapshot_store: SnapshotStore for persisting the snapshot
            config_loader: Returns a fresh Config for every command
            sequencer: RestoreSequencer (default: one built on host)
            on_state_change: Called after every completed transition
        """
        self.host = host
        self.session = session
        self.tracker = tracker
        self.snapshot_store = snapshot_store
        self.config_loader = config_loader
        self.sequencer = sequencer or RestoreSequencer(host)
        self.on_state_change = on_state_change
        self.in_flight: Optional[str] = None
        self._rehide_idle = asyncio.Event()
        self._rehide_idle.set()
        self.last_restore: Optional[RestoreResult] = None

    @property
    def state(self) -> VisibilityState:
        return self.session.machine_state

    @contextmanager
    def _command(self, name: str):
        self.in_flight = name
        try:
            yield
        finally:
            self.in_flight = None
            self._emit_state_change()

    async def _after_rehide(self, name: str) -> None:
        """Let a timer-driven rehide finish before a user command runs."""
        if not self._rehide_idle.is_set():
            logger.debug(f"'{name}' waiting for peek rehide to finish")
            await self._rehide_idle.wait()

    def _busy(self, name: str) -> bool:
        if self.in_flight is not None:
            logger.info(f"Ignoring '{name}' while '{self.in_flight}' is in progress")
            return True
        return False

    def _emit_state_change(self) -> None:
        if self.on_state_change is None:
            return
        try:
            self.on_state_change(self.state)
        except Exception as e:
            logger.error(f"State change listener failed: {e}")

    def _notify(self, config: Config, message: str) -> None:
        if not config.notify:
            return
        try:
            self.host.show_notification(message)
        except Exception as e:
            logger.debug(f"Notification failed: {e}")

    # Tab resolution

    def _live_target_tabs(self, config: Config, document_ids: Optional[Set[str]] = None) -> List[TabInfo]:
        """Plain-document tabs on the policy side, from the live pane list.

        Args:
            config: Current config
            document_ids: Restrict to these documents when given
        """
        tabs: List[TabInfo] = []
        for pane in self.host.list_panes():
            if not config.pane_policy.targets(pane.index):
                continue
            for tab in pane.tabs:
                if not tab.is_plain_document:
                    continue
                if document_ids is not None and tab.document_id not in document_ids:
                    continue
                tabs.append(tab)
        return tabs

    async def _close_tabs(self, tabs: Iterable[TabInfo]) -> int:
        """Close tabs as one concurrent batch.

        Returns:
            Number of tabs closed successfully
        """
        tabs = list(tabs)
        if not tabs:
            return 0

        results = await asyncio.gather(
            *(self.host.close_tab(tab) for tab in tabs),
            return_exceptions=True,
        )

        closed = 0
        for tab, result in zip(tabs, results):
            if isinstance(result, BaseException):
                error = HostOperationFailed("close", tab.document_id or tab.label, result)
                logger.error(str(error))
            else:
                closed += 1

        if closed < len(tabs):
            logger.warning(f"{len(tabs) - closed}/{len(tabs)} tab close(s) failed")
        return closed

    async def _close_snapshot_documents(self, config: Config, snapshot: Snapshot) -> int:
        """Re-resolve the snapshot's documents against live tabs and close them."""
        live_tabs = self._live_target_tabs(config, set(snapshot.document_ids))
        return await self._close_tabs(live_tabs)

    async def _focus_best_effort(self, view) -> None:
        try:
            await self.host.open_document(view.document_id, view.pane_index, preserve_focus=False)
        except Exception as e:
            logger.error(f"Failed to focus keep side: {e}")

    # Commands

    async def hide(self) -> Outcome:
        """VISIBLE -> HIDDEN.

        Raises:
            NoTargetTabs: No plain-document tabs on the policy side
        """
        if self._busy("hide"):
            return Outcome.NOOP
        if self.state is not VisibilityState.VISIBLE:
            logger.debug(f"hide ignored in state {self.state.value}")
            return Outcome.NOOP

        config = self.config_loader()
        targets = self._live_target_tabs(config)
        if not targets:
            raise NoTargetTabs(config.side)

        views = self.host.visible_views()
        self.tracker.record_all(v for v in views if config.pane_policy.targets(v.pane_index))
        keep_view = next((v for v in views if config.pane_policy.keeps(v.pane_index)), None)
        active_view = self.host.active_view()

        records = [
            TabRecord(
                document_id=tab.document_id,
                pane_index=tab.pane_index,
                position=self.tracker.position_for(tab.document_id),
                label=tab.label,
            )
            for tab in targets
        ]
        snapshot = Snapshot.build(records, active_view.document_id if active_view else None)

        with self._command("hide"):
            self.session.install_snapshot(snapshot)

            if config.persist_across_restarts:
                await self.snapshot_store.save_snapshot(snapshot)

            closed = await self._close_snapshot_documents(config, snapshot)
            logger.info(f"Hid {config.side} side: {closed}/{len(snapshot.tabs)} tab(s) closed")

            if config.auto_focus_remainder and keep_view is not None:
                await self._focus_best_effort(keep_view)

        self._notify(config, f"Hidden {config.side} side ({_plural(len(snapshot.tabs))})")
        return Outcome.HIDDEN

    async def show(self) -> Outcome:
        """HIDDEN or PEEKING -> VISIBLE, discarding the snapshot.

        Raises:
            NothingToRestore: No snapshot exists
        """
        await self._after_rehide("show")
        if self._busy("show"):
            return Outcome.NOOP
        snapshot = self.session.snapshot
        if snapshot is None:
            raise NothingToRestore()

        self.session.peek_timer.disarm()
        config = self.config_loader()

        with self._command("show"):
            self.last_restore = await self.sequencer.restore(
                snapshot, auto_focus_remainder=config.auto_focus_remainder
            )
            self.session.clear_snapshot()
            await self.snapshot_store.clear_snapshot()

        self._notify(config, f"Restored {config.side} side ({_plural(len(snapshot.tabs))})")
        return Outcome.SHOWN

    async def peek(self) -> Outcome:
        """HIDDEN -> PEEKING: temporary restore with auto-rehide.

        Raises:
            NothingToRestore: No snapshot exists
        """
        await self._after_rehide("peek")
        if self._busy("peek"):
            return Outcome.NOOP
        if self.state is VisibilityState.PEEKING:
            logger.debug("peek ignored, already peeking")
            return Outcome.NOOP
        snapshot = self.session.snapshot
        if snapshot is None:
            raise NothingToRestore()

        config = self.config_loader()

        with self._command("peek"):
            self.session.enter_peek()
            self.last_restore = await self.sequencer.restore(
                snapshot, auto_focus_remainder=config.auto_focus_remainder
            )
            self.session.peek_timer.arm(config.peek_duration_ms, self._rehide_after_peek)

        return Outcome.PEEKING

    async def _rehide_after_peek(self) -> Outcome:
        """PEEKING -> HIDDEN when the peek timer fires. Keeps the snapshot."""
        if self.state is not VisibilityState.PEEKING or self.session.snapshot is None:
            logger.debug(f"Peek timer fired in state {self.state.value}, nothing to rehide")
            return Outcome.NOOP
        if self._busy("rehide"):
            return Outcome.NOOP

        config = self.config_loader()
        snapshot = self.session.snapshot

        self._rehide_idle.clear()
        try:
            with self._command("rehide"):
                self.session.leave_peek()
                closed = await self._close_snapshot_documents(config, snapshot)
                logger.info(f"Peek ended: {closed} tab(s) hidden again")
        finally:
            self._rehide_idle.set()

        return Outcome.REHIDDEN

    async def toggle(self) -> Outcome:
        """hide when VISIBLE, show otherwise."""
        if self.state is VisibilityState.VISIBLE:
            return await self.hide()
        return await self.show()
