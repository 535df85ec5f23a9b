"""
Restore sequencer

Reopens the documents of a snapshot one by one, in their original order and
pane, without stealing focus, and reapplies each recorded position. A
missing or failing document is skipped and counted; it never aborts the
batch. Focus is restored once, at the end.
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from ..errors import DocumentMissing, HostOperationFailed
from ..host import EditorHost, ViewHandle
from ..models.position import Position
from ..models.snapshot import Snapshot, TabRecord

logger = logging.getLogger(__name__)


@dataclass
class RestoreResult:
    """Outcome of one restore pass."""
    restored: int = 0
    failures: List[Tuple[str, str]] = field(default_factory=list)  # (document_id, reason)
    restored_ids: List[str] = field(default_factory=list)

    @property
    def failed(self) -> int:
        return len(self.failures)


class RestoreSequencer:
    """Reopens snapshot tabs through the editor host."""

    def __init__(self, host: EditorHost):
        """
        Initialize restore sequencer.

        Args:
            host: EditorHost implementation
        """
        self.host = host

    async def restore(self, snapshot: Snapshot, auto_focus_remainder: bool) -> RestoreResult:
        """Reopen every record of a snapshot.

        Args:
            snapshot: Snapshot to restore (not modified)
            auto_focus_remainder: Refocus the previously focused view when the
                snapshot has no active tab

        Returns:
            RestoreResult with the count of restored records
        """
        previous_view = self.host.active_view()
        result = RestoreResult()

        for record in snapshot.tabs:
            try:
                await self._restore_record(record)
                result.restored += 1
                result.restored_ids.append(record.document_id)
            except DocumentMissing as e:
                logger.warning(str(e))
                result.failures.append((record.document_id, "missing"))
            except Exception as e:
                logger.error(f"Failed to restore {record.label or record.document_id}: {e}")
                result.failures.append((record.document_id, str(e)))

        await self._restore_focus(snapshot, result, previous_view, auto_focus_remainder)

        logger.info(
            f"Restore complete: {result.restored}/{len(snapshot.tabs)} restored, "
            f"{result.failed} failed"
        )
        return result

    async def _restore_record(self, record: TabRecord) -> None:
        if not await self._document_exists(record.document_id):
            raise DocumentMissing(record.document_id)

        try:
            view = await self.host.open_document(
                record.document_id, record.pane_index, preserve_focus=True
            )
        except Exception as e:
            raise HostOperationFailed("open", record.document_id, e) from e

        self.apply_position(view, record.position)

    async def _document_exists(self, document_id: str) -> bool:
        try:
            return bool(await self.host.document_exists(document_id))
        except Exception as e:
            logger.debug(f"Existence check failed for {document_id}: {e}")
            return False

    @staticmethod
    def apply_position(view: ViewHandle, position: Optional[Position]) -> None:
        """Set selection and scroll of a freshly opened view.

        Selection anchor is the recorded start, the caret the recorded active
        position. Scrolling follows Position.scroll_target().
        """
        if position is None:
            return

        if position.selection is not None:
            view.set_selection(position.selection.anchor, position.selection.active)

        target = position.scroll_target()
        if target is not None:
            view.reveal_range(target)

    async def _restore_focus(
        self,
        snapshot: Snapshot,
        result: RestoreResult,
        previous_view,
        auto_focus_remainder: bool,
    ) -> None:
        """Focus the snapshot's active tab, else the previously focused view.

        The active tab is only focused when it was actually reopened. If it
        was skipped (missing or failed), focus falls back to the previously
        focused view as if no tab had been active, rather than retrying the
        open for a document that just failed.
        """
        active = snapshot.active_tab
        if active is not None and active.document_id in result.restored_ids:
            await self._focus(active.document_id, active.pane_index)
            return

        if auto_focus_remainder and previous_view is not None and previous_view.pane_index is not None:
            await self._focus(previous_view.document_id, previous_view.pane_index)

    async def _focus(self, document_id: str, pane_index: int) -> bool:
        try:
            await self.host.open_document(document_id, pane_index, preserve_focus=False)
            return True
        except Exception as e:
            logger.error(f"Failed to restore focus to {document_id}: {e}")
            return False
