"""
Snapshot persistence service

Serializes the hidden-tabs snapshot, the hidden flag and the position cache
to the durable key-value store. Persistence failures are logged and
reported as False; they never block in-memory state transitions.
"""

import logging
from typing import Any, Dict, Optional

from pydantic import ValidationError

from ..constants import HIDDEN_KEY, POSITIONS_KEY, SNAPSHOT_KEY
from ..models.position import Position
from ..models.snapshot import Snapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Reads and writes snapshot state through a KeyValueStore."""

    def __init__(self, store):
        """
        Initialize snapshot store.

        Args:
            store: KeyValueStore implementation (see host.KeyValueStore)
        """
        self.store = store

    def _read(self, key: str) -> Any:
        try:
            return self.store.get(key, None)
        except Exception as e:
            logger.error(f"Failed to read '{key}' from durable store: {e}")
            return None

    async def _write(self, key: str, value: Any) -> bool:
        try:
            await self.store.set(key, value)
            return True
        except Exception as e:
            logger.error(f"Failed to write '{key}' to durable store: {e}")
            return False

    def load_snapshot(self) -> Optional[Snapshot]:
        """Load a persisted snapshot.

        Returns:
            Snapshot if the hidden flag is set and a valid, non-empty snapshot
            is stored, None otherwise
        """
        if self._read(HIDDEN_KEY) is not True:
            return None

        data = self._read(SNAPSHOT_KEY)
        if not data:
            logger.warning("Hidden flag set but no snapshot stored, ignoring")
            return None

        try:
            snapshot = Snapshot.model_validate(data)
        except ValidationError as e:
            logger.error(f"Discarding invalid persisted snapshot: {e}")
            return None

        if not snapshot.tabs:
            logger.debug("Persisted snapshot has no tabs, ignoring")
            return None

        logger.info(f"Loaded persisted snapshot ({len(snapshot.tabs)} tab(s))")
        return snapshot

    async def save_snapshot(self, snapshot: Snapshot) -> bool:
        """Persist the snapshot and set the hidden flag.

        Returns:
            True if both writes succeeded
        """
        saved = await self._write(SNAPSHOT_KEY, snapshot.model_dump(mode="json"))
        flagged = await self._write(HIDDEN_KEY, True)
        if saved and flagged:
            logger.debug(f"Persisted snapshot ({len(snapshot.tabs)} tab(s))")
        return saved and flagged

    async def clear_snapshot(self) -> bool:
        """Remove the persisted snapshot and clear the hidden flag."""
        cleared = await self._write(SNAPSHOT_KEY, None)
        flagged = await self._write(HIDDEN_KEY, False)
        return cleared and flagged

    def load_positions(self) -> Dict[str, Position]:
        """Load the position cache, dropping undecodable entries.

        Returns:
            Mapping of document id to Position (empty on any failure)
        """
        data = self._read(POSITIONS_KEY)
        if not data:
            return {}
        if not isinstance(data, dict):
            logger.error(f"Persisted positions have unexpected type {type(data).__name__}, ignoring")
            return {}

        positions: Dict[str, Position] = {}
        for document_id, raw in data.items():
            try:
                positions[document_id] = Position.model_validate(raw)
            except ValidationError as e:
                logger.warning(f"Dropping invalid stored position for {document_id}: {e}")

        logger.info(f"Loaded {len(positions)} stored position(s)")
        return positions

    async def save_positions(self, positions: Dict[str, Position]) -> bool:
        """Persist the whole position cache."""
        data = {
            document_id: position.model_dump(mode="json")
            for document_id, position in positions.items()
        }
        ok = await self._write(POSITIONS_KEY, data)
        if ok:
            logger.debug(f"Persisted {len(data)} position(s)")
        return ok
