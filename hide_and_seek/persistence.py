"""
File-backed durable key-value store

Keeps all hide-and-seek state in one JSON document
(default: ~/.local/share/hide-and-seek/state.json).

Writes use the temp file + rename pattern so a crash never leaves a
truncated file behind.
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional

from .errors import PersistenceError

logger = logging.getLogger(__name__)

DEFAULT_STATE_FILE = Path.home() / ".local/share/hide-and-seek/state.json"


class JsonStateStore:
    """KeyValueStore backed by a single JSON file."""

    def __init__(self, state_file: Optional[Path] = None):
        """
        Initialize the store and load existing data.

        Args:
            state_file: JSON file path (default: ~/.local/share/hide-and-seek/state.json)
        """
        self.state_file = state_file or DEFAULT_STATE_FILE
        self._data: Dict[str, Any] = {}
        self.load()

    def load(self) -> None:
        """(Re)load the file. Missing or corrupt files load as empty."""
        if not self.state_file.exists():
            logger.debug(f"No state file at {self.state_file} (first run)")
            self._data = {}
            return

        try:
            with open(self.state_file, "r") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load state from {self.state_file}: {e}")
            self._data = {}
            return

        if not isinstance(data, dict):
            logger.error(f"State file {self.state_file} does not contain an object, ignoring")
            self._data = {}
            return

        self._data = data
        logger.info(f"Loaded state from {self.state_file} ({len(data)} key(s))")

    def get(self, key: str, default: Any = None) -> Any:
        return self._data.get(key, default)

    async def set(self, key: str, value: Any) -> None:
        """Store value under key and write the file. None removes the key.

        The in-memory value only changes once the file has been replaced.

        Raises:
            PersistenceError: If the file cannot be written
        """
        data = dict(self._data)
        if value is None:
            data.pop(key, None)
        else:
            data[key] = value
        self._write(data)
        self._data = data

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.state_file.parent.mkdir(parents=True, exist_ok=True)

            fd, temp_path = tempfile.mkstemp(
                dir=self.state_file.parent, prefix=".state-", suffix=".json"
            )
            try:
                with os.fdopen(fd, "w") as f:
                    json.dump(data, f, indent=2)
                    f.flush()
                    os.fsync(f.fileno())

                os.replace(temp_path, self.state_file)
            except Exception:
                if Path(temp_path).exists():
                    os.unlink(temp_path)
                raise

        except (OSError, TypeError, ValueError) as e:
            raise PersistenceError(f"Failed to write {self.state_file}: {e}") from e
