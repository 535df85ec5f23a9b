"""Configuration loading for file-backed hosts.

Reads hide-and-seek options from a JSON settings file and watches the file
for changes, notifying subscribers after a short debounce.
"""

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from watchdog.events import FileSystemEventHandler
from watchdog.observers import Observer

from .constants import SETTINGS_RELOAD_DEBOUNCE_MS

logger = logging.getLogger(__name__)

DEFAULT_SETTINGS_FILE = Path.home() / ".config/hide-and-seek/settings.json"


class _Subscription:
    """Removes a callback from a listener list on dispose()."""

    def __init__(self, listeners: List[Callable[[], None]], callback: Callable[[], None]):
        self._listeners = listeners
        self._callback = callback

    def dispose(self) -> None:
        if self._callback in self._listeners:
            self._listeners.remove(self._callback)


class JsonSettingsSource:
    """ConfigSource backed by a JSON settings file.

    Keys are Config field names (pane_policy, notify, peek_duration_ms, ...).
    """

    def __init__(self, settings_file: Optional[Path] = None):
        """Initialize and load the settings file.

        Args:
            settings_file: Path to settings.json (default: ~/.config/hide-and-seek/settings.json)
        """
        self.settings_file = settings_file or DEFAULT_SETTINGS_FILE
        self._values: Dict[str, Any] = {}
        self._listeners: List[Callable[[], None]] = []
        self._values = self._read()

    def _read(self) -> Dict[str, Any]:
        if not self.settings_file.exists():
            logger.info(f"Settings file does not exist: {self.settings_file}, using defaults")
            return {}

        try:
            with open(self.settings_file) as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            logger.error(f"Failed to load settings from {self.settings_file}: {e}")
            return {}

        if not isinstance(data, dict):
            logger.error(f"Settings file {self.settings_file} must contain an object")
            return {}

        logger.debug(f"Loaded {len(data)} setting(s) from {self.settings_file}")
        return data

    def get(self, key: str, default: Any = None) -> Any:
        return self._values.get(key, default)

    def on_did_change(self, callback: Callable[[], None]) -> _Subscription:
        self._listeners.append(callback)
        return _Subscription(self._listeners, callback)

    def reload(self) -> bool:
        """Re-read the file and notify subscribers if anything changed.

        Returns:
            True if values changed
        """
        values = self._read()
        if values == self._values:
            return False

        self._values = values
        logger.info(f"Settings reloaded from {self.settings_file}")
        for callback in list(self._listeners):
            try:
                callback()
            except Exception as e:
                logger.error(f"Settings change listener failed: {e}")
        return True


class DebouncedReloadHandler(FileSystemEventHandler):
    """File system event handler with debounced reload callback.

    Watchdog delivers events on its own thread; the callback is scheduled
    onto the asyncio loop thread-safely.
    """

    def __init__(self, callback: Callable[[], None], debounce_ms: int = SETTINGS_RELOAD_DEBOUNCE_MS,
                 target_filename: Optional[str] = None):
        """Initialize debounced reload handler.

        Args:
            callback: Function to call after debounce period
            debounce_ms: Debounce timeout in milliseconds
            target_filename: If set, only trigger on events for this filename
        """
        super().__init__()
        self.callback = callback
        self.debounce_seconds = debounce_ms / 1000
        self.target_filename = target_filename
        self._debounce_handle: Optional[asyncio.TimerHandle] = None
        self._loop: Optional[asyncio.AbstractEventLoop] = None

    def set_event_loop(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop

    def _should_trigger(self, event) -> bool:
        if event.is_directory:
            return False
        if self.target_filename:
            event_path = getattr(event, "dest_path", None) or event.src_path
            return Path(event_path).name == self.target_filename
        return True

    def _schedule(self) -> None:
        """Restart the debounce timer. Runs on the loop thread."""
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
        self._debounce_handle = self._loop.call_later(self.debounce_seconds, self._fire)

    def _fire(self) -> None:
        self._debounce_handle = None
        try:
            self.callback()
        except Exception as e:
            logger.error(f"Debounced reload failed: {e}")

    def _handle(self, event) -> None:
        if not self._should_trigger(event):
            return
        if self._loop is None:
            logger.warning("No event loop set for debounced handler, calling immediately")
            self.callback()
            return
        self._loop.call_soon_threadsafe(self._schedule)

    def on_modified(self, event) -> None:
        self._handle(event)

    def on_moved(self, event) -> None:
        # Atomic saves use temp file + rename
        self._handle(event)

    def on_created(self, event) -> None:
        self._handle(event)


class SettingsFileWatcher:
    """Watches the settings file and reloads a JsonSettingsSource."""

    def __init__(self, source: JsonSettingsSource, debounce_ms: int = SETTINGS_RELOAD_DEBOUNCE_MS):
        self.source = source
        self.observer: Optional[Observer] = None
        self.handler = DebouncedReloadHandler(
            source.reload, debounce_ms, target_filename=source.settings_file.name
        )
        self._started = False

    def start(self, loop: Optional[asyncio.AbstractEventLoop] = None) -> None:
        """Start watching.

        Watches the parent directory since some editors use atomic save
        (create temp file + rename) which doesn't trigger inotify on the file itself.
        """
        if self._started:
            logger.warning("Settings watcher already started")
            return

        self.handler.set_event_loop(loop or asyncio.get_running_loop())

        watch_dir = self.source.settings_file.parent
        watch_dir.mkdir(parents=True, exist_ok=True)

        # Fresh observer per start, watchdog threads cannot be restarted
        self.observer = Observer()
        self.observer.schedule(self.handler, str(watch_dir), recursive=False)
        self.observer.start()
        self._started = True

        logger.info(f"Started watching {self.source.settings_file} for modifications")

    def stop(self) -> None:
        if not self._started:
            return

        self.observer.stop()
        self.observer.join(timeout=5.0)
        self.observer = None
        self._started = False

        logger.info(f"Stopped watching {self.source.settings_file}")
