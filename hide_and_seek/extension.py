"""Extension lifecycle for the hide-and-seek core.

Wires the editor host to the tracker, the state machine and the status
indicator, and exposes the four commands: toggle, hide, show, peek.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Awaitable, Callable, Dict, List, Optional

from .config import JsonSettingsSource, SettingsFileWatcher
from .constants import POSITION_SAVE_DELAY_MS
from .errors import HideAndSeekError, NoTargetTabs, NothingToRestore
from .host import ConfigSource, Disposable, EditorHost, KeyValueStore
from .models.config import Config
from .persistence import JsonStateStore
from .services.position_tracker import PositionTracker
from .services.restore_sequencer import RestoreSequencer
from .services.snapshot_store import SnapshotStore
from .state import SessionState, VisibilityState
from .state_machine import Outcome, VisibilityStateMachine
from .status import StatusIndicator

logger = logging.getLogger(__name__)

Command = Callable[[], Awaitable[None]]


class HideAndSeekExtension:
    """Owns every hide-and-seek component for one editor process."""

    def __init__(self, host: EditorHost, store: KeyValueStore, config_source: ConfigSource,
                 position_save_delay_ms: int = POSITION_SAVE_DELAY_MS,
                 settings_watcher: Optional[SettingsFileWatcher] = None):
        """Build components. Nothing touches the host until activate().

        Args:
            host: EditorHost implementation
            store: KeyValueStore for durable state
            config_source: ConfigSource for options and change events
            position_save_delay_ms: Debounce for position persistence
            settings_watcher: Started on activate() and stopped on deactivate()
        """
        self.host = host
        self.config_source = config_source
        self.session = SessionState()
        self.snapshot_store = SnapshotStore(store)
        self.tracker = PositionTracker(self.session, self.snapshot_store, position_save_delay_ms)
        self.machine = VisibilityStateMachine(
            host,
            self.session,
            self.tracker,
            self.snapshot_store,
            self.read_config,
            sequencer=RestoreSequencer(host),
            on_state_change=self._on_state_change,
        )
        self.status = StatusIndicator(host)
        self.settings_watcher = settings_watcher
        self._subscriptions: List[Disposable] = []
        self.active = False

    @classmethod
    def from_files(
        cls,
        host: EditorHost,
        state_file: Optional[Path] = None,
        settings_file: Optional[Path] = None,
        watch_settings: bool = True,
        position_save_delay_ms: int = POSITION_SAVE_DELAY_MS,
    ) -> "HideAndSeekExtension":
        """Build an extension backed by a JSON state file and a JSON settings file.

        Args:
            host: EditorHost implementation
            state_file: Durable state (default: ~/.local/share/hide-and-seek/state.json)
            settings_file: Options (default: ~/.config/hide-and-seek/settings.json)
            watch_settings: Reload the settings file when it changes on disk
            position_save_delay_ms: Debounce for position persistence
        """
        settings = JsonSettingsSource(settings_file)
        return cls(
            host,
            JsonStateStore(state_file),
            settings,
            position_save_delay_ms=position_save_delay_ms,
            settings_watcher=SettingsFileWatcher(settings) if watch_settings else None,
        )

    def read_config(self) -> Config:
        return Config.load(self.config_source)

    @property
    def commands(self) -> Dict[str, Command]:
        """Commands exposed to the host, by name."""
        return {
            "toggle": self.toggle,
            "hide": self.hide,
            "show": self.show,
            "peek": self.peek,
        }

    async def activate(self) -> None:
        """Rehydrate state, subscribe to host events and show the affordance."""
        if self.active:
            logger.warning("Extension already active")
            return

        config = self.read_config()
        self.session.rehydrate(self.snapshot_store, config.persist_across_restarts)

        self._subscriptions = [
            self.host.on_selection_changed(self._on_view_changed),
            self.host.on_viewport_changed(self._on_view_changed),
            self.config_source.on_did_change(self._on_config_changed),
        ]

        if self.settings_watcher is not None:
            self.settings_watcher.start()

        self.status.refresh(config, self.session.is_hidden)
        self.active = True
        logger.info(
            f"Hide and Seek activated: state={self.session.machine_state.value}, "
            f"{len(self.session.position_cache)} known position(s)"
        )

    async def deactivate(self) -> None:
        """Dispose subscriptions, cancel the peek timer, flush positions."""
        for subscription in self._subscriptions:
            try:
                subscription.dispose()
            except Exception as e:
                logger.error(f"Failed to dispose subscription: {e}")
        self._subscriptions = []

        if self.settings_watcher is not None:
            self.settings_watcher.stop()

        self.session.peek_timer.disarm()
        await self.tracker.flush()
        self.session.shutdown()
        self.status.clear()
        self.active = False
        logger.info("Hide and Seek deactivated")

    async def toggle(self) -> None:
        await self._run("toggle", self.machine.toggle)

    async def hide(self) -> None:
        await self._run("hide", self.machine.hide)

    async def show(self) -> None:
        await self._run("show", self.machine.show)

    async def peek(self) -> None:
        await self._run("peek", self.machine.peek)

    async def _run(self, name: str, action: Callable[[], Awaitable[Outcome]]) -> Optional[Outcome]:
        """Run a command, turning expected errors into notifications."""
        try:
            outcome = await action()
            logger.debug(f"Command '{name}' finished: {outcome.value}")
            return outcome
        except (NoTargetTabs, NothingToRestore) as e:
            logger.info(f"Command '{name}': {e}")
            if self.read_config().notify:
                try:
                    self.host.show_notification(str(e))
                except Exception as notify_error:
                    logger.debug(f"Notification failed: {notify_error}")
        except HideAndSeekError as e:
            logger.error(f"Command '{name}' failed: {e}")
        except Exception as e:
            logger.error(f"Command '{name}' failed unexpectedly: {e}", exc_info=True)
        return None

    def _on_view_changed(self, view) -> None:
        self.tracker.record(view)

    def _on_config_changed(self) -> None:
        self.status.refresh(self.read_config(), self.session.is_hidden)

    def _on_state_change(self, state: VisibilityState) -> None:
        self.status.refresh(self.read_config(), state is not VisibilityState.VISIBLE)


def setup_logging(level: Optional[str] = None) -> None:
    """Setup logging to stderr.

    Args:
        level: Log level name (default: LOG_LEVEL environment variable or INFO)
    """
    log_level = (level or os.environ.get("LOG_LEVEL", "INFO")).upper()

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s [%(name)s] %(message)s"))
    root_logger.addHandler(handler)

    logger.info(f"Logging configured: level={log_level}")
