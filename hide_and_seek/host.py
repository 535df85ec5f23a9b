"""Editor host capabilities consumed by the hide-and-seek core.

The core never talks to a concrete editor. An integration supplies objects
matching these protocols; tests supply in-memory fakes.
"""

from typing import Any, Callable, List, Optional, Protocol, runtime_checkable

from .models.position import LineCol, SelectionRange, TextRange
from .models.status import StatusDisplay
from .models.tabs import PaneInfo, TabInfo


@runtime_checkable
class Disposable(Protocol):
    """Subscription handle."""

    def dispose(self) -> None: ...


class ViewHandle(Protocol):
    """An open text view (editor) of a document."""

    document_id: str
    pane_index: Optional[int]

    @property
    def selection(self) -> SelectionRange: ...

    @property
    def visible_ranges(self) -> List[TextRange]: ...

    def set_selection(self, anchor: LineCol, active: LineCol) -> None: ...

    def reveal_range(self, target: TextRange) -> None:
        """Scroll so that target is the topmost visible range."""
        ...


ViewCallback = Callable[[ViewHandle], None]


class EditorHost(Protocol):
    """Window, tab and document operations of the editor."""

    def list_panes(self) -> List[PaneInfo]: ...

    def active_view(self) -> Optional[ViewHandle]: ...

    def visible_views(self) -> List[ViewHandle]: ...

    async def document_exists(self, document_id: str) -> bool: ...

    async def open_document(self, document_id: str, pane_index: int, preserve_focus: bool = True) -> ViewHandle:
        """Open (or reveal) a document in a pane.

        preserve_focus=False moves keyboard focus to the view.
        """
        ...

    async def close_tab(self, tab: TabInfo) -> None: ...

    def on_selection_changed(self, callback: ViewCallback) -> Disposable: ...

    def on_viewport_changed(self, callback: ViewCallback) -> Disposable: ...

    def show_notification(self, message: str) -> None: ...

    def update_status(self, display: Optional[StatusDisplay]) -> None:
        """Show the toggle affordance, or remove it when display is None."""
        ...


class KeyValueStore(Protocol):
    """Durable key-value storage that survives restarts."""

    def get(self, key: str, default: Any = None) -> Any: ...

    async def set(self, key: str, value: Any) -> None:
        """Store a JSON-compatible value. None removes the key."""
        ...


class ConfigSource(Protocol):
    """Configuration values and change notifications."""

    def get(self, key: str, default: Any = None) -> Any: ...

    def on_did_change(self, callback: Callable[[], None]) -> Disposable: ...
