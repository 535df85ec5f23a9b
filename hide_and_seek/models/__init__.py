"""Data models for the hide-and-seek core."""

from .config import Config, PanePolicy, StatusPosition
from .position import LineCol, Position, SelectionRange, TextRange
from .snapshot import Snapshot, TabRecord
from .status import StatusDisplay
from .tabs import ContentKind, OtherContent, PaneInfo, PlainDocument, TabContent, TabInfo

__all__ = [
    "Config",
    "PanePolicy",
    "StatusPosition",
    "LineCol",
    "Position",
    "SelectionRange",
    "TextRange",
    "Snapshot",
    "TabRecord",
    "StatusDisplay",
    "ContentKind",
    "OtherContent",
    "PaneInfo",
    "PlainDocument",
    "TabContent",
    "TabInfo",
]
