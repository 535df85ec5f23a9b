"""Live pane and tab models reported by the editor host."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, List, Optional, Union


class ContentKind(Enum):
    """Tag for what a tab displays."""
    PLAIN_DOCUMENT = "plain_document"
    OTHER = "other"


@dataclass(frozen=True)
class PlainDocument:
    """A text document backed by a stable identifier."""
    document_id: str
    kind: ContentKind = field(default=ContentKind.PLAIN_DOCUMENT, init=False)


@dataclass(frozen=True)
class OtherContent:
    """Settings pages, tool panes and anything else that is not a document."""
    description: str = ""
    kind: ContentKind = field(default=ContentKind.OTHER, init=False)


TabContent = Union[PlainDocument, OtherContent]


@dataclass(frozen=True)
class TabInfo:
    """One open tab in a pane."""
    label: str
    content: TabContent
    pane_index: int
    handle: Any = None  # Host-side tab object, passed back on close

    @property
    def is_plain_document(self) -> bool:
        return self.content.kind is ContentKind.PLAIN_DOCUMENT

    @property
    def document_id(self) -> Optional[str]:
        """Document id for plain documents, None otherwise."""
        if self.content.kind is ContentKind.PLAIN_DOCUMENT:
            return self.content.document_id
        return None


@dataclass(frozen=True)
class PaneInfo:
    """A pane (editor group) and its tabs."""
    index: Optional[int]  # None when the host cannot place the pane
    tabs: List[TabInfo] = field(default_factory=list)
