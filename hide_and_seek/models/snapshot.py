"""Snapshot models for hidden tabs."""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from .position import Position


class TabRecord(BaseModel):
    """One hidden tab. Never mutated after creation."""

    document_id: str = Field(..., min_length=1, description="Stable URI-like document identifier")
    pane_index: int = Field(..., ge=1, description="Pane the tab lived in")
    position: Optional[Position] = Field(
        None,
        description="Last known position, None restores without repositioning",
    )
    label: str = Field("", description="Tab label at hide time")

    model_config = {"frozen": True, "extra": "ignore"}


class Snapshot(BaseModel):
    """Everything needed to reverse a hide."""

    tabs: List[TabRecord] = Field(default_factory=list, description="Hidden tabs in original order")
    active_index: int = Field(-1, ge=-1, description="Index of the focused tab, -1 when none")

    model_config = {"frozen": True, "extra": "ignore"}

    @model_validator(mode="after")
    def validate_active_index(self) -> "Snapshot":
        """Ensure active_index is -1 or indexes a tab."""
        if self.active_index >= len(self.tabs):
            raise ValueError(
                f"active_index {self.active_index} out of range for {len(self.tabs)} tab(s)"
            )
        return self

    @property
    def document_ids(self) -> List[str]:
        """Document ids in snapshot order."""
        return [tab.document_id for tab in self.tabs]

    @property
    def active_tab(self) -> Optional[TabRecord]:
        """Record that was focused at hide time, if any."""
        if self.active_index < 0:
            return None
        return self.tabs[self.active_index]

    @classmethod
    def build(cls, tabs: List[TabRecord], active_document_id: Optional[str]) -> "Snapshot":
        """Create a snapshot, resolving the active index from a document id."""
        active_index = -1
        if active_document_id is not None:
            for index, tab in enumerate(tabs):
                if tab.document_id == active_document_id:
                    active_index = index
                    break
        return cls(tabs=tabs, active_index=active_index)
