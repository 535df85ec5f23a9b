"""
Position Models

Pydantic models for cursor and scroll position captured per document.

A Position carries both the full list of visible ranges and an optional
top visible line. When both are present the top line is the scroll anchor
and the ranges are kept only as recorded data.
"""

from typing import List, Optional

from pydantic import BaseModel, Field


class LineCol(BaseModel):
    """Zero-based line/character pair."""

    line: int = Field(..., ge=0, description="Zero-based line number")
    character: int = Field(0, ge=0, description="Zero-based character offset")

    model_config = {"frozen": True, "extra": "ignore"}


class TextRange(BaseModel):
    """Start/end pair of positions (a visible range)."""

    start: LineCol = Field(..., description="Range start")
    end: LineCol = Field(..., description="Range end")

    model_config = {"frozen": True, "extra": "ignore"}

    @classmethod
    def at_line(cls, line: int) -> "TextRange":
        """Empty range at the start of a line."""
        point = LineCol(line=line, character=0)
        return cls(start=point, end=point)


class SelectionRange(TextRange):
    """Selection with the caret position.

    `start`/`end` are ordered document positions, `active` is where the caret
    sits (either end of the selection).
    """

    active: LineCol = Field(..., description="Caret position")

    @property
    def anchor(self) -> LineCol:
        """Selection anchor used on restore (always the start position)."""
        return self.start


class Position(BaseModel):
    """Most recently observed cursor and viewport for one document."""

    selection: Optional[SelectionRange] = Field(
        None,
        description="Current selection, None when not recorded",
    )

    visible_ranges: List[TextRange] = Field(
        default_factory=list,
        description="Visible ranges in viewport order",
    )

    top_visible_line: Optional[int] = Field(
        None,
        ge=0,
        description="Preferred scroll anchor, wins over visible_ranges",
    )

    model_config = {"frozen": True, "extra": "ignore"}

    def scroll_target(self) -> Optional[TextRange]:
        """Range to reveal at the top of the viewport.

        Precedence: top_visible_line, then the first visible range, then
        None (leave the scroll position alone).
        """
        if self.top_visible_line is not None:
            return TextRange.at_line(self.top_visible_line)
        if self.visible_ranges:
            return self.visible_ranges[0]
        return None
