"""Toggle affordance display model."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class StatusDisplay:
    """What the host shows for the toggle affordance."""
    text: str
    tooltip: str
    alignment: str  # "left" or "right"
    command: str = "toggle"
    background_color: Optional[str] = None  # Theme color token while hidden
