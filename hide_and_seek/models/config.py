"""
Configuration Model

Immutable snapshot of the recognized options, read fresh for every command.
"""

import logging
from enum import Enum
from typing import Any, Dict

from pydantic import BaseModel, Field, ValidationError, field_validator

from ..constants import ANCHOR_PANE, DEFAULT_PEEK_DURATION_MS, STATUS_COLOR_TOKENS

logger = logging.getLogger(__name__)


class PanePolicy(str, Enum):
    """Which side of the anchor pane gets hidden."""
    LEFT = "left"
    RIGHT = "right"

    def targets(self, pane_index) -> bool:
        """True if tabs in this pane belong to the side to hide.

        Args:
            pane_index: Pane index, or None when the host cannot place the pane

        Returns:
            True for the anchor pane under LEFT, for every other placed pane
            under RIGHT
        """
        if pane_index is None:
            return False
        if self is PanePolicy.LEFT:
            return pane_index == ANCHOR_PANE
        return pane_index != ANCHOR_PANE

    def keeps(self, pane_index) -> bool:
        """True if the pane belongs to the side that stays open."""
        if pane_index is None:
            return False
        if self is PanePolicy.LEFT:
            return pane_index > ANCHOR_PANE
        return pane_index == ANCHOR_PANE


class StatusPosition(str, Enum):
    """Where the toggle affordance is displayed."""
    LEFT = "left"
    RIGHT = "right"
    HIDDEN = "hidden"


class Config(BaseModel):
    """Recognized hide-and-seek options."""

    pane_policy: PanePolicy = Field(PanePolicy.RIGHT, description="Side of the anchor pane to hide")
    auto_focus_remainder: bool = Field(True, description="Focus the kept side after hiding")
    notify: bool = Field(True, description="Show transient notifications")
    persist_across_restarts: bool = Field(False, description="Rehydrate hidden state at startup")
    peek_duration_ms: int = Field(DEFAULT_PEEK_DURATION_MS, ge=0, description="Peek auto-rehide delay")
    status_position: StatusPosition = Field(StatusPosition.RIGHT, description="Toggle affordance alignment")
    status_label: str = Field("auto", description="'auto' or custom affordance text")
    status_color: str = Field("yellow", description="Affordance background while hidden")

    model_config = {"frozen": True, "extra": "ignore"}

    @field_validator("status_color")
    @classmethod
    def normalize_status_color(cls, v: str) -> str:
        """Lower-case the color, unknown names fall back to yellow."""
        color = (v or "").lower()
        return color if color in STATUS_COLOR_TOKENS else "yellow"

    @property
    def side(self) -> str:
        """Human-readable side name used in messages."""
        return self.pane_policy.value

    @classmethod
    def from_mapping(cls, raw: Dict[str, Any]) -> "Config":
        """Build a config, replacing invalid values with defaults field by field.

        Args:
            raw: Option name to value

        Returns:
            Config (never raises for bad values)
        """
        values = {k: v for k, v in raw.items() if k in cls.model_fields and v is not None}
        try:
            return cls(**values)
        except ValidationError as e:
            bad_fields = {str(err["loc"][0]) for err in e.errors() if err.get("loc")}
            for name in sorted(bad_fields):
                logger.warning(f"Invalid config value for {name}={values.get(name)!r}, using default")
                values.pop(name, None)
            return cls(**values)

    @classmethod
    def load(cls, source) -> "Config":
        """Read every recognized option through a ConfigSource.

        Args:
            source: Object with get(key, default) (see host.ConfigSource)

        Returns:
            Config snapshot
        """
        raw = {}
        for name in cls.model_fields:
            try:
                raw[name] = source.get(name, None)
            except Exception as e:
                logger.error(f"Failed to read config option {name}: {e}")
        return cls.from_mapping(raw)
