"""Toggle affordance (status indicator) for the host UI."""

import logging
from typing import Optional

from .constants import (
    STATUS_COLOR_TOKENS,
    STATUS_ICON_HIDE,
    STATUS_ICON_SHOW,
    STATUS_TOOLTIP_HIDE,
    STATUS_TOOLTIP_SHOW,
)
from .host import EditorHost
from .models.config import Config, StatusPosition
from .models.status import StatusDisplay

logger = logging.getLogger(__name__)


def build_status(config: Config, hidden: bool) -> Optional[StatusDisplay]:
    """Compute the affordance for the current state.

    Args:
        config: Current config
        hidden: True while HIDDEN or PEEKING

    Returns:
        StatusDisplay, or None when the affordance is turned off
    """
    if config.status_position is StatusPosition.HIDDEN:
        return None

    icon = STATUS_ICON_SHOW if hidden else STATUS_ICON_HIDE
    if config.status_label == "auto":
        verb = "Show" if hidden else "Hide"
        text = f"{icon} {verb} {config.side}"
    else:
        text = f"{icon} {config.status_label}" if config.status_label else icon

    return StatusDisplay(
        text=text,
        tooltip=STATUS_TOOLTIP_SHOW if hidden else STATUS_TOOLTIP_HIDE,
        alignment=config.status_position.value,
        background_color=STATUS_COLOR_TOKENS[config.status_color] if hidden else None,
    )


class StatusIndicator:
    """Pushes the affordance to the host, best effort."""

    def __init__(self, host: EditorHost):
        self.host = host
        self.current: Optional[StatusDisplay] = None

    def refresh(self, config: Config, hidden: bool) -> Optional[StatusDisplay]:
        display = build_status(config, hidden)
        try:
            self.host.update_status(display)
            self.current = display
        except Exception as e:
            logger.error(f"Failed to update status display: {e}")
        return display

    def clear(self) -> None:
        try:
            self.host.update_status(None)
        except Exception as e:
            logger.error(f"Failed to remove status display: {e}")
        self.current = None
