"""Shared constants for the hide-and-seek core."""

# Pane that splits the editor into the "left" and "right" sides.
ANCHOR_PANE = 1

# Durable key-value store keys
POSITIONS_KEY = "positions"
SNAPSHOT_KEY = "snapshot"
HIDDEN_KEY = "hidden"

# Position persistence debounce
POSITION_SAVE_DELAY_MS = 5000

# Peek auto-rehide
DEFAULT_PEEK_DURATION_MS = 3000

# Config file reload debounce (matches the state-file watcher timing)
SETTINGS_RELOAD_DEBOUNCE_MS = 200

# Status indicator
STATUS_ICON_HIDE = "$(collapse-all)"
STATUS_ICON_SHOW = "$(expand-all)"
STATUS_TOOLTIP_HIDE = "Temporarily hide editor group"
STATUS_TOOLTIP_SHOW = "Restore editor group"
STATUS_COLOR_TOKENS = {
    "red": "statusBarItem.errorBackground",
    "yellow": "statusBarItem.warningBackground",
}
