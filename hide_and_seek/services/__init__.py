"""Services for position tracking, persistence, restore and timers."""
