"""Hide and Seek editor pane manager

Hides one side of a split editor and brings it back exactly as it was.

This package provides the core that an editor integration drives:
- Records cursor and scroll position for every open document
- Closes the tabs on the configured side and remembers them in a snapshot
- Reopens the snapshot in order, restoring selection and viewport
- Peeks at hidden tabs temporarily and hides them again on a timer

Author: Hide and Seek contributors
License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
