"""Error types for the hide-and-seek core.

None of these are fatal. Commands end in a well-defined state even when a
host call fails part way through.
"""

from typing import Optional


class HideAndSeekError(Exception):
    """Base class for all hide-and-seek errors."""


class NoTargetTabs(HideAndSeekError):
    """Hide found no plain-document tabs on the configured side."""

    def __init__(self, side: str):
        self.side = side
        super().__init__(f"No editors on the {side} side")


class NothingToRestore(HideAndSeekError):
    """Show or peek was requested without a saved snapshot."""

    def __init__(self, message: str = "No saved state to restore"):
        super().__init__(message)


class DocumentMissing(HideAndSeekError):
    """A hidden document no longer exists at restore time."""

    def __init__(self, document_id: str):
        self.document_id = document_id
        super().__init__(f"File does not exist: {document_id}")


class HostOperationFailed(HideAndSeekError):
    """The editor host rejected an open, close or focus call."""

    def __init__(self, operation: str, target: Optional[str] = None, cause: Optional[BaseException] = None):
        self.operation = operation
        self.target = target
        self.cause = cause
        detail = f" {target}" if target else ""
        reason = f": {cause}" if cause else ""
        super().__init__(f"Host operation '{operation}' failed{detail}{reason}")


class PersistenceError(HideAndSeekError):
    """Reading or writing the durable store failed."""
