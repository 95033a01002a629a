"""Exception types raised by the sync engine."""


class ViewdayError(Exception):
    """Base class for all viewday errors."""


class DocumentNotFoundError(ViewdayError):
    """A referenced document path does not exist in the store."""

    def __init__(self, path: str):
        super().__init__(f"Document not found: {path}")
        self.path = path


class StoreError(ViewdayError):
    """The document store failed to read or persist a document."""


class WriteConflictError(StoreError):
    """The document changed on disk between read and commit."""

    def __init__(self, path: str):
        super().__init__(f"Document changed during write: {path}")
        self.path = path


class MessageError(ViewdayError):
    """An inbound message of a known kind carried invalid fields."""

    def __init__(self, kind: str, reason: str):
        super().__init__(f"Invalid {kind} message: {reason}")
        self.kind = kind
        self.reason = reason


class ConfigError(ViewdayError):
    """Settings could not be read or written."""
