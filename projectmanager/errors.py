"""Error types raised by the project document core."""

from __future__ import annotations


class DocumentError(Exception):
    """Raised when a project document cannot be read, written or edited."""


class CorruptDocument(DocumentError):
    """Raised when document bytes are missing, empty or malformed."""


class IndexOutOfRange(DocumentError, IndexError):
    """Raised when a command references an element that does not exist."""

    def __init__(self, index: int, size: int, collection: str = "tasks") -> None:
        super().__init__(f"Index {index} out of range for {collection} (size {size})")
        self.index = index
        self.size = size
        self.collection = collection


class ValidationError(DocumentError, ValueError):
    """Raised when a field name or value is not acceptable."""
