"""Domain-level error types."""

from __future__ import annotations


class CyclicReferenceError(RuntimeError):
    """Raised when a reading list structure or resource chain refers back to itself."""

    def __init__(self, message: str, *, uri: str | None = None) -> None:
        super().__init__(message)
        self.uri = uri
