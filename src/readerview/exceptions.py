"""
Exceptions raised by readerview.

Everything the engine or its front ends raise on purpose derives from
ReaderViewError, so callers can translate the whole family into an exit code
or an HTTP status with a single handler. "No article found" is not an error:
the parser returns an Article with empty content instead.
"""

from __future__ import annotations

from typing import Any, Dict, Optional


class ReaderViewError(Exception):
    """Base exception carrying a message and structured details for logging."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary for logging and serialization."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


class HTMLParseError(ReaderViewError):
    """Raised when the input markup cannot be turned into a document."""

    pass


class DocumentTooLargeError(ReaderViewError):
    """Raised before any mutation when a document exceeds the element ceiling."""

    def __init__(self, element_count: int, limit: int):
        self.element_count = element_count
        self.limit = limit
        super().__init__(
            f"documents too large: {element_count} elements",
            details={"element_count": element_count, "limit": limit},
        )


class NotReaderableError(ReaderViewError):
    """Raised by front ends when the readerable pre-check refuses a page."""

    def __init__(self, message: str = "failed to detect readable content on the page"):
        super().__init__(message)


class FetchError(ReaderViewError):
    """Raised when a remote page cannot be fetched."""

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None):
        self.url = url
        self.status_code = status_code
        details: Dict[str, Any] = {"url": url}
        if status_code is not None:
            details["status_code"] = status_code
        super().__init__(f"failed to fetch web page: {reason}", details=details)
