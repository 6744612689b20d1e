"""Exceptions raised by a parse invocation.

Every failure is terminal for the invocation that raised it; nothing here
is retried internally and no partial record is ever returned.
"""

from __future__ import annotations

from typing import Any


class DocParseError(Exception):
    """Base exception for all docparse errors."""

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(DocParseError):
    """Options could not be rendered or validated."""


class OutputLimitExceeded(DocParseError):
    """Rendered content would exceed the configured character limit."""

    def __init__(self, limit: int) -> None:
        super().__init__(
            f"Your document contained more than {limit} characters, and so your "
            "requested limit has been reached.",
            {"limit": limit},
        )
        self.limit = limit


class EmbeddedExtractionError(DocParseError):
    """An embedded object could not be copied or uploaded."""


class EngineError(DocParseError):
    """The parsing engine failed to decode the input."""


class UnsupportedFormatError(EngineError):
    """No decoder is available for the detected media type."""

    def __init__(self, media_type: str) -> None:
        super().__init__(f"Unsupported media type: {media_type}", {"media_type": media_type})
        self.media_type = media_type


class PersistenceError(DocParseError):
    """The extraction record could not be serialized or uploaded."""


class StorageError(DocParseError):
    """A storage backend failed to read or write an object."""
