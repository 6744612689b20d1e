"""Plain text content handler."""

from __future__ import annotations

from docparse.handlers.base import ContentHandler


class TextContentHandler(ContentHandler):
    """Keeps character data only; markup events are dropped."""

    def __init__(self) -> None:
        self._parts: list[str] = []

    def characters(self, text: str) -> None:
        self._parts.append(text)

    def __str__(self) -> str:
        return "".join(self._parts)
