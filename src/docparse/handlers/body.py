"""Handlers that filter the document body and bound its size."""

from __future__ import annotations

from collections.abc import Mapping

from docparse.core.errors import OutputLimitExceeded
from docparse.handlers.base import ContentHandler, ContentHandlerDecorator


class BodyContentHandler(ContentHandlerDecorator):
    """Forwards only the descendants of ``<body>``.

    The ``html``, ``head`` and ``body`` elements and everything inside
    ``head`` are dropped, so the delegate sees the body's children only.

    Args:
        handler: delegate receiving the body events.
        limit: maximum number of characters forwarded, ``-1`` for no limit.
            When a write would go past the limit, the part that still fits is
            forwarded and :class:`OutputLimitExceeded` is raised.
    """

    def __init__(self, handler: ContentHandler, limit: int = -1) -> None:
        super().__init__(handler)
        self.limit = limit
        self.written = 0
        self._body_depth = 0
        self._in_body = False

    def start_element(self, name: str, attrs: Mapping[str, str] | None = None) -> None:
        if not self._in_body:
            if name == "body":
                self._in_body = True
            return
        self._body_depth += 1
        self.handler.start_element(name, attrs)

    def end_element(self, name: str) -> None:
        if not self._in_body:
            return
        if self._body_depth == 0:
            # closing </body>
            self._in_body = False
            return
        self._body_depth -= 1
        self.handler.end_element(name)

    def characters(self, text: str) -> None:
        if self._in_body:
            self.handler.characters(self._take(text))

    def ignorable_whitespace(self, text: str) -> None:
        if self._in_body:
            self.handler.ignorable_whitespace(self._take(text))

    def _take(self, text: str) -> str:
        if self.limit < 0:
            return text
        if self.written + len(text) <= self.limit:
            self.written += len(text)
            return text
        remaining = self.limit - self.written
        if remaining > 0:
            self.handler.characters(text[:remaining])
            self.written = self.limit
        raise OutputLimitExceeded(self.limit)
