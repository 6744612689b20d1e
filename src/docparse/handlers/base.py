"""Base class for content handlers."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping


class ContentHandler(ABC):
    """Event sink that engines render a document into.

    Engines emit a stream of XHTML events: ``start_document``, nested
    ``start_element``/``end_element`` pairs with ``characters`` in between,
    then ``end_document``. Handlers decide what to keep; ``str(handler)``
    returns what they accumulated.
    """

    def start_document(self) -> None:
        pass

    def end_document(self) -> None:
        pass

    def start_element(self, name: str, attrs: Mapping[str, str] | None = None) -> None:
        pass

    def end_element(self, name: str) -> None:
        pass

    @abstractmethod
    def characters(self, text: str) -> None: ...

    def ignorable_whitespace(self, text: str) -> None:
        self.characters(text)


class ContentHandlerDecorator(ContentHandler):
    """Forwards every event to a wrapped handler."""

    def __init__(self, handler: ContentHandler) -> None:
        self.handler = handler

    def start_document(self) -> None:
        self.handler.start_document()

    def end_document(self) -> None:
        self.handler.end_document()

    def start_element(self, name: str, attrs: Mapping[str, str] | None = None) -> None:
        self.handler.start_element(name, attrs)

    def end_element(self, name: str) -> None:
        self.handler.end_element(name)

    def characters(self, text: str) -> None:
        self.handler.characters(text)

    def ignorable_whitespace(self, text: str) -> None:
        self.handler.ignorable_whitespace(text)

    def __str__(self) -> str:
        return str(self.handler)
