"""Base class for parsing engines."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import BinaryIO, Protocol

from docparse.core.metadata import TITLE, Metadata
from docparse.engine.directives import EngineDirectives
from docparse.handlers.base import ContentHandler

XHTML_NS = "http://www.w3.org/1999/xhtml"

# Elements followed by a newline so that plain text keeps block boundaries.
BLOCK_ELEMENTS = {"p", "div", "h1", "h2", "h3", "h4", "h5", "h6", "li", "pre", "title", "meta"}


class EmbeddedDocumentExtractor(Protocol):
    """Callback invoked by an engine for every embedded object it meets."""

    def should_extract(self, media_type: str | None = None) -> bool: ...

    def extract(
        self, stream: BinaryIO, name: str | None = None, media_type: str | None = None
    ) -> None: ...


@dataclass
class ParseContext:
    """Everything an engine needs besides the input stream and handler."""

    directives: EngineDirectives = field(default_factory=EngineDirectives)
    embedded_extractor: EmbeddedDocumentExtractor | None = None
    resource_name: str | None = None  # declared name of the input, if known


class XHTMLWriter:
    """Emits the XHTML event stream of a document into a handler.

    Takes care of the ``html``/``head``/``body`` envelope and of the newlines
    after block elements.
    """

    def __init__(self, handler: ContentHandler, metadata: Metadata) -> None:
        self.handler = handler
        self.metadata = metadata

    def start_document(self) -> None:
        self.handler.start_document()
        self.handler.start_element("html", {"xmlns": XHTML_NS})
        self.handler.start_element("head")
        for name in self.metadata.names():
            if name == TITLE:
                continue
            for value in self.metadata.get_values(name):
                self.element("meta", {"name": name, "content": value})
        self.element("title", text=self.metadata.get(TITLE) or "")
        self.handler.end_element("head")
        self.handler.start_element("body")

    def end_document(self) -> None:
        self.handler.end_element("body")
        self.handler.end_element("html")
        self.handler.end_document()

    def start_element(self, name: str, attrs: Mapping[str, str] | None = None) -> None:
        self.handler.start_element(name, attrs)

    def end_element(self, name: str) -> None:
        self.handler.end_element(name)
        if name in BLOCK_ELEMENTS:
            self.handler.ignorable_whitespace("\n")

    def characters(self, text: str) -> None:
        if text:
            self.handler.characters(text)

    def element(
        self, name: str, attrs: Mapping[str, str] | None = None, text: str | None = None
    ) -> None:
        self.start_element(name, attrs)
        if text:
            self.characters(text)
        self.end_element(name)


class ParsingEngine(ABC):
    """Abstract base for parsing engines.

    An engine decodes one input stream, renders it into the handler, fills
    the metadata, and calls the context's embedded extractor synchronously
    for every embedded object, in document order. Errors raised by the
    handler or the extractor must propagate out of :meth:`parse` unchanged.
    """

    name: str  # unique identifier for this engine

    @abstractmethod
    def parse(
        self,
        stream: BinaryIO,
        handler: ContentHandler,
        metadata: Metadata,
        context: ParseContext,
    ) -> None:
        """Parse a document into the handler and metadata."""
        ...

    def supports(self, media_type: str) -> bool:
        """Check if this engine can decode the given media type."""
        return media_type in self.supported_types

    @property
    def supported_types(self) -> set[str]:
        """Media types this engine can decode."""
        return {"application/pdf", "image/png", "image/jpeg", "image/tiff", "image/bmp"}
