"""Content handler selection per rendering mode."""

from __future__ import annotations

from docparse.core.options import ContentType
from docparse.handlers.base import ContentHandler
from docparse.handlers.body import BodyContentHandler
from docparse.handlers.text import TextContentHandler
from docparse.handlers.xhtml import XHTMLContentHandler


def select_handler(content_type: ContentType, characters_limit: int = -1) -> ContentHandler:
    """Build the handler for a content type.

    ``XHTML`` keeps the full document and is never bounded; ``TEXT`` and
    ``XHTML_NO_HEADER`` keep the body only and honour ``characters_limit``.
    """
    match content_type:
        case ContentType.XHTML:
            return XHTMLContentHandler()
        case ContentType.XHTML_NO_HEADER:
            return BodyContentHandler(XHTMLContentHandler(), limit=characters_limit)
        case ContentType.TEXT:
            return BodyContentHandler(TextContentHandler(), limit=characters_limit)
    raise ValueError(f"Unknown content type: {content_type}")
