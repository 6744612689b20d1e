"""XHTML serializing content handler."""

from __future__ import annotations

from collections.abc import Mapping

from docparse.handlers.base import ContentHandler

_TEXT_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;"})
_ATTR_ESCAPES = str.maketrans({"&": "&amp;", "<": "&lt;", ">": "&gt;", '"': "&quot;"})


def escape_text(text: str) -> str:
    return text.translate(_TEXT_ESCAPES)


def escape_attr(value: str) -> str:
    return value.translate(_ATTR_ESCAPES)


class XHTMLContentHandler(ContentHandler):
    """Serializes the event stream back to XHTML markup.

    Elements without content are written in short form (``<img ... />``).
    """

    def __init__(self) -> None:
        self._parts: list[str] = []
        self._open_tag = False

    def _close_open_tag(self) -> None:
        if self._open_tag:
            self._parts.append(">")
            self._open_tag = False

    def start_element(self, name: str, attrs: Mapping[str, str] | None = None) -> None:
        self._close_open_tag()
        self._parts.append(f"<{name}")
        for key, value in (attrs or {}).items():
            self._parts.append(f' {key}="{escape_attr(str(value))}"')
        self._open_tag = True

    def end_element(self, name: str) -> None:
        if self._open_tag:
            self._parts.append(" />")
            self._open_tag = False
        else:
            self._parts.append(f"</{name}>")

    def characters(self, text: str) -> None:
        if not text:
            return
        self._close_open_tag()
        self._parts.append(escape_text(text))

    def end_document(self) -> None:
        self._close_open_tag()

    def __str__(self) -> str:
        return "".join(self._parts)
