"""Multi-valued metadata collected by a parsing engine."""

from __future__ import annotations

from collections.abc import Iterable

# Common keys, named after the Dublin Core / XMP properties engines report.
CONTENT_TYPE = "Content-Type"
RESOURCE_NAME = "resourceName"
TITLE = "dc:title"
CREATOR = "dc:creator"
SUBJECT = "dc:subject"
KEYWORDS = "meta:keyword"
CREATOR_TOOL = "xmp:CreatorTool"
PRODUCER = "pdf:producer"
CREATED = "dcterms:created"
MODIFIED = "dcterms:modified"
PAGE_COUNT = "xmpTPg:NPages"
PDF_VERSION = "pdf:PDFVersion"
ENCRYPTED = "pdf:encrypted"
IMAGE_WIDTH = "tiff:ImageWidth"
IMAGE_LENGTH = "tiff:ImageLength"


class Metadata:
    """Ordered mapping of metadata names to one or more string values."""

    def __init__(self) -> None:
        self._values: dict[str, list[str]] = {}

    def set(self, name: str, value: object) -> None:
        if value is None:
            self._values.pop(name, None)
            return
        self._values[name] = [str(value)]

    def set_values(self, name: str, values: Iterable[object]) -> None:
        cleaned = [str(v) for v in values if v is not None]
        if cleaned:
            self._values[name] = cleaned
        else:
            self._values.pop(name, None)

    def get(self, name: str) -> str | None:
        values = self._values.get(name)
        return values[0] if values else None

    def get_values(self, name: str) -> list[str]:
        return list(self._values.get(name, []))

    def names(self) -> list[str]:
        return list(self._values.keys())

    def to_dict(self) -> dict[str, str | list[str]]:
        """Collapse single-valued entries to scalars, keep the rest as lists."""
        return {
            name: values[0] if len(values) == 1 else list(values)
            for name, values in self._values.items()
        }

    def __contains__(self, name: str) -> bool:
        return name in self._values

    def __len__(self) -> int:
        return len(self._values)

    def __repr__(self) -> str:
        return f"Metadata({self._values!r})"
