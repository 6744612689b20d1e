"""Media type detection and file extension lookup."""

from __future__ import annotations

import mimetypes

import magic

OCTET_STREAM = "application/octet-stream"
TEXT_PLAIN = "text/plain"

# Preferred extensions where the platform mime table is ambiguous.
_EXTENSIONS = {
    "application/pdf": ".pdf",
    "image/png": ".png",
    "image/jpeg": ".jpg",
    "image/gif": ".gif",
    "image/tiff": ".tiff",
    "image/bmp": ".bmp",
    "image/x-ms-bmp": ".bmp",
    "image/webp": ".webp",
    "image/jpx": ".jpx",
    "image/jp2": ".jp2",
    "application/zip": ".zip",
    "application/rtf": ".rtf",
    "text/plain": ".txt",
    "text/html": ".html",
    "application/xml": ".xml",
    "application/json": ".json",
}

# Image extensions as reported by PyMuPDF's image extraction.
IMAGE_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "jpx": "image/jpx",
    "jp2": "image/jp2",
    "tif": "image/tiff",
    "tiff": "image/tiff",
    "bmp": "image/bmp",
    "gif": "image/gif",
    "webp": "image/webp",
    "pbm": "image/x-portable-bitmap",
    "pgm": "image/x-portable-graymap",
    "ppm": "image/x-portable-pixmap",
    "pnm": "image/x-portable-anymap",
    "jxr": "image/jxr",
}

HEAD_SIZE = 4096


# libmagic answers that say nothing about the format.
_INCONCLUSIVE = {OCTET_STREAM, "application/x-empty", "inode/x-empty"}


def _guess_from_name(name: str | None) -> str | None:
    if not name:
        return None
    guessed, _ = mimetypes.guess_type(name, strict=False)
    return guessed


def detect_media_type(head: bytes, name: str | None = None) -> str:
    """Detect a media type from leading bytes, falling back to the name.

    The bytes decide whenever libmagic recognizes a format. The declared
    name is used when the bytes are inconclusive, and to refine generic
    plain text into a more specific text type (``notes.csv``).
    """
    detected = magic.from_buffer(head, mime=True) if head else OCTET_STREAM
    guessed = _guess_from_name(name)

    if detected in _INCONCLUSIVE:
        return guessed or OCTET_STREAM
    if detected == TEXT_PLAIN and guessed and guessed.startswith("text/"):
        return guessed
    return detected


def extension_for(media_type: str | None) -> str | None:
    """Return the file extension (with dot) for a media type, or ``None``."""
    if not media_type or media_type == OCTET_STREAM:
        return None
    base = media_type.split(";", 1)[0].strip().lower()
    if base in _EXTENSIONS:
        return _EXTENSIONS[base]
    return mimetypes.guess_extension(base, strict=False)
