"""PyMuPDF-based parsing engine with Tesseract OCR."""

from __future__ import annotations

import io
import logging
import re
import zipfile
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import BinaryIO

import fitz  # PyMuPDF
from PIL import Image, UnidentifiedImageError

from docparse.core import metadata as md
from docparse.core.errors import EngineError, UnsupportedFormatError
from docparse.core.metadata import Metadata
from docparse.core.options import OcrStrategy
from docparse.core.registry import EngineRegistry
from docparse.core.settings import get_settings
from docparse.engine.base import (
    EmbeddedDocumentExtractor,
    ParseContext,
    ParsingEngine,
    XHTMLWriter,
)
from docparse.engine.detect import HEAD_SIZE, IMAGE_TYPES, detect_media_type
from docparse.engine.directives import OcrDirectives
from docparse.engine.ocr import TesseractOCR
from docparse.handlers.base import ContentHandler

logger = logging.getLogger(__name__)

PDF = "application/pdf"

# Raster formats handed to Pillow (and OCR) as whole-document inputs.
IMAGE_INPUTS = {
    "image/png",
    "image/jpeg",
    "image/tiff",
    "image/bmp",
    "image/x-ms-bmp",
    "image/gif",
    "image/webp",
}

# Archives whose entries are handed to the embedded extractor.
ARCHIVE_TYPES = {"application/zip", "application/x-zip-compressed"}

# PDF image stream filters that are kept in their native encoding.
_FILTER_TYPES = {"DCTDecode": "image/jpeg", "JPXDecode": "image/jpx"}

_PARAGRAPH_SPLIT_RE = re.compile(r"\n\s*\n")


def _paragraphs(text: str) -> list[str]:
    return [p.strip() for p in _PARAGRAPH_SPLIT_RE.split(text) if p.strip()]


def _pdf_date(value: str | None) -> str | None:
    """Convert a PDF date (``D:YYYYMMDDHHmmSS+HH'mm'``) to ISO 8601.

    Unparseable values are returned unchanged.
    """
    if not value:
        return None
    raw = value[2:] if value.startswith("D:") else value
    match = re.match(r"(\d{4})(\d{2})?(\d{2})?(\d{2})?(\d{2})?(\d{2})?(.*)$", raw)
    if not match:
        return value
    try:
        tz = timezone.utc
        tz_str = match.group(7) or ""
        tz_match = re.match(r"([+-])(\d{2})'?(\d{2})?'?", tz_str)
        if tz_match:
            sign = 1 if tz_match.group(1) == "+" else -1
            offset = timedelta(hours=int(tz_match.group(2)), minutes=int(tz_match.group(3) or 0))
            tz = timezone(sign * offset)
        parsed = datetime(
            int(match.group(1)),
            int(match.group(2) or 1),
            int(match.group(3) or 1),
            int(match.group(4) or 0),
            int(match.group(5) or 0),
            int(match.group(6) or 0),
            tzinfo=tz,
        )
    except ValueError:
        return value
    return parsed.isoformat()


class PyMuPDFEngine(ParsingEngine):
    """Engine decoding PDFs with PyMuPDF, images with Pillow, plain text and zip archives.

    OCR goes through Tesseract. For PDFs, ``OCR_ONLY`` replaces the text
    layer with the OCR output of each rendered page, while
    ``OCR_AND_TEXT_EXTRACTION`` keeps the text layer and adds the OCR text.
    Archive entries become embedded objects.
    """

    name = "pymupdf"

    def __init__(
        self,
        ocr_dpi: int | None = None,
        ocr_factory: Callable[[OcrDirectives], TesseractOCR] = TesseractOCR,
    ) -> None:
        self.ocr_dpi = ocr_dpi or get_settings().ocr_dpi
        self.ocr_factory = ocr_factory

    @property
    def supported_types(self) -> set[str]:
        return {PDF} | IMAGE_INPUTS | ARCHIVE_TYPES

    def supports(self, media_type: str) -> bool:
        return media_type.startswith("text/") or media_type in self.supported_types

    def parse(
        self,
        stream: BinaryIO,
        handler: ContentHandler,
        metadata: Metadata,
        context: ParseContext,
    ) -> None:
        data = stream.read()
        media_type = detect_media_type(data[:HEAD_SIZE], context.resource_name)
        if not self.supports(media_type):
            raise UnsupportedFormatError(media_type)

        metadata.set(md.CONTENT_TYPE, media_type)
        if context.resource_name:
            metadata.set(md.RESOURCE_NAME, context.resource_name)
        logger.debug(f"Parsing {len(data)} bytes as {media_type}")

        if media_type == PDF:
            self._parse_pdf(data, handler, metadata, context)
        elif media_type in IMAGE_INPUTS:
            self._parse_image(data, handler, metadata, context)
        elif media_type in ARCHIVE_TYPES:
            self._parse_archive(data, handler, metadata, context)
        else:
            self._parse_text(data, handler, metadata)

    # -- PDF -----------------------------------------------------------------

    def _parse_pdf(
        self, data: bytes, handler: ContentHandler, metadata: Metadata, context: ParseContext
    ) -> None:
        try:
            doc = fitz.open(stream=data, filetype="pdf")
        except (fitz.FileDataError, RuntimeError) as exc:
            raise EngineError(f"PDF is corrupted: {exc}") from exc

        with doc:
            if doc.needs_pass:
                raise EngineError("PDF is password protected")
            if doc.page_count == 0:
                raise EngineError("PDF has no pages")
            self._pdf_metadata(doc, metadata)

            pdf = context.directives.pdf
            ocr_directives = context.directives.ocr
            ocr = None if ocr_directives.skip_ocr else self.ocr_factory(ocr_directives)
            extractor = context.embedded_extractor

            writer = XHTMLWriter(handler, metadata)
            writer.start_document()
            seen_xrefs: set[int] = set()
            image_count = 0

            for page in doc:
                writer.start_element("div", {"class": "page"})

                if pdf.ocr_strategy is not OcrStrategy.OCR_ONLY or ocr is None:
                    for block in page.get_text("blocks", sort=True):
                        text, block_type = block[4], block[6]
                        if block_type == 0 and text.strip():
                            writer.element("p", text=text.strip())

                if ocr is not None:
                    self._ocr_page(page, ocr, writer)

                if pdf.extract_inline_images and extractor is not None:
                    for image in page.get_images(full=True):
                        xref = image[0]
                        if pdf.extract_unique_inline_images_only:
                            if xref in seen_xrefs:
                                continue
                            seen_xrefs.add(xref)
                        media_type = _FILTER_TYPES.get(image[8], "image/png")
                        if not extractor.should_extract(media_type):
                            continue
                        extracted = doc.extract_image(xref)
                        if not extracted or not extracted.get("image"):
                            logger.debug(f"Skipping image xref={xref} without data")
                            continue
                        ext = extracted.get("ext") or "png"
                        name = f"image{image_count}.{ext}"
                        image_count += 1
                        writer.element("img", {"src": f"embedded:{name}", "alt": name})
                        extractor.extract(
                            io.BytesIO(extracted["image"]),
                            name,
                            IMAGE_TYPES.get(ext, media_type),
                        )

                writer.end_element("div")

            if extractor is not None:
                self._pdf_attachments(doc, writer, extractor)

            writer.end_document()

    def _ocr_page(self, page: fitz.Page, ocr: TesseractOCR, writer: XHTMLWriter) -> None:
        pix = page.get_pixmap(dpi=self.ocr_dpi)
        with Image.open(io.BytesIO(pix.tobytes("png"))) as image:
            text = ocr.recognize(image)
        paragraphs = _paragraphs(text)
        if not paragraphs:
            return
        writer.start_element("div", {"class": "ocr"})
        for paragraph in paragraphs:
            writer.element("p", text=paragraph)
        writer.end_element("div")

    def _pdf_attachments(
        self, doc: fitz.Document, writer: XHTMLWriter, extractor: EmbeddedDocumentExtractor
    ) -> None:
        for index in range(doc.embfile_count()):
            info = doc.embfile_info(index)
            name = info.get("filename") or info.get("name") or None
            if not extractor.should_extract(detect_media_type(b"", name)):
                continue
            payload = doc.embfile_get(index)
            media_type = detect_media_type(payload[:HEAD_SIZE], name)
            writer.element("div", {"class": "embedded", "id": name or f"attachment{index}"})
            extractor.extract(io.BytesIO(payload), name, media_type)

    def _pdf_metadata(self, doc: fitz.Document, metadata: Metadata) -> None:
        info = doc.metadata or {}
        pdf_format = info.get("format") or ""
        if pdf_format.startswith("PDF "):
            metadata.set(md.PDF_VERSION, pdf_format.removeprefix("PDF "))
        for key, name in (
            ("title", md.TITLE),
            ("author", md.CREATOR),
            ("subject", md.SUBJECT),
            ("creator", md.CREATOR_TOOL),
            ("producer", md.PRODUCER),
        ):
            if info.get(key):
                metadata.set(name, info[key])
        if info.get("keywords"):
            metadata.set_values(
                md.KEYWORDS,
                [k.strip() for k in re.split(r"[,;]", info["keywords"]) if k.strip()],
            )
        metadata.set(md.CREATED, _pdf_date(info.get("creationDate")))
        metadata.set(md.MODIFIED, _pdf_date(info.get("modDate")))
        metadata.set(md.ENCRYPTED, str(bool(doc.is_encrypted)).lower())
        metadata.set(md.PAGE_COUNT, doc.page_count)

    # -- Archives ------------------------------------------------------------

    def _parse_archive(
        self, data: bytes, handler: ContentHandler, metadata: Metadata, context: ParseContext
    ) -> None:
        """List the entries of a zip archive and extract them in archive order.

        An entry is only read once the extractor accepts it, judged on the
        media type its name suggests.
        """
        try:
            archive = zipfile.ZipFile(io.BytesIO(data))
        except zipfile.BadZipFile as exc:
            raise EngineError(f"Archive is corrupted: {exc}") from exc

        extractor = context.embedded_extractor
        with archive:
            writer = XHTMLWriter(handler, metadata)
            writer.start_document()
            for info in archive.infolist():
                if info.is_dir():
                    continue
                writer.element("div", {"class": "embedded", "id": info.filename})
                if extractor is None or not extractor.should_extract(
                    detect_media_type(b"", info.filename)
                ):
                    continue
                try:
                    payload = archive.read(info)
                except (zipfile.BadZipFile, RuntimeError, NotImplementedError) as exc:
                    raise EngineError(
                        f"Unable to read archive entry {info.filename}: {exc}",
                        {"entry": info.filename},
                    ) from exc
                media_type = detect_media_type(payload[:HEAD_SIZE], info.filename)
                extractor.extract(io.BytesIO(payload), info.filename, media_type)
            writer.end_document()

    # -- Images and text ---------------------------------------------------------

    def _parse_image(
        self, data: bytes, handler: ContentHandler, metadata: Metadata, context: ParseContext
    ) -> None:
        try:
            image = Image.open(io.BytesIO(data))
            image.load()
        except (UnidentifiedImageError, OSError) as exc:
            raise EngineError(f"Unable to decode image: {exc}") from exc

        with image:
            metadata.set(md.IMAGE_WIDTH, image.width)
            metadata.set(md.IMAGE_LENGTH, image.height)
            writer = XHTMLWriter(handler, metadata)
            writer.start_document()
            if not context.directives.ocr.skip_ocr:
                ocr = self.ocr_factory(context.directives.ocr)
                for paragraph in _paragraphs(ocr.recognize(image)):
                    writer.element("p", text=paragraph)
            writer.end_document()

    def _parse_text(self, data: bytes, handler: ContentHandler, metadata: Metadata) -> None:
        text = data.decode("utf-8", errors="replace")
        writer = XHTMLWriter(handler, metadata)
        writer.start_document()
        for paragraph in _paragraphs(text):
            writer.element("p", text=paragraph)
        writer.end_document()


EngineRegistry.register("pymupdf", PyMuPDFEngine)
