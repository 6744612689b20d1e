"""Tesseract OCR adapter."""

from __future__ import annotations

import logging

import pytesseract
from PIL import Image, ImageOps

from docparse.core.errors import EngineError
from docparse.core.settings import get_settings
from docparse.engine.directives import OcrDirectives

logger = logging.getLogger(__name__)


def configure_tesseract(cmd: str | None) -> None:
    """Point pytesseract at a tesseract binary. Call once at startup."""
    if cmd:
        pytesseract.pytesseract.tesseract_cmd = cmd
        logger.info(f"Using tesseract binary: {cmd}")


class TesseractOCR:
    """Runs Tesseract on PIL images according to OCR directives."""

    name = "tesseract"

    def __init__(self, directives: OcrDirectives) -> None:
        self.lang = directives.language or get_settings().ocr_language
        self.preprocess = bool(directives.enable_image_preprocessing)

    def _prepare(self, image: Image.Image) -> Image.Image:
        if not self.preprocess:
            return image
        image = ImageOps.exif_transpose(image)
        return ImageOps.autocontrast(image.convert("L"))

    def recognize(self, image: Image.Image) -> str:
        """Return the text recognized in an image."""
        try:
            text = pytesseract.image_to_string(self._prepare(image), lang=self.lang)
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError) as exc:
            raise EngineError(f"OCR failed: {exc}", {"lang": self.lang}) from exc
        logger.debug(f"OCR recognized {len(text)} characters (lang={self.lang})")
        return text
