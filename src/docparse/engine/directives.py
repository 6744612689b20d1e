"""Translation of resolved options into engine directives."""

from __future__ import annotations

from dataclasses import dataclass, field

from docparse.core.options import OcrStrategy, ResolvedOptions


@dataclass(frozen=True)
class OcrDirectives:
    """How the engine runs OCR.

    ``None`` fields were not requested and leave the engine default in place.
    """

    skip_ocr: bool = True
    language: str | None = None
    enable_image_preprocessing: bool | None = None


@dataclass(frozen=True)
class PdfDirectives:
    """PDF specific directives."""

    ocr_strategy: OcrStrategy = OcrStrategy.NO_OCR
    extract_inline_images: bool = False
    extract_unique_inline_images_only: bool = False


@dataclass(frozen=True)
class EngineDirectives:
    ocr: OcrDirectives = field(default_factory=OcrDirectives)
    pdf: PdfDirectives = field(default_factory=PdfDirectives)


def build_directives(options: ResolvedOptions) -> EngineDirectives:
    """Map resolved options onto engine directives.

    Inline images become embeddable objects only when embedded extraction
    is requested, and then each distinct image is extracted once no matter
    how many pages reference it.
    """
    ocr = OcrDirectives(
        skip_ocr=options.ocr_strategy is OcrStrategy.NO_OCR,
        language=options.ocr_language or None,
        enable_image_preprocessing=options.enable_image_preprocessing,
    )
    pdf = PdfDirectives(
        ocr_strategy=options.ocr_strategy,
        extract_inline_images=options.extract_embedded,
        extract_unique_inline_images_only=options.extract_embedded,
    )
    return EngineDirectives(ocr=ocr, pdf=pdf)
