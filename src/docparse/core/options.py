"""Per-invocation options: the templated surface and its resolved form."""

from __future__ import annotations

from collections.abc import Callable
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from docparse.core.errors import ConfigurationError


class ContentType(StrEnum):
    """Rendering mode of the extracted content."""

    TEXT = "TEXT"
    XHTML = "XHTML"  # markup with the html/head/body envelope
    XHTML_NO_HEADER = "XHTML_NO_HEADER"  # body markup only


class OcrStrategy(StrEnum):
    """How OCR is applied to image content."""

    NO_OCR = "NO_OCR"
    OCR_ONLY = "OCR_ONLY"
    OCR_AND_TEXT_EXTRACTION = "OCR_AND_TEXT_EXTRACTION"


class OcrOptions(BaseModel):
    """OCR settings. Each field may hold a template expression."""

    model_config = ConfigDict(populate_by_name=True)

    strategy: OcrStrategy | str = OcrStrategy.NO_OCR
    enable_image_preprocessing: bool | str | None = Field(
        default=None, alias="enableImagePreprocessing"
    )
    language: str | None = None


class ParseOptions(BaseModel):
    """Options of one parse invocation, as configured by the caller.

    Values are either plain values or template strings such as
    ``"{{ inputs.file }}"``; :meth:`resolve` renders them exactly once.
    """

    model_config = ConfigDict(populate_by_name=True)

    from_: str = Field(alias="from")
    extract_embedded: bool | str = Field(default=False, alias="extractEmbedded")
    content_type: ContentType | str = Field(default=ContentType.XHTML, alias="contentType")
    ocr_options: OcrOptions = Field(default_factory=OcrOptions, alias="ocrOptions")
    store: bool | str = True
    characters_limit: int | str | None = Field(default=None, alias="charactersLimit")

    def resolve(self, render: Callable[[Any], Any]) -> ResolvedOptions:
        """Render every templated field and validate the result.

        Raises:
            ConfigurationError: if rendering fails or a rendered value is
                not valid for its field.
        """
        raw = {
            "source": render(self.from_),
            "extract_embedded": render(self.extract_embedded),
            "content_type": render(self.content_type),
            "ocr_strategy": render(self.ocr_options.strategy),
            "enable_image_preprocessing": render(self.ocr_options.enable_image_preprocessing),
            "ocr_language": render(self.ocr_options.language),
            "store": render(self.store),
        }
        limit = render(self.characters_limit)
        if limit is not None and limit != "":
            raw["characters_limit"] = limit

        try:
            return ResolvedOptions.model_validate(raw)
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid parse options", {"errors": exc.errors(include_url=False)}
            ) from exc


class ResolvedOptions(BaseModel):
    """Plain option values, fixed for the rest of the invocation."""

    model_config = ConfigDict(frozen=True)

    source: str = Field(min_length=1)
    extract_embedded: bool = False
    content_type: ContentType = ContentType.XHTML
    ocr_strategy: OcrStrategy = OcrStrategy.NO_OCR
    enable_image_preprocessing: bool | None = None
    ocr_language: str | None = None
    store: bool = True
    characters_limit: int = Field(default=-1, ge=-1)
