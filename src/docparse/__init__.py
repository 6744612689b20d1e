"""Document content, metadata and embedded file extraction."""

from docparse.core.context import RunContext
from docparse.core.options import ContentType, OcrOptions, OcrStrategy, ParseOptions
from docparse.core.record import ExtractionRecord, ParseOutput
from docparse.core.registry import EngineRegistry, StorageRegistry
from docparse.parse import Parse, ParseState, parse

__all__ = [
    "ContentType",
    "EngineRegistry",
    "ExtractionRecord",
    "OcrOptions",
    "OcrStrategy",
    "Parse",
    "ParseOptions",
    "ParseOutput",
    "ParseState",
    "RunContext",
    "StorageRegistry",
    "parse",
]
