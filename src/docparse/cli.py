"""Command line entry point.

Usage:
    docparse report.pdf                                   # XHTML, inline result
    docparse scan.png --content-type TEXT --ocr-strategy OCR_AND_TEXT_EXTRACTION
    docparse bundle.pdf --extract-embedded --store --storage-root ./out
"""

from __future__ import annotations

import argparse
import sys

from docparse.core.context import RunContext
from docparse.core.errors import DocParseError
from docparse.core.options import ContentType, OcrStrategy
from docparse.core.settings import get_settings
from docparse.engine.ocr import configure_tesseract
from docparse.parse import Parse
from docparse.storage.local import LocalStorage
from docparse.utils.io import resolve_path
from docparse.utils.logging import configure_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="docparse", description="Extract content from a document")
    p.add_argument("file", help="Local file to parse")
    p.add_argument("--extract-embedded", action="store_true", help="Upload embedded files")
    p.add_argument(
        "--content-type",
        choices=[c.value for c in ContentType],
        default=ContentType.XHTML.value,
    )
    p.add_argument(
        "--ocr-strategy",
        choices=[s.value for s in OcrStrategy],
        default=OcrStrategy.NO_OCR.value,
    )
    p.add_argument("--ocr-language", default=None, help="Tesseract language, e.g. eng+fra")
    p.add_argument(
        "--image-preprocessing",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Normalize images before OCR",
    )
    p.add_argument("--characters-limit", type=int, default=-1, help="-1 disables the limit")
    p.add_argument("--store", action="store_true", help="Store the result and print its URI")
    p.add_argument("--storage-root", default=None, help="Local storage directory")
    p.add_argument("-v", "--verbose", action="store_true")
    return p.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    settings = get_settings()
    configure_logging("DEBUG" if args.verbose else settings.log_level)
    configure_tesseract(settings.tesseract_cmd)

    storage = LocalStorage(args.storage_root or settings.storage_root)
    try:
        source = storage.put(resolve_path(args.file))
    except FileNotFoundError as exc:
        print(exc, file=sys.stderr)
        return 2

    task = Parse.from_config(
        {
            "from": "{{ inputs.file }}",
            "extractEmbedded": args.extract_embedded,
            "contentType": args.content_type,
            "ocrOptions": {
                "strategy": args.ocr_strategy,
                "language": args.ocr_language,
                "enableImagePreprocessing": args.image_preprocessing,
            },
            "store": args.store,
            "charactersLimit": args.characters_limit,
        }
    )
    with RunContext(storage, variables={"inputs": {"file": source}}) as ctx:
        try:
            output = task.run(ctx)
        except DocParseError as exc:
            print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
            return 1

    print(output.model_dump_json(indent=2, exclude_none=True))
    return 0


if __name__ == "__main__":
    sys.exit(main())
