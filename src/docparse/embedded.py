"""Extraction of embedded objects met during a parse."""

from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import BinaryIO

from docparse.core.context import RunContext
from docparse.core.errors import EmbeddedExtractionError, StorageError
from docparse.engine.detect import extension_for
from docparse.utils.io import has_extension, safe_file_name

logger = logging.getLogger(__name__)


class EmbeddedExtractor:
    """Uploads every embedded object of one invocation to storage.

    The engine calls :meth:`should_extract` and :meth:`extract` synchronously
    while it parses, once per embedded object. An instance belongs to a
    single invocation: ``file_count`` numbers the unnamed objects of that
    invocation only, and ``extracted`` maps each resolved file name to the
    URI of its upload.

    Two objects that resolve to the same name share one entry; the later
    upload replaces the earlier one in ``extracted``.
    """

    def __init__(self, ctx: RunContext, parse_embedded: bool) -> None:
        self.ctx = ctx
        self.parse_embedded = parse_embedded
        self.file_count = 0
        self.extracted: dict[str, str] = {}

    def should_extract(self, media_type: str | None = None) -> bool:
        return self.parse_embedded

    def file_name(self, name: str | None, media_type: str | None) -> str:
        """Resolve the file name an embedded object is recorded under."""
        resolved = safe_file_name(name)
        if resolved is None:
            resolved = f"file_{self.file_count}"
            self.file_count += 1

        if not has_extension(resolved):
            extension = extension_for(media_type)
            if extension:
                resolved += extension
            else:
                logger.debug(f"Unable to find an extension for {media_type} on {resolved}")
        return resolved

    def extract(
        self, stream: BinaryIO, name: str | None = None, media_type: str | None = None
    ) -> None:
        """Copy an embedded object to a temporary file and upload it.

        Raises:
            EmbeddedExtractionError: if the copy or the upload fails.
        """
        file_name = self.file_name(name, media_type)
        self.ctx.logger.debug(f"Extracting file {file_name}")

        path: Path | None = None
        try:
            path = self.ctx.create_temp_file(Path(file_name).suffix)
            with path.open("wb") as output:
                shutil.copyfileobj(stream, output)
            uri = self.ctx.storage.put(path)
        except (OSError, StorageError) as exc:
            raise EmbeddedExtractionError(
                f"Unable to extract embedded file {file_name}: {exc}",
                {"name": file_name},
            ) from exc
        finally:
            if path is not None:
                path.unlink(missing_ok=True)

        self.extracted[file_name] = uri
