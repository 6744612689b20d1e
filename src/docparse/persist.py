"""Output of the extraction record, inline or through storage."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO

from pydantic import ValidationError
from pydantic_core import PydanticSerializationError

from docparse.core.context import RunContext
from docparse.core.errors import PersistenceError, StorageError
from docparse.core.record import ExtractionRecord, ParseOutput


class ResultPersister:
    """Turns a finished record into the invocation output.

    With ``store`` the record is written as JSON to a temporary file and
    uploaded, and only the resulting URI is returned. Without it the record
    is returned inline and nothing is written.
    """

    suffix = ".json"

    def __init__(self, ctx: RunContext) -> None:
        self.ctx = ctx

    def persist(self, record: ExtractionRecord, store: bool) -> ParseOutput:
        if not store:
            return ParseOutput(result=record)

        path: Path | None = None
        try:
            path = self.ctx.create_temp_file(self.suffix)
            path.write_text(record.model_dump_json(), encoding="utf-8")
            uri = self.ctx.storage.put(path)
        except (OSError, StorageError, PydanticSerializationError) as exc:
            raise PersistenceError(f"Unable to store the parse result: {exc}") from exc
        finally:
            if path is not None:
                path.unlink(missing_ok=True)

        self.ctx.logger.debug(f"Stored parse result as {uri}")
        return ParseOutput(uri=uri)

    @staticmethod
    def load(stream: BinaryIO) -> ExtractionRecord:
        """Read back a record written by :meth:`persist`."""
        try:
            return ExtractionRecord.model_validate_json(stream.read())
        except ValidationError as exc:
            raise PersistenceError(f"Invalid stored parse result: {exc}") from exc
