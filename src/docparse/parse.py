"""Parse task: one document in, one extraction output out."""

from __future__ import annotations

from collections.abc import Mapping
from enum import StrEnum
from typing import Any
from urllib.parse import unquote, urlparse

from pydantic import ValidationError

from docparse.core.context import RunContext
from docparse.core.errors import ConfigurationError, DocParseError, EngineError
from docparse.core.metadata import Metadata
from docparse.core.options import ParseOptions
from docparse.core.record import ExtractionRecord, ParseOutput
from docparse.core.registry import EngineRegistry
from docparse.core.settings import get_settings
from docparse.embedded import EmbeddedExtractor
from docparse.engine.base import ParseContext, ParsingEngine
from docparse.engine.directives import build_directives
from docparse.handlers.base import ContentHandler
from docparse.handlers.selector import select_handler
from docparse.persist import ResultPersister
from docparse.utils.io import safe_file_name


class ParseState(StrEnum):
    IDLE = "IDLE"
    CONFIGURING = "CONFIGURING"
    PARSING = "PARSING"
    ASSEMBLING = "ASSEMBLING"
    DONE = "DONE"
    FAILED = "FAILED"


def default_engine() -> ParsingEngine:
    """Instantiate the engine named in the settings."""
    import docparse.engine.pymupdf  # noqa: F401  registers "pymupdf"

    return EngineRegistry.create(get_settings().engine)


class Parse:
    """Extract content, metadata and embedded objects from a stored document.

    Usage:
        task = Parse.from_config({"from": "{{ inputs.file }}", "contentType": "TEXT"})
        with RunContext(storage, variables={"inputs": {"file": uri}}) as ctx:
            output = task.run(ctx)

    The engine is invoked exactly once per run. Any failure ends the run: no
    retry happens and no partial record is returned.
    """

    def __init__(self, options: ParseOptions, engine: ParsingEngine | None = None) -> None:
        self.options = options
        self.engine = engine
        self.state = ParseState.IDLE

    @classmethod
    def from_config(cls, config: Mapping[str, Any], engine: ParsingEngine | None = None) -> Parse:
        try:
            options = ParseOptions.model_validate(dict(config))
        except ValidationError as exc:
            raise ConfigurationError(
                "Invalid parse configuration", {"errors": exc.errors(include_url=False)}
            ) from exc
        return cls(options, engine=engine)

    def _fail(self) -> None:
        self.state = ParseState.FAILED

    def _engine(self, ctx: RunContext) -> ParsingEngine:
        return self.engine or ctx.engine or default_engine()

    def run(self, ctx: RunContext) -> ParseOutput:
        self.state = ParseState.CONFIGURING
        try:
            options = self.options.resolve(ctx.render)
            handler = select_handler(options.content_type, options.characters_limit)
            extractor = EmbeddedExtractor(ctx, options.extract_embedded)
            context = ParseContext(
                directives=build_directives(options),
                embedded_extractor=extractor,
                resource_name=safe_file_name(unquote(urlparse(options.source).path)),
            )
            engine = self._engine(ctx)
        except DocParseError:
            self._fail()
            raise
        metadata = Metadata()

        self.state = ParseState.PARSING
        ctx.logger.info(
            f"Parsing {options.source} with {engine.name} "
            f"(contentType={options.content_type}, ocr={options.ocr_strategy})"
        )
        try:
            with ctx.storage.get(options.source) as stream:
                engine.parse(stream, handler, metadata, context)
        except DocParseError:
            self._fail()
            raise
        except Exception as exc:
            self._fail()
            raise EngineError(f"Unable to parse {options.source}: {exc}") from exc

        self.state = ParseState.ASSEMBLING
        record = self._assemble(handler, metadata, extractor)
        ctx.logger.info(
            f"Parsed {options.source}: {len(record.content)} characters, "
            f"{len(record.metadata)} metadata entries, {len(record.embedded)} embedded files"
        )
        try:
            output = ResultPersister(ctx).persist(record, options.store)
        except DocParseError:
            self._fail()
            raise

        self.state = ParseState.DONE
        return output

    @staticmethod
    def _assemble(
        handler: ContentHandler, metadata: Metadata, extractor: EmbeddedExtractor
    ) -> ExtractionRecord:
        return ExtractionRecord(
            content=str(handler),
            metadata=metadata.to_dict(),
            embedded=dict(extractor.extracted),
        )


def parse(
    options: ParseOptions | Mapping[str, Any],
    ctx: RunContext,
    engine: ParsingEngine | None = None,
) -> ParseOutput:
    """Run a single parse with the given options."""
    if isinstance(options, ParseOptions):
        task = Parse(options, engine)
    else:
        task = Parse.from_config(options, engine)
    return task.run(ctx)

