"""Shared fixtures: in-memory storage and a scripted parsing engine."""

from __future__ import annotations

import io
from pathlib import Path
from typing import BinaryIO

import pytest

from docparse.core.context import RunContext
from docparse.core.errors import StorageError
from docparse.core.metadata import Metadata
from docparse.engine.base import ParseContext, ParsingEngine, XHTMLWriter
from docparse.handlers.base import ContentHandler
from docparse.storage.base import Storage


class MemoryStorage(Storage):
    """Keeps objects in a dict and records every call."""

    name = "memory"

    def __init__(self) -> None:
        self.objects: dict[str, bytes] = {}
        self.gets: list[str] = []
        self.fail_put = False

    def add(self, data: bytes, name: str = "input.bin") -> str:
        uri = f"mem:///{len(self.objects)}/{name}"
        self.objects[uri] = data
        return uri

    def get(self, uri: str) -> BinaryIO:
        self.gets.append(uri)
        if uri not in self.objects:
            raise StorageError(f"No such object: {uri}")
        return io.BytesIO(self.objects[uri])

    def put(self, file_path: str | Path) -> str:
        if self.fail_put:
            raise StorageError("upload refused")
        return self.add(Path(file_path).read_bytes(), Path(file_path).name)


class ScriptedEngine(ParsingEngine):
    """Replays a fixed document: paragraphs, embedded objects and metadata.

    ``script`` items are ``("p", text)``, ``("embedded", name, media_type,
    payload)`` or ``("raise", exception)``.
    """

    name = "scripted"

    def __init__(self, script: list[tuple], metadata: dict | None = None) -> None:
        self.script = script
        self.metadata = metadata or {}
        self.calls = 0
        self.skipped_embedded = 0

    def parse(
        self,
        stream: BinaryIO,
        handler: ContentHandler,
        metadata: Metadata,
        context: ParseContext,
    ) -> None:
        self.calls += 1
        stream.read()
        for key, value in self.metadata.items():
            if isinstance(value, list):
                metadata.set_values(key, value)
            else:
                metadata.set(key, value)

        writer = XHTMLWriter(handler, metadata)
        writer.start_document()
        writer.start_element("div", {"class": "page"})
        extractor = context.embedded_extractor
        for item in self.script:
            match item:
                case ("p", text):
                    writer.element("p", text=text)
                case ("embedded", name, media_type, payload):
                    if extractor is None or not extractor.should_extract(media_type):
                        self.skipped_embedded += 1
                        continue
                    label = name or "embedded"
                    writer.element("img", {"src": f"embedded:{label}", "alt": label})
                    extractor.extract(io.BytesIO(payload), name, media_type)
                case ("raise", exc):
                    raise exc
        writer.end_element("div")
        writer.end_document()


@pytest.fixture
def storage() -> MemoryStorage:
    return MemoryStorage()


@pytest.fixture
def ctx(storage, tmp_path):
    with RunContext(storage, work_dir=tmp_path / "work") as context:
        yield context


@pytest.fixture
def make_ctx(storage, tmp_path):
    """Factory for additional run contexts sharing the same storage."""
    contexts: list[RunContext] = []

    def _make(**kwargs) -> RunContext:
        context = RunContext(storage, work_dir=tmp_path / "work", **kwargs)
        contexts.append(context)
        return context

    yield _make
    for context in contexts:
        context.cleanup()


@pytest.fixture
def scripted_engine():
    return ScriptedEngine
