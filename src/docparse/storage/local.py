"""Filesystem-backed storage."""

from __future__ import annotations

import logging
import shutil
import uuid
from pathlib import Path
from typing import BinaryIO
from urllib.parse import quote, unquote, urlparse

from docparse.core.errors import StorageError
from docparse.core.registry import StorageRegistry
from docparse.storage.base import Storage

logger = logging.getLogger(__name__)

SCHEME = "storage"


class LocalStorage(Storage):
    """Stores objects under a root directory.

    URIs look like ``storage:///<id>/<filename>``; every ``put`` gets its own
    id directory so uploads never replace each other.
    """

    name = "local"

    def __init__(self, root: str | Path = ".storage") -> None:
        self.root = Path(root).resolve()
        self.root.mkdir(parents=True, exist_ok=True)

    def _path_for(self, uri: str) -> Path:
        parsed = urlparse(uri)
        if parsed.scheme != SCHEME:
            raise StorageError(f"Unsupported URI scheme: {uri}", {"uri": uri})
        path = (self.root / unquote(parsed.path).lstrip("/")).resolve()
        if not path.is_relative_to(self.root):
            raise StorageError(f"URI escapes storage root: {uri}", {"uri": uri})
        return path

    def get(self, uri: str) -> BinaryIO:
        path = self._path_for(uri)
        try:
            return path.open("rb")
        except OSError as exc:
            raise StorageError(f"Unable to read {uri}: {exc}", {"uri": uri}) from exc

    def put(self, file_path: str | Path) -> str:
        source = Path(file_path)
        key = f"{uuid.uuid4().hex}/{source.name}"
        target = self.root / key
        try:
            target.parent.mkdir(parents=True)
            shutil.copyfile(source, target)
        except OSError as exc:
            raise StorageError(
                f"Unable to store {source}: {exc}", {"file": str(source)}
            ) from exc
        logger.debug(f"Stored {source.name} as {key}")
        return f"{SCHEME}:///{quote(key)}"


StorageRegistry.register("local", LocalStorage)
