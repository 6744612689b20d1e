"""Base class for object storage backends."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path
from typing import BinaryIO


class Storage(ABC):
    """Object storage reached through URIs.

    Backends only need two operations: open a stored object for reading and
    upload a local file, returning the URI of the new object.
    """

    name: str  # unique identifier for this backend

    @abstractmethod
    def get(self, uri: str) -> BinaryIO:
        """Open the object at ``uri`` for binary reading.

        The caller owns the returned stream and must close it.
        """
        ...

    @abstractmethod
    def put(self, file_path: str | Path) -> str:
        """Upload a local file and return its storage URI."""
        ...
