"""File I/O and file name utilities."""

from __future__ import annotations

import re
from pathlib import Path

# Leading part of a path that names a root: "C:", "C:\", "\\server\share\", "/", "~user/".
_PREFIX_RE = re.compile(r"^(?:[A-Za-z]:[\\/]?|[\\/]{2}[^\\/]+[\\/]|~[^\\/]*[\\/]?|[\\/]+)")


def resolve_path(file_path: str | Path) -> Path:
    """Resolve and validate a file path."""
    path = Path(file_path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"File not found: {path}")
    return path


def has_extension(name: str) -> bool:
    return "." in name


def safe_file_name(name: str | None) -> str | None:
    """Reduce a declared file name to a bare, normalized file name.

    NUL bytes become spaces, any root prefix and directory components are
    dropped. Returns ``None`` when nothing usable is left (empty, ``.`` or
    ``..``).
    """
    if name is None:
        return None
    name = name.replace("\x00", " ")
    name = _PREFIX_RE.sub("", name, count=1)
    name = re.split(r"[\\/]", name)[-1].strip()
    if name in {"", ".", ".."}:
        return None
    return name
