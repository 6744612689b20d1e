"""Tests for file name helpers."""

import pytest

from docparse.utils.io import has_extension, resolve_path, safe_file_name


@pytest.mark.parametrize(
    "name, expected",
    [
        ("report.pdf", "report.pdf"),
        ("C:\\Users\\jane\\report.pdf", "report.pdf"),
        ("C:report.pdf", "report.pdf"),
        ("\\\\fileserver\\share\\scan.tif", "scan.tif"),
        ("~jane/notes.txt", "notes.txt"),
        ("///var/data/notes.txt", "notes.txt"),
        ("mixed/sep\\file.txt", "file.txt"),
        ("nul\x00byte.txt", "nul byte.txt"),
    ],
)
def test_safe_file_name(name, expected):
    assert safe_file_name(name) == expected


@pytest.mark.parametrize("name", [None, "", ".", "..", "dir/", "C:\\", "a/.."])
def test_safe_file_name_rejects_unusable_names(name):
    assert safe_file_name(name) is None


def test_has_extension():
    assert has_extension("image0.jpg")
    assert not has_extension("README")


def test_resolve_path(tmp_path):
    target = tmp_path / "doc.pdf"
    target.write_bytes(b"%PDF")

    assert resolve_path(target) == target.resolve()
    with pytest.raises(FileNotFoundError):
        resolve_path(tmp_path / "missing.pdf")
