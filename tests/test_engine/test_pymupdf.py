"""Tests for the PyMuPDF engine on generated documents."""

import io
import shutil
import zipfile

import fitz
import pytest
from PIL import Image, ImageDraw

from docparse.core.context import RunContext
from docparse.core.errors import EngineError, UnsupportedFormatError
from docparse.core.metadata import Metadata
from docparse.core.options import ContentType, OcrStrategy
from docparse.engine.base import ParseContext
from docparse.engine.directives import EngineDirectives, OcrDirectives, PdfDirectives
from docparse.engine.ocr import TesseractOCR
from docparse.engine.pymupdf import PyMuPDFEngine, _pdf_date
from docparse.handlers.selector import select_handler
from docparse.parse import Parse
from docparse.storage.local import LocalStorage

PAGES = [
    "1 Lorem ipsum dolor sit amet.",
    "2 Vestibulum ante ipsum primis.",
    "3 Aliquam erat volutpat. Cras fringilla.",
]


def png_bytes(size=(40, 30), color="red"):
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


def make_pdf(pages=PAGES, image=None, attachment=None, metadata=None):
    """Build a PDF whose pages all reference the same image object."""
    doc = fitz.open()
    xref = 0
    for text in pages:
        page = doc.new_page()
        page.insert_text((72, 72), text)
        if image is not None:
            rect = fitz.Rect(72, 100, 172, 175)
            if xref:
                page.insert_image(rect, xref=xref)
            else:
                xref = page.insert_image(rect, stream=image)
    if attachment is not None:
        name, payload = attachment
        doc.embfile_add(name, payload, filename=name)
    if metadata:
        doc.set_metadata(metadata)
    data = doc.tobytes()
    doc.close()
    return data


class RecordingExtractor:
    def __init__(self, enabled=True):
        self.enabled = enabled
        self.objects = []

    def should_extract(self, media_type=None):
        return self.enabled

    def extract(self, stream, name=None, media_type=None):
        self.objects.append((name, media_type, stream.read()))


class FakeOCR:
    instances = []

    def __init__(self, directives):
        self.directives = directives
        self.calls = 0
        FakeOCR.instances.append(self)

    def recognize(self, image):
        self.calls += 1
        return "Recognized words\n\nSecond paragraph"


@pytest.fixture(autouse=True)
def reset_fake_ocr():
    FakeOCR.instances = []


def run_engine(data, content_type=ContentType.XHTML_NO_HEADER, directives=None,
               extractor=None, name="doc.pdf"):
    engine = PyMuPDFEngine(ocr_dpi=72, ocr_factory=FakeOCR)
    handler = select_handler(content_type)
    metadata = Metadata()
    context = ParseContext(
        directives=directives or EngineDirectives(),
        embedded_extractor=extractor,
        resource_name=name,
    )
    engine.parse(io.BytesIO(data), handler, metadata, context)
    return str(handler), metadata


def ocr_directives(strategy):
    return EngineDirectives(
        ocr=OcrDirectives(skip_ocr=False), pdf=PdfDirectives(ocr_strategy=strategy)
    )


def test_pdf_text_and_metadata():
    data = make_pdf(metadata={"title": "Sample", "author": "Jane", "keywords": "alpha; beta"})

    content, metadata = run_engine(data, ContentType.TEXT)

    for text in PAGES:
        assert text in content
    assert metadata.get("Content-Type") == "application/pdf"
    assert metadata.get("resourceName") == "doc.pdf"
    assert metadata.get("dc:title") == "Sample"
    assert metadata.get("dc:creator") == "Jane"
    assert metadata.get_values("meta:keyword") == ["alpha", "beta"]
    assert metadata.get("xmpTPg:NPages") == "3"


def test_pdf_pages_are_divs():
    content, _ = run_engine(make_pdf())

    assert content.count('<div class="page">') == 3
    assert "<p>1 Lorem ipsum dolor sit amet.</p>" in content


def test_shared_image_is_extracted_once():
    extractor = RecordingExtractor()
    directives = EngineDirectives(
        pdf=PdfDirectives(extract_inline_images=True, extract_unique_inline_images_only=True)
    )

    content, _ = run_engine(make_pdf(image=png_bytes()), directives=directives, extractor=extractor)

    assert len(extractor.objects) == 1
    name, media_type, payload = extractor.objects[0]
    assert name.startswith("image0.")
    assert media_type.startswith("image/")
    assert payload
    assert f'<img src="embedded:{name}" alt="{name}" />' in content


def test_shared_image_per_page_when_not_unique():
    extractor = RecordingExtractor()
    directives = EngineDirectives(pdf=PdfDirectives(extract_inline_images=True))

    run_engine(make_pdf(image=png_bytes()), directives=directives, extractor=extractor)

    assert [name.split(".")[0] for name, _, _ in extractor.objects] == [
        "image0",
        "image1",
        "image2",
    ]


def test_inline_images_ignored_when_not_requested():
    extractor = RecordingExtractor()

    content, _ = run_engine(make_pdf(image=png_bytes()), extractor=extractor)

    assert extractor.objects == []
    assert "<img" not in content


def test_declined_images_are_not_emitted():
    extractor = RecordingExtractor(enabled=False)
    directives = EngineDirectives(pdf=PdfDirectives(extract_inline_images=True))

    content, _ = run_engine(make_pdf(image=png_bytes()), directives=directives, extractor=extractor)

    assert extractor.objects == []
    assert "<img" not in content


def test_attachments_are_extracted():
    extractor = RecordingExtractor()

    content, _ = run_engine(
        make_pdf(attachment=("notes.txt", b"attached notes")), extractor=extractor
    )

    assert extractor.objects == [("notes.txt", "text/plain", b"attached notes")]
    assert '<div class="embedded" id="notes.txt" />' in content


def test_ocr_only_replaces_the_text_layer():
    content, _ = run_engine(make_pdf(), directives=ocr_directives(OcrStrategy.OCR_ONLY))

    assert "Lorem ipsum" not in content
    assert content.count('<div class="ocr">') == 3
    assert "<p>Recognized words</p>" in content
    assert FakeOCR.instances[0].calls == 3


def test_ocr_and_text_keeps_both():
    content, _ = run_engine(
        make_pdf(), directives=ocr_directives(OcrStrategy.OCR_AND_TEXT_EXTRACTION)
    )

    assert "Lorem ipsum" in content
    assert "<p>Second paragraph</p>" in content


def test_no_ocr_never_builds_an_ocr_engine():
    run_engine(make_pdf())

    assert FakeOCR.instances == []


def test_image_input_without_ocr():
    content, metadata = run_engine(
        png_bytes(size=(64, 48)), ContentType.TEXT, name="scan.png"
    )

    assert content == ""
    assert metadata.get("Content-Type") == "image/png"
    assert metadata.get("tiff:ImageWidth") == "64"
    assert metadata.get("tiff:ImageLength") == "48"


def test_image_input_with_ocr():
    directives = EngineDirectives(ocr=OcrDirectives(skip_ocr=False, language="deu"))

    content, _ = run_engine(png_bytes(), ContentType.TEXT, directives=directives, name="scan.png")

    assert content == "Recognized words\nSecond paragraph\n"
    assert FakeOCR.instances[0].directives.language == "deu"


def test_text_input():
    content, metadata = run_engine(
        b"first paragraph\n\nsecond paragraph\n", ContentType.TEXT, name="notes.txt"
    )

    assert content == "first paragraph\nsecond paragraph\n"
    assert metadata.get("Content-Type") == "text/plain"


def zip_bytes(entries):
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w") as archive:
        for name, payload in entries:
            archive.writestr(name, payload)
    return buffer.getvalue()


ARCHIVE = [
    ("docs/", b""),
    ("docs/readme.txt", b"archived notes"),
    ("images/logo.png", png_bytes()),
]


def test_archive_entries_are_extracted_in_order():
    extractor = RecordingExtractor()

    content, metadata = run_engine(zip_bytes(ARCHIVE), extractor=extractor, name="bundle.zip")

    assert metadata.get("Content-Type") == "application/zip"
    assert [(name, media_type) for name, media_type, _ in extractor.objects] == [
        ("docs/readme.txt", "text/plain"),
        ("images/logo.png", "image/png"),
    ]
    assert extractor.objects[0][2] == b"archived notes"
    assert '<div class="embedded" id="docs/readme.txt" />' in content
    assert '<div class="embedded" id="images/logo.png" />' in content


def test_declined_archive_entries_are_never_read(monkeypatch):
    def refuse(*args, **kwargs):
        raise AssertionError("entry read")

    monkeypatch.setattr(zipfile.ZipFile, "read", refuse)
    extractor = RecordingExtractor(enabled=False)

    content, _ = run_engine(zip_bytes(ARCHIVE), extractor=extractor, name="bundle.zip")

    assert extractor.objects == []
    assert content.count('class="embedded"') == 2


def test_text_starting_like_a_bitmap():
    content, metadata = run_engine(
        b"BMI values for the cohort\n\nSecond paragraph\n", ContentType.TEXT, name="notes.txt"
    )

    assert metadata.get("Content-Type") == "text/plain"
    assert content == "BMI values for the cohort\nSecond paragraph\n"


def test_unsupported_input():
    with pytest.raises(UnsupportedFormatError):
        run_engine(bytes(range(256)) * 4, name="blob.bin")


def test_corrupted_pdf():
    with pytest.raises(EngineError):
        run_engine(b"%PDF-1.4\nthis is not a pdf at all")


@pytest.mark.parametrize(
    "value, expected",
    [
        ("D:20240131120000Z", "2024-01-31T12:00:00+00:00"),
        ("D:20240131120000+02'00'", "2024-01-31T12:00:00+02:00"),
        ("D:2024", "2024-01-01T00:00:00+00:00"),
        ("yesterday", "yesterday"),
        (None, None),
    ],
)
def test_pdf_date(value, expected):
    assert _pdf_date(value) == expected


def test_parse_stored_pdf_end_to_end(tmp_path):
    storage = LocalStorage(tmp_path / "store")
    source = tmp_path / "multi.pdf"
    source.write_bytes(make_pdf(image=png_bytes()))
    uri = storage.put(source)
    task = Parse.from_config(
        {
            "from": "{{ inputs.file }}",
            "extractEmbedded": True,
            "contentType": "XHTML_NO_HEADER",
            "store": False,
        },
        engine=PyMuPDFEngine(),
    )

    with RunContext(storage, {"inputs": {"file": uri}}, work_dir=tmp_path / "work") as ctx:
        output = task.run(ctx)

    record = output.result
    assert len(record.embedded) == 1
    name, image_uri = next(iter(record.embedded.items()))
    assert name.startswith("image0.")
    assert "embedded:image0." in record.content
    assert record.metadata["resourceName"] == "multi.pdf"
    with storage.get(image_uri) as stream:
        assert stream.read()


@pytest.mark.parametrize("extract_embedded", [True, False])
def test_parse_stored_archive_end_to_end(tmp_path, extract_embedded):
    storage = LocalStorage(tmp_path / "store")
    source = tmp_path / "bundle.zip"
    source.write_bytes(zip_bytes(ARCHIVE))
    uri = storage.put(source)
    task = Parse.from_config(
        {"from": uri, "extractEmbedded": extract_embedded, "store": False},
        engine=PyMuPDFEngine(),
    )

    with RunContext(storage, work_dir=tmp_path / "work") as ctx:
        record = task.run(ctx).result

    if extract_embedded:
        assert set(record.embedded) == {"readme.txt", "logo.png"}
        with storage.get(record.embedded["readme.txt"]) as stream:
            assert stream.read() == b"archived notes"
    else:
        assert record.embedded == {}
    assert record.metadata["Content-Type"] == "application/zip"


@pytest.mark.skipif(shutil.which("tesseract") is None, reason="tesseract is not installed")
def test_tesseract_reads_rendered_text():
    image = Image.new("RGB", (600, 120), "white")
    ImageDraw.Draw(image).text((20, 40), "HELLO WORLD", fill="black", font_size=48)

    text = TesseractOCR(OcrDirectives(skip_ocr=False, enable_image_preprocessing=True)).recognize(
        image
    )

    assert "HELLO" in text.upper()
