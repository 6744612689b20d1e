"""
HTTP API server for docparse.

Start:
    python deploy/server.py                                  # defaults (port 8000)
    python deploy/server.py --port 8080 --storage minio      # MinIO storage
    nohup python deploy/server.py > /var/log/docparse.log 2>&1 &  # background

Endpoints:
    POST /v1/parse   Upload a document, get the parse output back
    GET  /health     Health check
"""

from __future__ import annotations

import argparse
import shutil
import tempfile
from contextlib import asynccontextmanager
from pathlib import Path

import uvicorn
from fastapi import FastAPI, File, Form, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool

from docparse.core.context import RunContext
from docparse.core.errors import (
    ConfigurationError,
    DocParseError,
    OutputLimitExceeded,
    UnsupportedFormatError,
)
from docparse.core.options import ContentType, OcrStrategy
from docparse.core.record import ParseOutput
from docparse.core.registry import StorageRegistry
from docparse.core.settings import get_settings
from docparse.engine.ocr import configure_tesseract
from docparse.parse import Parse, default_engine
from docparse.storage.base import Storage
import docparse.storage.local  # noqa: F401  registers "local"
from docparse.utils.logging import configure_logging


# ── CLI args ────────────────────────────────────────────────────────────
def parse_args():
    settings = get_settings()
    p = argparse.ArgumentParser(description="docparse API Server")
    p.add_argument("--host", default="0.0.0.0", help="Bind host")
    p.add_argument("--port", type=int, default=8000, help="Bind port")
    p.add_argument("--storage", default=settings.storage, help="Storage backend name")
    p.add_argument("--log-level", default=settings.log_level)
    return p.parse_args()


def apply_args(args: argparse.Namespace) -> None:
    """Write command line overrides into the settings read by the lifespan."""
    settings = get_settings()
    settings.storage = args.storage
    settings.log_level = args.log_level


# ── Globals (initialised in lifespan) ───────────────────────────────────
storage: Storage | None = None


def _build_storage(name: str) -> Storage:
    if name == "minio":
        import docparse.storage.minio_storage  # noqa: F401  registers "minio"
    kwargs = {"root": get_settings().storage_root} if name == "local" else {}
    return StorageRegistry.create(name, **kwargs)


@asynccontextmanager
async def lifespan(app: FastAPI):
    global storage
    settings = get_settings()
    configure_logging(settings.log_level)
    configure_tesseract(settings.tesseract_cmd)
    storage = _build_storage(settings.storage)
    yield


app = FastAPI(title="docparse", lifespan=lifespan)


def _run(config: dict, upload_path: Path) -> ParseOutput:
    task = Parse.from_config(config)
    source = storage.put(upload_path)
    variables = {"upload": {"uri": source}}
    with RunContext(storage, variables=variables, engine=default_engine()) as ctx:
        return task.run(ctx)


# ── Endpoint ────────────────────────────────────────────────────────────
@app.post("/v1/parse", response_model=ParseOutput, response_model_exclude_none=True)
async def parse_document(
    file: UploadFile = File(...),
    extract_embedded: bool = Form(False, alias="extractEmbedded"),
    content_type: ContentType = Form(ContentType.XHTML, alias="contentType"),
    ocr_strategy: OcrStrategy = Form(OcrStrategy.NO_OCR, alias="ocrStrategy"),
    ocr_language: str | None = Form(None, alias="ocrLanguage"),
    enable_image_preprocessing: bool | None = Form(None, alias="enableImagePreprocessing"),
    store: bool = Form(False),
    characters_limit: int = Form(-1, alias="charactersLimit"),
):
    if storage is None:
        raise HTTPException(status_code=503, detail="Storage not ready yet")

    config = {
        "from": "{{ upload.uri }}",
        "extractEmbedded": extract_embedded,
        "contentType": content_type,
        "ocrOptions": {
            "strategy": ocr_strategy,
            "language": ocr_language,
            "enableImagePreprocessing": enable_image_preprocessing,
        },
        "store": store,
        "charactersLimit": characters_limit,
    }

    with tempfile.TemporaryDirectory(prefix="docparse-upload-") as tmp:
        upload_path = Path(tmp) / (Path(file.filename or "").name or "upload")
        with upload_path.open("wb") as out:
            shutil.copyfileobj(file.file, out)
        try:
            return await run_in_threadpool(_run, config, upload_path)
        except (ConfigurationError, OutputLimitExceeded) as exc:
            raise HTTPException(status_code=422, detail=str(exc)) from exc
        except UnsupportedFormatError as exc:
            raise HTTPException(status_code=415, detail=str(exc)) from exc
        except DocParseError as exc:
            raise HTTPException(status_code=500, detail=str(exc)) from exc


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    args = parse_args()
    apply_args(args)
    uvicorn.run(app, host=args.host, port=args.port)
