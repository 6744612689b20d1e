"""Service settings using Pydantic Settings.

Configuration is loaded from:
1. Environment variables (highest priority)
2. .env file
3. Default values (lowest priority)
"""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """docparse settings.

    All settings can be overridden via environment variables with prefix DOCPARSE_
    Example: DOCPARSE_OCR_DPI=200
    """

    model_config = SettingsConfigDict(
        env_prefix="DOCPARSE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Engine
    engine: str = Field(default="pymupdf", description="Registered parsing engine name")
    ocr_dpi: int = Field(default=300, description="Render resolution for OCR of PDF pages")
    ocr_language: str = Field(default="eng", description="Tesseract language when none is requested")
    tesseract_cmd: str | None = Field(default=None, description="Path to the tesseract binary")

    # Storage
    storage: str = Field(default="local", description="Registered storage backend name")
    storage_root: str = Field(default=".storage", description="Root directory of local storage")
    work_dir: str | None = Field(default=None, description="Parent directory of per-run working dirs")

    # MinIO
    minio_endpoint: str = Field(default="localhost:9000")
    minio_access_key: str = Field(default="minioadmin")
    minio_secret_key: str = Field(default="minioadmin")
    minio_bucket: str = Field(default="docparse")
    minio_secure: bool = Field(default=False)

    # Logging
    log_level: str = Field(default="INFO")


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
