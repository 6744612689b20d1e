"""Logging setup for the CLI and the HTTP service."""

from __future__ import annotations

import logging

# Third-party loggers that are only interesting when they fail.
QUIET_LOGGERS = ("PIL", "pytesseract", "fitz", "minio", "urllib3")


class _RunIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = "-"
        return True


def configure_logging(level: str | int = "INFO") -> None:
    handler = logging.StreamHandler()
    handler.addFilter(_RunIdFilter())
    handler.setFormatter(
        logging.Formatter("%(asctime)s %(levelname)s [%(name)s] [%(run_id)s] %(message)s")
    )
    root = logging.getLogger()
    root.handlers[:] = [handler]
    root.setLevel(level if isinstance(level, int) else level.upper())

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.ERROR)
