"""Run context shared by the components of a single parse invocation."""

from __future__ import annotations

import logging
import os
import shutil
import tempfile
import uuid
from pathlib import Path
from typing import Any

from jinja2 import Environment, StrictUndefined, TemplateError

from docparse.core.errors import ConfigurationError
from docparse.core.settings import get_settings
from docparse.storage.base import Storage

logger = logging.getLogger(__name__)

_env = Environment(undefined=StrictUndefined, autoescape=False)


class RunContext:
    """Template variables, storage, working directory and logger of one run.

    A context belongs to exactly one invocation. Use it as a context manager
    so its working directory is removed when the invocation ends:

        with RunContext(storage, variables={"inputs": {"file": uri}}) as ctx:
            output = Parse.from_config(config).run(ctx)
    """

    def __init__(
        self,
        storage: Storage,
        variables: dict[str, Any] | None = None,
        engine: Any | None = None,
        work_dir: str | Path | None = None,
    ) -> None:
        self.storage = storage
        self.variables = variables or {}
        self.engine = engine
        self.run_id = uuid.uuid4().hex[:12]
        self.logger = logging.LoggerAdapter(
            logging.getLogger("docparse.run"), {"run_id": self.run_id}
        )
        parent = work_dir or get_settings().work_dir
        if parent is not None:
            Path(parent).mkdir(parents=True, exist_ok=True)
        self._work_dir = Path(tempfile.mkdtemp(prefix=f"docparse-{self.run_id}-", dir=parent))

    @property
    def work_dir(self) -> Path:
        return self._work_dir

    def render(self, value: Any) -> Any:
        """Render a template string against the run variables.

        Non-string values are returned unchanged.
        """
        if not isinstance(value, str) or "{" not in value:
            return value
        try:
            return _env.from_string(value).render(**self.variables)
        except TemplateError as exc:
            raise ConfigurationError(
                f"Unable to render '{value}': {exc}", {"template": value}
            ) from exc

    def create_temp_file(self, suffix: str = "") -> Path:
        """Create an empty file in the working directory and return its path."""
        fd, name = tempfile.mkstemp(suffix=suffix, dir=self._work_dir)
        os.close(fd)
        return Path(name)

    def cleanup(self) -> None:
        logger.debug(f"Removing work directory {self._work_dir}")
        shutil.rmtree(self._work_dir, ignore_errors=True)

    def __enter__(self) -> RunContext:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.cleanup()
