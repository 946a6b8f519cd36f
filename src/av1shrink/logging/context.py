"""Conversion context for structured logging.

Records logged while a conversion runs are tagged with the input file, so
a log shared by several runs can be told apart.
"""

from __future__ import annotations

import contextvars
import logging
from contextlib import contextmanager
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Generator

_input_file: contextvars.ContextVar[str | None] = contextvars.ContextVar(
    "input_file", default=None
)


def get_input_file() -> str | None:
    """Get the input file of the conversion in progress, if any."""
    return _input_file.get()


@contextmanager
def conversion_context(input_path: Path | str) -> Generator[None, None, None]:
    """Tag log records emitted inside the block with the input file.

    Example:
        with conversion_context("/videos/movie.mkv"):
            logger.info("Probing")  # record.input_file == "/videos/movie.mkv"
    """
    token = _input_file.set(str(input_path))
    try:
        yield
    finally:
        _input_file.reset(token)


class ConversionContextFilter(logging.Filter):
    """Logging filter that injects the current input file into records.

    Adds ``input_file`` for JSON output and ``input_tag`` (``"[movie.mkv] "``
    or an empty string) for the text format.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        input_file = _input_file.get()
        record.input_file = input_file
        record.input_tag = f"[{Path(input_file).name}] " if input_file else ""
        return True
