"""Root logger setup from the [logging] config section."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import TYPE_CHECKING

from av1shrink.logging.context import ConversionContextFilter
from av1shrink.logging.handlers import JSONFormatter

if TYPE_CHECKING:
    from av1shrink.config.models import LoggingConfig

TEXT_FORMAT = "%(asctime)s - %(input_tag)s%(name)s - %(levelname)s - %(message)s"
TEXT_DATEFMT = "%Y-%m-%dT%H:%M:%S%z"


def _level(name: str) -> int:
    # LoggingConfig has already checked the name
    return logging.getLevelNamesMapping()[name.upper()]


def _formatter(format_name: str) -> logging.Formatter:
    if format_name.casefold() == "json":
        return JSONFormatter()
    return logging.Formatter(TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _open_log_file(config: LoggingConfig) -> logging.Handler | None:
    """Open the rotating log file, or None when there is none to open."""
    if not config.file:
        return None
    path = Path(config.file).expanduser()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        return RotatingFileHandler(
            path,
            maxBytes=config.max_bytes,
            backupCount=config.backup_count,
            encoding="utf-8",
        )
    except OSError as e:
        sys.stderr.write(f"Warning: Could not open log file {config.file}: {e}\n")
        return None


def configure_logging(config: LoggingConfig) -> None:
    """Replace the root logger's handlers according to config.

    Logs go to the file, to stderr, or both. stderr is always used when the
    file is unset or cannot be opened.
    """
    level = _level(config.level)
    formatter = _formatter(config.format)
    context_filter = ConversionContextFilter()

    handlers: list[logging.Handler] = []
    file_handler = _open_log_file(config)
    if file_handler is not None:
        handlers.append(file_handler)
    if config.include_stderr or file_handler is None:
        handlers.append(logging.StreamHandler(sys.stderr))

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(formatter)
        handler.addFilter(context_filter)
        root.addHandler(handler)
