"""Transcode data types and result classes."""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path

from av1shrink.executor.ffmpeg_utils import cleanup_temp_file

logger = logging.getLogger(__name__)

# Number of trailing ffmpeg output lines kept for error reports
OUTPUT_TAIL_LINES = 20


@dataclass
class ConversionJob:
    """Paths and size of one conversion run.

    The thumbnail is a temporary file owned by the job; cleanup() removes it
    and is safe to call any number of times.
    """

    input_path: Path
    output_path: Path
    thumbnail_path: Path
    input_size_bytes: int
    _cleaned_up: bool = field(default=False, init=False, repr=False)

    @property
    def cleaned_up(self) -> bool:
        """True once cleanup() has run."""
        return self._cleaned_up

    def cleanup(self) -> None:
        """Remove the temporary thumbnail (at most once).

        Removal errors are logged, never raised.
        """
        if self._cleaned_up:
            return
        self._cleaned_up = True
        cleanup_temp_file(self.thumbnail_path)


@dataclass
class TranscodeResult:
    """Result of a transcode operation."""

    success: bool
    output_path: Path | None = None
    returncode: int | None = None
    error_message: str | None = None
    output_tail: str = ""
    """Last lines of combined stderr and stdout (failures only)."""

    retried_without_thumbnail: bool = False


def output_tail(
    stderr_lines: Iterable[str],
    stdout_lines: Iterable[str],
    limit: int = OUTPUT_TAIL_LINES,
) -> str:
    """Return the last ``limit`` lines of stderr followed by stdout."""
    lines = [*stderr_lines, *stdout_lines]
    return "\n".join(lines[-limit:])
