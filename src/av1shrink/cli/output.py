"""CLI output formatting for JSON and human-readable output."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass, field
from typing import Any, NoReturn

import click

from av1shrink.cli.exit_codes import ExitCode
from av1shrink.core.formatting import format_hms
from av1shrink.tools.ffmpeg_progress import ProgressEvent

# Width the in-place progress line is padded to, so shorter updates
# overwrite longer ones completely
PROGRESS_LINE_WIDTH = 60


@dataclass
class CLIResult:
    """Result object for CLI operations.

    Provides consistent JSON serialization for command results.
    """

    success: bool
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def to_json(self) -> str:
        """Serialize to JSON string.

        Returns:
            JSON string with status, message, and data fields.
        """
        output: dict[str, Any] = {
            "status": "completed" if self.success else "failed",
            "message": self.message,
        }
        output.update(self.data)
        return json.dumps(output, indent=2, default=str)


def error_exit(
    message: str,
    code: ExitCode,
    json_output: bool = False,
    error_code: str | None = None,
) -> NoReturn:
    """Exit with formatted error message.

    Args:
        message: Error message to display.
        code: Process exit code.
        json_output: Whether to format output as JSON.
        error_code: Stable error identifier for JSON output
            (defaults to the exit code name).

    Note:
        This function never returns; it always calls sys.exit().
    """
    if json_output:
        click.echo(
            json.dumps(
                {
                    "status": "failed",
                    "error": {
                        "code": error_code or code.name,
                        "message": message,
                    },
                }
            ),
            err=True,
        )
    else:
        click.echo(f"Error: {message}", err=True)

    sys.exit(int(code))


def format_progress(event: ProgressEvent) -> str:
    """Format a progress event as a single status line."""
    if event.percent is None:
        return f"Encoding... {format_hms(event.out_time_seconds)} processed"
    eta = format_hms(event.eta_seconds or 0)
    return f"{event.percent:.2f}% complete - ETA: {eta}"


class ProgressDisplay:
    """In-place progress line on stdout.

    Each update rewrites the same line with a carriage return; finish()
    terminates it with a newline if anything was written.
    """

    def __init__(self, enabled: bool = True) -> None:
        """Initialize the display.

        Args:
            enabled: If False, suppresses output (for JSON mode).
        """
        self.enabled = enabled
        self._active = False

    def update(self, event: ProgressEvent) -> None:
        """Show a progress event."""
        if not self.enabled:
            return
        line = format_progress(event).ljust(PROGRESS_LINE_WIDTH)
        click.echo(f"\r{line}", nl=False)
        self._active = True

    def finish(self) -> None:
        """End the progress line."""
        if self._active:
            click.echo("")
            self._active = False

    def status(self, message: str) -> None:
        """Print a status message below the progress line."""
        self.finish()
        click.echo(message)
