"""Transcode executor.

This module runs the ffmpeg conversion as a single streaming subprocess,
turning its -progress output into ProgressEvents. Some containers refuse
the attached cover image; such failures are recognised from ffmpeg's
output and retried once without the thumbnail.
"""

import functools
import logging
import time
from collections.abc import Callable, Sequence
from pathlib import Path

from av1shrink.core.subprocess_utils import StreamingProcess
from av1shrink.executor.ffmpeg_utils import validate_output
from av1shrink.executor.transcode.command import build_ffmpeg_command
from av1shrink.executor.transcode.types import (
    OUTPUT_TAIL_LINES,
    ConversionJob,
    TranscodeResult,
    output_tail,
)
from av1shrink.tools.encoders import EncoderChoice
from av1shrink.tools.ffmpeg_progress import ProgressEvent, ProgressTracker
from av1shrink.tools.models import ToolPaths

logger = logging.getLogger(__name__)

# Output fragments that indicate the container rejected a stream mapping
MUX_FAILURE_PATTERNS = (
    "could not write header",
    "error initializing output stream",
    "codec not currently supported in container",
    "could not find tag for codec",
)


def is_mux_failure(text: str) -> bool:
    """Check ffmpeg output for a container muxing failure.

    Args:
        text: Combined ffmpeg output.

    Returns:
        True if any MUX_FAILURE_PATTERNS fragment occurs (case-insensitive).
    """
    lowered = text.lower()
    for pattern in MUX_FAILURE_PATTERNS:
        if pattern in lowered:
            logger.debug("Mux failure signature matched: %s", pattern)
            return True
    return False


class TranscodeExecutor:
    """Executor for the AV1 conversion encode."""

    def __init__(
        self,
        tools: ToolPaths,
        progress_callback: Callable[[ProgressEvent], None] | None = None,
        status_callback: Callable[[str], None] | None = None,
        clock: Callable[[], float] = time.monotonic,
        process_factory: Callable[[Sequence[str]], StreamingProcess] = (
            functools.partial(StreamingProcess, keep_lines=OUTPUT_TAIL_LINES)
        ),
    ) -> None:
        """Initialize the transcode executor.

        Args:
            tools: Resolved tool paths.
            progress_callback: Receives ProgressEvents during the encode.
            status_callback: Receives human-readable status messages.
            clock: Monotonic clock used for ETA estimation.
            process_factory: Creates the streaming ffmpeg process.
        """
        self.tools = tools
        self.progress_callback = progress_callback
        self.status_callback = status_callback
        self.clock = clock
        self.process_factory = process_factory

    def _status(self, message: str) -> None:
        if self.status_callback is not None:
            self.status_callback(message)

    def _emit(self, event: ProgressEvent) -> None:
        if self.progress_callback is None:
            return
        try:
            self.progress_callback(event)
        except Exception:
            logger.exception("Progress callback failed")

    def run_encode(
        self,
        cmd: list[str],
        duration_seconds: float,
        output_path: Path,
        input_size: int | None = None,
    ) -> TranscodeResult:
        """Run one ffmpeg encode, reporting progress as it goes.

        Args:
            cmd: Full ffmpeg command including -progress pipe:1.
            duration_seconds: Input duration for percentages (<= 0 = unknown).
            output_path: Expected output file.
            input_size: Input size in bytes; a much smaller output is logged.

        Returns:
            TranscodeResult; on failure it carries the output tail.
        """
        logger.debug("Running encode: %s", " ".join(cmd))
        tracker = ProgressTracker(duration_seconds, clock=self.clock)

        with self.process_factory(cmd) as process:
            for line in process.iter_stdout():
                event = tracker.feed(line)
                if event is not None:
                    self._emit(event)
        result = process.result()

        if result.success:
            valid, error = validate_output(output_path, input_size=input_size)
            if valid:
                return TranscodeResult(
                    success=True, output_path=output_path, returncode=0
                )
            return TranscodeResult(
                success=False,
                returncode=result.returncode,
                error_message=error,
                output_tail=output_tail(process.stderr_lines, process.stdout_lines),
            )

        logger.warning(
            "ffmpeg exited with code %d",
            result.returncode,
            extra={"returncode": result.returncode, "output": str(output_path)},
        )
        return TranscodeResult(
            success=False,
            returncode=result.returncode,
            error_message=f"FFmpeg exited with code {result.returncode}",
            output_tail=output_tail(process.stderr_lines, process.stdout_lines),
        )

    def execute(
        self,
        job: ConversionJob,
        encoder: EncoderChoice,
        duration_seconds: float,
    ) -> TranscodeResult:
        """Encode the job's input, retrying once without the thumbnail.

        Args:
            job: Conversion job.
            encoder: Encoder and options; identical for both attempts.
            duration_seconds: Input duration (<= 0 = unknown).

        Returns:
            TranscodeResult of the final attempt.
        """
        logger.info(
            "Starting encode: %s",
            job.input_path.name,
            extra={
                "input_path": str(job.input_path),
                "output_path": str(job.output_path),
                "encoder": encoder.encoder,
                "options": encoder.options_string,
            },
        )
        cmd = build_ffmpeg_command(self.tools.ffmpeg, job, encoder)
        result = self.run_encode(
            cmd, duration_seconds, job.output_path, job.input_size_bytes
        )
        if result.success or not is_mux_failure(result.output_tail):
            return result

        self._status(
            "Muxing with the thumbnail failed, retrying without the thumbnail..."
        )
        logger.warning(
            "Retrying without thumbnail after mux failure",
            extra={"returncode": result.returncode},
        )
        cmd = build_ffmpeg_command(
            self.tools.ffmpeg, job, encoder, include_thumbnail=False
        )
        retry = self.run_encode(
            cmd, duration_seconds, job.output_path, job.input_size_bytes
        )
        retry.retried_without_thumbnail = True
        return retry
