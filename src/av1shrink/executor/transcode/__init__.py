"""Transcode executor module.

Builds and runs the ffmpeg conversion command.
"""

from av1shrink.executor.transcode.command import build_ffmpeg_command
from av1shrink.executor.transcode.executor import (
    MUX_FAILURE_PATTERNS,
    TranscodeExecutor,
    is_mux_failure,
)
from av1shrink.executor.transcode.types import (
    OUTPUT_TAIL_LINES,
    ConversionJob,
    TranscodeResult,
    output_tail,
)

__all__ = [
    "MUX_FAILURE_PATTERNS",
    "OUTPUT_TAIL_LINES",
    "ConversionJob",
    "TranscodeExecutor",
    "TranscodeResult",
    "build_ffmpeg_command",
    "is_mux_failure",
    "output_tail",
]
