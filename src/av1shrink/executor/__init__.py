"""Executors that run ffmpeg to produce files."""

from av1shrink.executor.ffmpeg_utils import (
    cleanup_temp_file,
    file_size,
    validate_output,
)
from av1shrink.executor.thumbnail import ThumbnailResolver
from av1shrink.executor.transcode import (
    ConversionJob,
    TranscodeExecutor,
    TranscodeResult,
    build_ffmpeg_command,
    is_mux_failure,
)

__all__ = [
    "ConversionJob",
    "ThumbnailResolver",
    "TranscodeExecutor",
    "TranscodeResult",
    "build_ffmpeg_command",
    "cleanup_temp_file",
    "file_size",
    "is_mux_failure",
    "validate_output",
]
