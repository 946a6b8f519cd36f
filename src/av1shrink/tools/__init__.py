"""External tool detection, encoder selection and progress parsing.

Everything here deals with ffmpeg as a program rather than with any one
conversion.
"""

from av1shrink.tools.detection import find_tool, resolve_tool_paths
from av1shrink.tools.encoders import (
    ENCODER_PROFILES,
    EncoderChoice,
    EncoderProfile,
    build_encoder_options,
    detect_and_select_encoder,
    list_encoders,
    select_encoder,
)
from av1shrink.tools.ffmpeg_progress import (
    ProgressEvent,
    ProgressTracker,
    compute_percent,
    estimate_eta,
    parse_progress_line,
)
from av1shrink.tools.models import ToolPaths

__all__ = [
    # Detection
    "ToolPaths",
    "find_tool",
    "resolve_tool_paths",
    # Encoders
    "ENCODER_PROFILES",
    "EncoderChoice",
    "EncoderProfile",
    "build_encoder_options",
    "detect_and_select_encoder",
    "list_encoders",
    "select_encoder",
    # Progress
    "ProgressEvent",
    "ProgressTracker",
    "compute_percent",
    "estimate_eta",
    "parse_progress_line",
]
