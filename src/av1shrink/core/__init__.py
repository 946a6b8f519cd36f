"""Core utilities package.

This package contains pure helpers with no dependency on the rest of
av1shrink: subprocess invocation and display formatting.
"""

from av1shrink.core.formatting import (
    format_hms,
    format_megabytes,
    format_ratio,
    round_half_up,
)
from av1shrink.core.subprocess_utils import (
    CommandRunner,
    RunResult,
    StreamingProcess,
    run_command,
)

__all__ = [
    # Formatting
    "format_hms",
    "format_megabytes",
    "format_ratio",
    "round_half_up",
    # Subprocess
    "CommandRunner",
    "RunResult",
    "StreamingProcess",
    "run_command",
]
