"""Exit codes for the av1shrink CLI."""

from enum import IntEnum


class ExitCode(IntEnum):
    """Process exit codes.

    Every fatal conversion error exits with GENERAL_ERROR; the specific
    cause is reported through the error code in the message or JSON output.
    """

    SUCCESS = 0
    GENERAL_ERROR = 1
    INTERRUPTED = 130  # 128 + SIGINT
