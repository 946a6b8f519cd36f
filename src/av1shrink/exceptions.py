"""Custom exceptions for av1shrink.

Every fatal condition of a conversion run is a ConversionError subclass, so
the CLI can report any of them with a single except clause. Each subclass
carries a stable ``code`` used in JSON error output.
"""


class ConversionError(Exception):
    """Base exception for fatal conversion errors."""

    code = "CONVERSION_ERROR"


class InputNotFoundError(ConversionError):
    """Raised when the input video does not exist.

    Attributes:
        path: The path that was checked.
    """

    code = "INPUT_NOT_FOUND"

    def __init__(self, path: object) -> None:
        self.path = path
        super().__init__(f"File not found at '{path}'")


class ToolNotFoundError(ConversionError):
    """Raised when a required external tool cannot be located."""

    code = "TOOL_NOT_AVAILABLE"

    def __init__(self, tool: str) -> None:
        self.tool = tool
        super().__init__(
            f"{tool} is not installed or not in PATH. Install ffmpeg or set "
            f"AV1SHRINK_{tool.upper()}_PATH to its location."
        )


class ConfigError(ConversionError):
    """Raised when the configuration file cannot be parsed."""

    code = "CONFIG_ERROR"


class MediaProbeError(ConversionError):
    """Raised when media probing cannot run at all."""

    code = "PROBE_ERROR"


class ThumbnailError(ConversionError):
    """Raised when no usable thumbnail could be produced."""

    code = "THUMBNAIL_ERROR"


class EncoderUnavailableError(ConversionError):
    """Raised when none of the candidate video encoders is available.

    Attributes:
        attempted: Encoder names that were looked for, in order.
    """

    code = "ENCODER_UNAVAILABLE"

    def __init__(self, attempted: tuple[str, ...]) -> None:
        self.attempted = attempted
        super().__init__(
            "No usable video encoder found in ffmpeg "
            f"(tried {' and '.join(attempted)})"
        )


class TranscodeError(ConversionError):
    """Raised when ffmpeg fails to produce the output video.

    Attributes:
        returncode: ffmpeg exit code (-1 if it could not be started).
        output_tail: Last lines of combined ffmpeg output.
        retried_without_thumbnail: True if a retry without the cover was made.
    """

    code = "TRANSCODE_FAILED"

    def __init__(
        self,
        message: str,
        returncode: int | None = None,
        output_tail: str = "",
        retried_without_thumbnail: bool = False,
    ) -> None:
        self.returncode = returncode
        self.output_tail = output_tail
        self.retried_without_thumbnail = retried_without_thumbnail
        super().__init__(message)
