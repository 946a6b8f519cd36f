"""Configuration data models.

This module defines dataclasses for av1shrink configuration options.
"""

import re
from dataclasses import dataclass, field
from pathlib import Path

_TIMESTAMP_PATTERN = re.compile(r"^\d{2}:\d{2}:\d{2}(?:\.\d+)?$")
_VALID_LOG_LEVELS = frozenset(("debug", "info", "warning", "error"))
_VALID_LOG_FORMATS = frozenset(("text", "json"))


@dataclass
class ToolPathsConfig:
    """Configuration for external tool paths.

    All paths are optional. If not specified, tools are looked up in PATH.
    """

    ffmpeg: Path | None = None
    ffprobe: Path | None = None


@dataclass
class ConversionConfig:
    """Settings that shape the conversion itself."""

    target_ratio: float = 0.5
    """Fraction of the original total bitrate to aim for."""

    min_video_kbps: int = 300
    """Floor for the target video bitrate."""

    default_audio_kbps: int = 192
    """Bitrate assumed for audio streams that report none."""

    thumbnail_timestamp: str = "00:00:01"
    """Position of the frame grabbed when the input has no cover image."""

    container: str = "mp4"
    """Output container extension."""

    temp_directory: Path | None = None
    """Directory for the temporary thumbnail (None = system temp dir)."""

    def __post_init__(self) -> None:
        """Validate configuration."""
        if not 0 < self.target_ratio <= 1:
            raise ValueError(
                f"target_ratio must be in (0, 1], got {self.target_ratio}"
            )
        if self.min_video_kbps <= 0:
            raise ValueError(
                f"min_video_kbps must be positive, got {self.min_video_kbps}"
            )
        if self.default_audio_kbps < 0:
            raise ValueError(
                f"default_audio_kbps must be >= 0, got {self.default_audio_kbps}"
            )
        if not _TIMESTAMP_PATTERN.match(self.thumbnail_timestamp):
            raise ValueError(
                "thumbnail_timestamp must look like HH:MM:SS, "
                f"got {self.thumbnail_timestamp!r}"
            )
        self.container = self.container.lstrip(".").lower()
        if not self.container.isalnum():
            raise ValueError(f"container must be an extension, got {self.container!r}")


@dataclass
class LoggingConfig:
    """Configuration for logging."""

    level: str = "warning"
    file: Path | None = None
    format: str = "text"
    include_stderr: bool = True
    max_bytes: int = 10 * 1024 * 1024
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.level.casefold() not in _VALID_LOG_LEVELS:
            raise ValueError(
                f"level must be one of {sorted(_VALID_LOG_LEVELS)}, got {self.level}"
            )
        if self.format.casefold() not in _VALID_LOG_FORMATS:
            raise ValueError(
                f"format must be one of {sorted(_VALID_LOG_FORMATS)}, "
                f"got {self.format}"
            )
        if self.max_bytes <= 0:
            raise ValueError(f"max_bytes must be positive, got {self.max_bytes}")
        if self.backup_count < 0:
            raise ValueError(f"backup_count must be >= 0, got {self.backup_count}")


@dataclass
class AppConfig:
    """Main configuration container."""

    tools: ToolPathsConfig = field(default_factory=ToolPathsConfig)
    conversion: ConversionConfig = field(default_factory=ConversionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
