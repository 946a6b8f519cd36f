"""Data models for external tools."""

from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class ToolPaths:
    """Resolved locations of the external tools used by one session.

    Resolved once at session start and passed explicitly to every component
    that spawns a tool.
    """

    ffmpeg: Path
    """Path to ffmpeg (required)."""

    ffprobe: Path | None = None
    """Path to ffprobe, or None when unavailable (text fallbacks are used)."""
