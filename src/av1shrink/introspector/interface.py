"""Metadata parser interface for probe output.

Text scraping of ffmpeg's diagnostic output is fragile, so the prober only
depends on this protocol. A structured implementation (for example one based
on ffprobe JSON) can replace TextMetadataParser without touching callers.
"""

from typing import Protocol

from av1shrink.introspector import parsers


class MetadataParser(Protocol):
    """Protocol for extracting container metadata from probe output."""

    def parse_duration(self, text: str) -> float:
        """Return the container duration in seconds, or 0.0 if unknown."""
        ...

    def find_attached_picture(self, text: str) -> str | None:
        """Return the stream specifier of an attached picture, if any."""
        ...

    def count_audio_streams(self, text: str) -> int:
        """Return the number of audio streams mentioned in the output."""
        ...


class TextMetadataParser:
    """MetadataParser that scrapes `ffmpeg -i` diagnostic text."""

    def parse_duration(self, text: str) -> float:
        return parsers.parse_duration(text)

    def find_attached_picture(self, text: str) -> str | None:
        return parsers.find_attached_picture(text)

    def count_audio_streams(self, text: str) -> int:
        return parsers.count_audio_streams(text)
