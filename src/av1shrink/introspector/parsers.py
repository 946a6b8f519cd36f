"""Parsers for ffmpeg and ffprobe output.

ffmpeg prints container metadata to stderr when given only an input, e.g.:

    Duration: 00:02:00.04, start: 0.000000, bitrate: 6827 kb/s
      Stream #0:0[0x1](und): Video: h264 (High) ...
      Stream #0:1[0x2](eng): Audio: aac (LC) ...
      Stream #0:2[0x0]: Video: mjpeg (Baseline) ... (attached pic)

These functions extract only what the conversion needs from that text, plus
the per-stream audio bitrates from ffprobe's JSON output.
"""

from __future__ import annotations

import json
import logging
import re
from dataclasses import dataclass

from av1shrink.core.formatting import round_half_up

logger = logging.getLogger(__name__)

# Bitrate assumed for an audio stream that reports none (kbps)
DEFAULT_AUDIO_KBPS = 192

# "Duration: HH:MM:SS.cc" with the label in English or French
DURATION_PATTERN = re.compile(
    r"(?:Duration|Durée):\s+(\d{2}):(\d{2}):(\d{2})(?:\.(\d{2}))?"
)

ATTACHED_PIC_MARKER = "attached pic"

# "Stream #0:1" also matches "Stream #0:1[0x2]" and "Stream #0:1(eng)"
STREAM_SPECIFIER_PATTERN = re.compile(r"Stream\s+#(\d+:\d+)")

AUDIO_MARKER = "Audio:"


@dataclass(frozen=True)
class AudioStreamInfo:
    """An audio stream of the input."""

    index: int | None = None
    """Absolute stream index, if known."""

    bit_rate_kbps: int | None = None
    """Reported bitrate in kbps, or None if the container reports none."""


@dataclass(frozen=True)
class AudioBitrateEstimate:
    """Total audio bitrate of the streams that will be copied."""

    total_kbps: int
    stream_count: int
    estimated: bool = False
    """True if any stream's bitrate was assumed rather than reported."""


def parse_duration(text: str) -> float:
    """Extract the container duration from ffmpeg output.

    Args:
        text: ffmpeg diagnostic output.

    Returns:
        Duration in seconds, or 0.0 if no duration is present.
    """
    match = DURATION_PATTERN.search(text)
    if not match:
        return 0.0
    hours, minutes, seconds = (int(match.group(i)) for i in (1, 2, 3))
    centiseconds = int(match.group(4)) if match.group(4) else 0
    return hours * 3600 + minutes * 60 + seconds + centiseconds / 100


def find_attached_picture(text: str) -> str | None:
    """Find the stream specifier of an embedded cover image.

    Args:
        text: ffmpeg diagnostic output.

    Returns:
        Specifier such as "0:2", or None if no stream is an attached picture.
    """
    for line in text.splitlines():
        if ATTACHED_PIC_MARKER in line:
            match = STREAM_SPECIFIER_PATTERN.search(line)
            if match:
                return match.group(1)
    return None


def count_audio_streams(text: str) -> int:
    """Count audio streams by their "Audio:" markers in ffmpeg output."""
    return text.count(AUDIO_MARKER)


def _bps_to_kbps(value: object) -> int | None:
    if value is None:
        return None
    try:
        bps = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return None
    if bps != bps or bps < 0:  # NaN or negative
        return None
    return round_half_up(bps / 1000)


def parse_audio_streams_json(text: str) -> list[AudioStreamInfo]:
    """Parse ffprobe audio stream JSON.

    Expects the output of
    ``ffprobe -v error -select_streams a -show_entries stream=index,bit_rate
    -of json``.

    Args:
        text: ffprobe stdout.

    Returns:
        One AudioStreamInfo per stream, in order.

    Raises:
        ValueError: If the text is not valid JSON.
    """
    data = json.loads(text)
    if not isinstance(data, dict):
        return []
    streams = data.get("streams") or []
    result = []
    for stream in streams:
        if not isinstance(stream, dict):
            continue
        index = stream.get("index")
        result.append(
            AudioStreamInfo(
                index=index if isinstance(index, int) else None,
                bit_rate_kbps=_bps_to_kbps(stream.get("bit_rate")),
            )
        )
    return result


def estimate_audio_bitrate(
    streams: list[AudioStreamInfo] | tuple[AudioStreamInfo, ...],
    default_kbps: int = DEFAULT_AUDIO_KBPS,
) -> AudioBitrateEstimate:
    """Sum the audio bitrate, assuming a default for unreported streams.

    Args:
        streams: Audio streams of the input.
        default_kbps: Bitrate assumed for each stream without one.

    Returns:
        AudioBitrateEstimate for all streams.
    """
    total = 0
    estimated = False
    for stream in streams:
        if stream.bit_rate_kbps is None:
            total += default_kbps
            estimated = True
        else:
            total += stream.bit_rate_kbps
    return AudioBitrateEstimate(
        total_kbps=total, stream_count=len(streams), estimated=estimated
    )
