"""Media introspection for conversion planning."""

from av1shrink.introspector.interface import MetadataParser, TextMetadataParser
from av1shrink.introspector.parsers import (
    AudioBitrateEstimate,
    AudioStreamInfo,
    count_audio_streams,
    estimate_audio_bitrate,
    find_attached_picture,
    parse_audio_streams_json,
    parse_duration,
)
from av1shrink.introspector.prober import MediaProber, MediaProbeResult

__all__ = [
    "AudioBitrateEstimate",
    "AudioStreamInfo",
    "MediaProbeResult",
    "MediaProber",
    "MetadataParser",
    "TextMetadataParser",
    "count_audio_streams",
    "estimate_audio_bitrate",
    "find_attached_picture",
    "parse_audio_streams_json",
    "parse_duration",
]
