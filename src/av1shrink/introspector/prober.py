"""ffmpeg/ffprobe based media prober."""

import logging
from dataclasses import dataclass
from pathlib import Path

from av1shrink.core.subprocess_utils import FAILED_TO_RUN, CommandRunner, run_command
from av1shrink.exceptions import MediaProbeError
from av1shrink.introspector.interface import MetadataParser, TextMetadataParser
from av1shrink.introspector.parsers import (
    DEFAULT_AUDIO_KBPS,
    AudioBitrateEstimate,
    AudioStreamInfo,
    estimate_audio_bitrate,
    parse_audio_streams_json,
)
from av1shrink.tools.models import ToolPaths

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MediaProbeResult:
    """Container metadata needed to plan a conversion."""

    duration_seconds: float
    """Duration in seconds; 0.0 means unknown."""

    raw_text: str
    """Diagnostic text the metadata was parsed from."""

    attached_picture: str | None = None
    """Stream specifier of the embedded cover image, if present."""

    audio_streams: tuple[AudioStreamInfo, ...] = ()

    audio: AudioBitrateEstimate = AudioBitrateEstimate(0, 0)
    """Total audio bitrate estimate for the streams above."""

    @property
    def has_duration(self) -> bool:
        """True if the duration is known."""
        return self.duration_seconds > 0

    @property
    def has_attached_picture(self) -> bool:
        """True if the input carries a cover image stream."""
        return self.attached_picture is not None


class MediaProber:
    """Extracts duration, cover image and audio information from a file.

    Metadata comes from the diagnostic text of ``ffmpeg -i``; per-stream audio
    bitrates come from a structured ffprobe query when ffprobe is available.
    """

    def __init__(
        self,
        tools: ToolPaths,
        runner: CommandRunner = run_command,
        parser: MetadataParser | None = None,
        default_audio_kbps: int = DEFAULT_AUDIO_KBPS,
    ) -> None:
        """Initialize the prober.

        Args:
            tools: Resolved tool paths.
            runner: Command runner (injectable for tests).
            parser: Metadata parser; defaults to TextMetadataParser.
            default_audio_kbps: Bitrate assumed for audio streams without one.
        """
        self.tools = tools
        self.runner = runner
        self.parser: MetadataParser = parser or TextMetadataParser()
        self.default_audio_kbps = default_audio_kbps

    def probe_text(self, path: Path) -> str:
        """Run ffmpeg on the input and return its diagnostic text.

        ffmpeg exits non-zero here because no output is given; the exit code
        is ignored. Metadata is printed to stderr, so stderr is preferred
        when it is non-empty.

        Raises:
            MediaProbeError: If ffmpeg could not be started at all.
        """
        result = self.runner([self.tools.ffmpeg, "-hide_banner", "-i", path])
        if result.returncode == FAILED_TO_RUN and not result.stdout:
            raise MediaProbeError(f"Could not probe {path}: {result.stderr}")
        return result.stderr or result.stdout

    def query_audio_streams(self, path: Path) -> list[AudioStreamInfo] | None:
        """Query per-stream audio bitrates with ffprobe.

        Returns:
            Audio streams, or None if the structured query is unavailable or
            returned nothing usable.
        """
        if self.tools.ffprobe is None:
            return None

        # fmt: off
        result = self.runner(
            [
                self.tools.ffprobe,
                "-v", "error",
                "-select_streams", "a",
                "-show_entries", "stream=index,bit_rate",
                "-of", "json",
                path,
            ]
        )
        # fmt: on
        if not result.success or not result.stdout.strip():
            logger.debug("ffprobe audio query failed (rc=%d)", result.returncode)
            return None
        try:
            streams = parse_audio_streams_json(result.stdout)
        except ValueError as e:
            logger.warning("Invalid ffprobe output for %s: %s", path, e)
            return None
        return streams or None

    def _audio_streams(self, path: Path, text: str) -> list[AudioStreamInfo]:
        streams = self.query_audio_streams(path)
        if streams is not None:
            return streams
        count = self.parser.count_audio_streams(text)
        logger.debug("Falling back to %d audio marker(s) in probe text", count)
        return [AudioStreamInfo() for _ in range(count)]

    def estimate_audio_bitrate(self, path: Path, text: str) -> AudioBitrateEstimate:
        """Estimate the total bitrate of the input's audio streams.

        Args:
            path: Input file.
            text: Diagnostic text from probe_text(), used as a fallback.

        Returns:
            AudioBitrateEstimate; streams without a reported bitrate count as
            the default bitrate each.
        """
        return estimate_audio_bitrate(
            self._audio_streams(path, text), self.default_audio_kbps
        )

    def probe(self, path: Path) -> MediaProbeResult:
        """Probe a media file.

        Args:
            path: Input file.

        Returns:
            MediaProbeResult. Unknown values degrade to 0 / None, never raise.
        """
        text = self.probe_text(path)
        duration = self.parser.parse_duration(text)
        attached = self.parser.find_attached_picture(text)
        streams = self._audio_streams(path, text)
        audio = estimate_audio_bitrate(streams, self.default_audio_kbps)

        logger.info(
            "Probed %s",
            path,
            extra={
                "duration_seconds": duration,
                "attached_picture": attached,
                "audio_streams": len(streams),
                "audio_kbps": audio.total_kbps,
            },
        )
        return MediaProbeResult(
            duration_seconds=duration,
            raw_text=text,
            attached_picture=attached,
            audio_streams=tuple(streams),
            audio=audio,
        )
