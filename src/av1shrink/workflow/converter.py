"""Conversion pipeline.

This module wires the prober, thumbnail resolver, bitrate planner, encoder
selector and transcode executor into a single sequential run:

    probe -> thumbnail -> bitrate plan -> encoder -> encode (+ one retry)

Each step completes before the next begins. The temporary thumbnail is
removed on every exit path.
"""

import logging
import uuid
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from av1shrink.config.loader import get_temp_directory
from av1shrink.config.models import AppConfig, ConversionConfig
from av1shrink.core.formatting import format_hms, format_megabytes
from av1shrink.core.subprocess_utils import CommandRunner, run_command
from av1shrink.exceptions import InputNotFoundError, TranscodeError
from av1shrink.executor.ffmpeg_utils import file_size
from av1shrink.executor.thumbnail import ThumbnailResolver
from av1shrink.executor.transcode import (
    ConversionJob,
    TranscodeExecutor,
    TranscodeResult,
)
from av1shrink.introspector.parsers import AudioBitrateEstimate
from av1shrink.introspector.prober import MediaProber, MediaProbeResult
from av1shrink.logging.context import conversion_context
from av1shrink.policy.bitrate import BitratePlan, plan_bitrate
from av1shrink.tools.detection import resolve_tool_paths
from av1shrink.tools.encoders import EncoderChoice, detect_and_select_encoder
from av1shrink.tools.ffmpeg_progress import ProgressEvent
from av1shrink.tools.models import ToolPaths

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[ProgressEvent], None]
StatusCallback = Callable[[str], None]

OUTPUT_SUFFIX = "_av1"
THUMBNAIL_PREFIX = "video_thumbnail_"


def create_job(
    input_path: Path, temp_dir: Path, container: str = "mp4"
) -> ConversionJob:
    """Create the job for one input file.

    Args:
        input_path: Input video.
        temp_dir: Directory for the temporary thumbnail.
        container: Output container extension.

    Returns:
        ConversionJob writing ``<dir>/<stem>_av1.<container>``.

    Raises:
        InputNotFoundError: If input_path is not an existing file.
    """
    if not input_path.is_file():
        raise InputNotFoundError(input_path)

    output_path = input_path.with_name(f"{input_path.stem}{OUTPUT_SUFFIX}.{container}")
    thumbnail_path = temp_dir / f"{THUMBNAIL_PREFIX}{uuid.uuid4()}.jpg"
    return ConversionJob(
        input_path=input_path,
        output_path=output_path,
        thumbnail_path=thumbnail_path,
        input_size_bytes=input_path.stat().st_size,
    )


@dataclass
class ConversionSession:
    """Everything a conversion run needs from its environment.

    Tool paths are resolved once per session and passed down explicitly.
    """

    tools: ToolPaths
    config: ConversionConfig = field(default_factory=ConversionConfig)
    runner: CommandRunner = run_command
    temp_dir: Path | None = None

    @classmethod
    def from_config(cls, config: AppConfig) -> "ConversionSession":
        """Resolve tools and the temp directory from application config.

        Raises:
            ToolNotFoundError: If ffmpeg cannot be found.
        """
        return cls(
            tools=resolve_tool_paths(config.tools),
            config=config.conversion,
            temp_dir=get_temp_directory(config.conversion),
        )

    def get_temp_dir(self) -> Path:
        """Return the temp directory, resolving it on first use."""
        if self.temp_dir is None:
            self.temp_dir = get_temp_directory(self.config)
        return self.temp_dir


@dataclass
class ConversionResult:
    """Outcome of a successful conversion."""

    job: ConversionJob
    probe: MediaProbeResult
    audio: AudioBitrateEstimate
    plan: BitratePlan
    encoder: EncoderChoice
    transcode: TranscodeResult
    output_size_bytes: int | None = None

    @property
    def compression_ratio(self) -> float | None:
        """Output size as a fraction of the input size, if both are known."""
        if self.output_size_bytes is None or self.job.input_size_bytes <= 0:
            return None
        return self.output_size_bytes / self.job.input_size_bytes


class Converter:
    """Runs the conversion pipeline for one input at a time."""

    def __init__(
        self,
        session: ConversionSession,
        progress_callback: ProgressCallback | None = None,
        status_callback: StatusCallback | None = None,
    ) -> None:
        """Initialize the converter.

        Args:
            session: Tools, settings and runner for the run.
            progress_callback: Receives encode ProgressEvents.
            status_callback: Receives human-readable status lines.
        """
        self.session = session
        self.progress_callback = progress_callback
        self.status_callback = status_callback

        config = session.config
        self.prober = MediaProber(
            session.tools,
            runner=session.runner,
            default_audio_kbps=config.default_audio_kbps,
        )
        self.thumbnails = ThumbnailResolver(
            session.tools,
            runner=session.runner,
            timestamp=config.thumbnail_timestamp,
            status_callback=status_callback,
        )
        self.executor = TranscodeExecutor(
            session.tools,
            progress_callback=progress_callback,
            status_callback=status_callback,
        )

    def _status(self, message: str) -> None:
        if self.status_callback is not None:
            self.status_callback(message)

    def _report_plan(
        self, job: ConversionJob, audio: AudioBitrateEstimate, plan: BitratePlan
    ) -> None:
        if not plan.has_target:
            self._status(
                "Could not compute original bitrate; "
                "will use quality-based defaults."
            )
            return
        ratio_percent = round(self.session.config.target_ratio * 100)
        self._status("")
        self._status(f"Original size: {format_megabytes(job.input_size_bytes)}")
        self._status(f"Estimated total bitrate: {plan.original_total_kbps} kbps")
        self._status(
            f"Estimated audio bitrate: {audio.total_kbps} kbps "
            f"({audio.stream_count} stream(s))"
        )
        self._status(
            f"Target video bitrate (~{ratio_percent}% total size): "
            f"{plan.target_video_kbps} kbps"
        )

    def convert(self, input_path: Path) -> ConversionResult:
        """Convert one video file.

        Args:
            input_path: Input video.

        Returns:
            ConversionResult for the finished output.

        Raises:
            InputNotFoundError: If the input does not exist.
            ThumbnailError: If no thumbnail could be produced.
            EncoderUnavailableError: If ffmpeg has no usable encoder.
            TranscodeError: If the encode failed (after any retry).
        """
        config = self.session.config
        job = create_job(input_path, self.session.get_temp_dir(), config.container)

        with conversion_context(input_path):
            try:
                return self._run(job)
            finally:
                job.cleanup()

    def _run(self, job: ConversionJob) -> ConversionResult:
        config = self.session.config

        self._status("Probing video file...")
        probe = self.prober.probe(job.input_path)
        if probe.has_duration:
            self._status(
                f"Video duration found: {format_hms(probe.duration_seconds)}"
            )
        else:
            self._status(
                "Warning: Could not determine video duration. "
                "ETA will not be available."
            )

        self.thumbnails.resolve(
            job.input_path, job.thumbnail_path, probe.attached_picture
        )

        audio = probe.audio
        plan = plan_bitrate(
            job.input_size_bytes,
            probe.duration_seconds,
            audio.total_kbps,
            target_ratio=config.target_ratio,
            min_video_kbps=config.min_video_kbps,
        )
        self._report_plan(job, audio, plan)

        encoder = detect_and_select_encoder(
            self.session.tools, plan, runner=self.session.runner
        )
        if encoder.encoder_type == "hardware":
            self._status(f"GPU detected. Using {encoder.description}.")
        else:
            self._status(f"Using {encoder.description}.")

        self._status("")
        ratio_percent = round(config.target_ratio * 100)
        self._status(f"Starting conversion targeting ~{ratio_percent}% size...")
        transcode = self.executor.execute(job, encoder, probe.duration_seconds)
        if not transcode.success:
            message = transcode.error_message or "FFmpeg failed"
            if transcode.output_tail:
                message = (
                    f"{message}.\n--- Last 20 lines ---\n{transcode.output_tail}"
                )
            raise TranscodeError(
                message,
                returncode=transcode.returncode,
                output_tail=transcode.output_tail,
                retried_without_thumbnail=transcode.retried_without_thumbnail,
            )

        result = ConversionResult(
            job=job,
            probe=probe,
            audio=audio,
            plan=plan,
            encoder=encoder,
            transcode=transcode,
            output_size_bytes=file_size(job.output_path),
        )
        logger.info(
            "Conversion finished",
            extra={
                "output_path": str(job.output_path),
                "output_size_bytes": result.output_size_bytes,
                "compression_ratio": result.compression_ratio,
                "retried_without_thumbnail": transcode.retried_without_thumbnail,
            },
        )
        return result
