"""Video encoder detection and selection.

This module decides which ffmpeg video encoder a conversion uses and with
which options. Candidates are tried in a fixed priority order:

1. av1_nvenc  - NVIDIA hardware AV1 (RTX 40 series and newer)
2. libaom-av1 - software AV1
3. libx264    - near-universal fallback when the build has no AV1 encoder

When a bitrate plan has a target, quality-only options are replaced by an
explicit bitrate, max-rate (1.5x) and buffer size (3x), keeping each
encoder's own speed and tuning flags.
"""

import logging
from dataclasses import dataclass
from typing import Literal

from av1shrink.core.formatting import round_half_up
from av1shrink.core.subprocess_utils import CommandRunner, run_command
from av1shrink.exceptions import EncoderUnavailableError
from av1shrink.policy.bitrate import BitratePlan
from av1shrink.tools.models import ToolPaths

logger = logging.getLogger(__name__)

EncoderType = Literal["hardware", "software", "fallback"]

MAXRATE_FACTOR = 1.5
BUFSIZE_FACTOR = 3.0


@dataclass(frozen=True)
class EncoderProfile:
    """Static description of a candidate encoder."""

    encoder: str
    """FFmpeg encoder name, also the identifier searched for in -encoders."""

    encoder_type: EncoderType

    quality_options: tuple[str, ...]
    """Options for constant-quality mode (no bitrate target)."""

    rate_control_options: tuple[str, ...]
    """Options placed before the bitrate flags in bitrate mode."""

    tuning_options: tuple[str, ...]
    """Speed and tuning flags appended after the bitrate flags."""

    description: str = ""


# fmt: off
ENCODER_PROFILES: tuple[EncoderProfile, ...] = (
    EncoderProfile(
        encoder="av1_nvenc",
        encoder_type="hardware",
        quality_options=(
            "-rc", "vbr", "-cq", "28", "-b:v", "0",
            "-preset", "p6", "-tune", "hq", "-spatial-aq", "1", "-aq-strength", "8",
        ),
        rate_control_options=("-rc", "vbr"),
        tuning_options=(
            "-preset", "p6", "-tune", "hq", "-spatial-aq", "1", "-aq-strength", "8",
        ),
        description="NVIDIA NVENC (av1_nvenc)",
    ),
    EncoderProfile(
        encoder="libaom-av1",
        encoder_type="software",
        quality_options=("-crf", "30", "-b:v", "0", "-cpu-used", "4", "-row-mt", "1"),
        rate_control_options=(),
        tuning_options=("-cpu-used", "5", "-row-mt", "1"),
        description="software AV1 (libaom-av1)",
    ),
    EncoderProfile(
        encoder="libx264",
        encoder_type="fallback",
        quality_options=("-crf", "23", "-preset", "medium"),
        rate_control_options=(),
        tuning_options=("-preset", "medium"),
        description="H.264 fallback (libx264)",
    ),
)
# fmt: on


@dataclass(frozen=True)
class EncoderChoice:
    """The encoder and options selected for one run."""

    encoder: str
    encoder_type: EncoderType
    options: tuple[str, ...]
    bitrate_mode: bool = False
    description: str = ""

    @property
    def options_string(self) -> str:
        """Options joined with spaces, for display and logging."""
        return " ".join(self.options)


def build_encoder_options(
    profile: EncoderProfile, plan: BitratePlan | None = None
) -> tuple[str, ...]:
    """Build the option list for an encoder.

    Args:
        profile: Encoder profile.
        plan: Bitrate plan; quality mode is used when it has no target.

    Returns:
        Tuple of ffmpeg arguments for the primary video stream.
    """
    if plan is None or not plan.has_target:
        return profile.quality_options

    target = plan.target_video_kbps
    maxrate = round_half_up(target * MAXRATE_FACTOR)
    bufsize = round_half_up(target * BUFSIZE_FACTOR)
    # fmt: off
    return (
        *profile.rate_control_options,
        "-b:v:0", f"{target}k",
        "-maxrate:v:0", f"{maxrate}k",
        "-bufsize:v:0", f"{bufsize}k",
        *profile.tuning_options,
    )
    # fmt: on


def list_encoders(tools: ToolPaths, runner: CommandRunner = run_command) -> str:
    """Return the lower-cased encoder listing of the ffmpeg build.

    Args:
        tools: Resolved tool paths.
        runner: Command runner.

    Returns:
        Combined stdout and stderr of `ffmpeg -encoders`, lower-cased.
        Empty if ffmpeg could not be run.
    """
    result = runner([tools.ffmpeg, "-hide_banner", "-encoders"])
    if not result.success:
        logger.warning(
            "ffmpeg -encoders exited with %d; encoder detection may be incomplete",
            result.returncode,
        )
    return f"{result.stdout}\n{result.stderr}".lower()


def select_encoder(
    available_text: str, plan: BitratePlan | None = None
) -> EncoderChoice:
    """Select the best available encoder.

    Args:
        available_text: Encoder listing from ffmpeg (matched case-insensitively).
        plan: Bitrate plan used to switch to explicit bitrate options.

    Returns:
        EncoderChoice for the first available profile in priority order.

    Raises:
        EncoderUnavailableError: If neither AV1 nor the fallback is available.
    """
    haystack = available_text.lower()
    for profile in ENCODER_PROFILES:
        if profile.encoder.lower() in haystack:
            options = build_encoder_options(profile, plan)
            choice = EncoderChoice(
                encoder=profile.encoder,
                encoder_type=profile.encoder_type,
                options=options,
                bitrate_mode=plan is not None and plan.has_target,
                description=profile.description,
            )
            logger.info(
                "Selected %s encoder: %s",
                profile.encoder_type,
                profile.encoder,
                extra={"encoder": profile.encoder, "options": choice.options_string},
            )
            return choice
        logger.debug("Encoder not available: %s", profile.encoder)

    attempted = tuple(
        p.encoder for p in ENCODER_PROFILES if p.encoder_type != "hardware"
    )
    logger.error("No usable video encoder found (tried %s)", ", ".join(attempted))
    raise EncoderUnavailableError(attempted)


def detect_and_select_encoder(
    tools: ToolPaths,
    plan: BitratePlan | None = None,
    runner: CommandRunner = run_command,
) -> EncoderChoice:
    """Query ffmpeg for its encoders and select one.

    Args:
        tools: Resolved tool paths.
        plan: Bitrate plan (optional).
        runner: Command runner.

    Returns:
        Selected EncoderChoice.

    Raises:
        EncoderUnavailableError: If no candidate encoder is available.
    """
    return select_encoder(list_encoders(tools, runner), plan)
