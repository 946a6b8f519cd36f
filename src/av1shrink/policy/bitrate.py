"""Bitrate targeting for size-reduced conversions.

The planner turns the original file size, duration and audio bitrate into a
video bitrate that brings the whole file to roughly a fixed fraction of its
original size. Audio and subtitles are stream-copied, so their share of the
budget is subtracted before the video target is set.
"""

import logging
from dataclasses import dataclass

from av1shrink.core.formatting import round_half_up

logger = logging.getLogger(__name__)

DEFAULT_TARGET_RATIO = 0.5
MIN_VIDEO_KBPS = 300


@dataclass(frozen=True)
class BitratePlan:
    """Computed bitrates for a conversion, all in kbps.

    A plan with zero target bitrates means the duration was unknown and the
    encoder should run in its quality-based default mode.
    """

    original_total_kbps: int
    audio_kbps: int
    target_total_kbps: int
    target_video_kbps: int

    @property
    def has_target(self) -> bool:
        """True if an explicit video bitrate should be used."""
        return self.target_video_kbps > 0


def plan_bitrate(
    input_size_bytes: int,
    duration_seconds: float,
    audio_kbps: int,
    target_ratio: float = DEFAULT_TARGET_RATIO,
    min_video_kbps: int = MIN_VIDEO_KBPS,
) -> BitratePlan:
    """Compute the target video bitrate for a conversion.

    Args:
        input_size_bytes: Size of the original file.
        duration_seconds: Duration of the original; <= 0 means unknown.
        audio_kbps: Estimated total bitrate of the copied audio streams.
        target_ratio: Fraction of the original total bitrate to aim for.
        min_video_kbps: Floor for the video bitrate.

    Returns:
        BitratePlan. Without a usable duration all bitrates are zero.

    Raises:
        ValueError: If the size or audio bitrate is negative.
    """
    if input_size_bytes < 0:
        raise ValueError(f"input size must be >= 0, got {input_size_bytes}")
    if audio_kbps < 0:
        raise ValueError(f"audio bitrate must be >= 0, got {audio_kbps}")

    if duration_seconds <= 0:
        logger.debug("Duration unknown; no bitrate target computed")
        return BitratePlan(
            original_total_kbps=0,
            audio_kbps=audio_kbps,
            target_total_kbps=0,
            target_video_kbps=0,
        )

    original_total = round_half_up(input_size_bytes * 8 / duration_seconds / 1000)
    target_total = round_half_up(original_total * target_ratio)
    target_video = max(min_video_kbps, target_total - audio_kbps)

    plan = BitratePlan(
        original_total_kbps=original_total,
        audio_kbps=audio_kbps,
        target_total_kbps=target_total,
        target_video_kbps=target_video,
    )
    logger.debug(
        "Bitrate plan: original=%dk target_total=%dk audio=%dk video=%dk",
        plan.original_total_kbps,
        plan.target_total_kbps,
        plan.audio_kbps,
        plan.target_video_kbps,
    )
    return plan
