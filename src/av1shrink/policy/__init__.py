"""Conversion policy: how large the output should be.

Usage:
    from av1shrink.policy import plan_bitrate
"""

from av1shrink.policy.bitrate import (
    DEFAULT_TARGET_RATIO,
    MIN_VIDEO_KBPS,
    BitratePlan,
    plan_bitrate,
)

__all__ = [
    "DEFAULT_TARGET_RATIO",
    "MIN_VIDEO_KBPS",
    "BitratePlan",
    "plan_bitrate",
]
