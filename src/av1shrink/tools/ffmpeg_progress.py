"""FFmpeg progress parsing utilities.

ffmpeg run with ``-progress pipe:1`` writes blocks of ``key=value`` lines to
stdout, each block ending with ``progress=continue`` (or ``progress=end``).
Despite its name, ``out_time_ms`` is reported in microseconds, the same as
``out_time_us``.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

# Minimum percent advance between two reported progress events
DEFAULT_MIN_STEP = 0.5

# Keys that carry the output position in microseconds
_OUT_TIME_KEYS = frozenset(("out_time_ms", "out_time_us"))

# Keys that require integer conversion (dropped on parse failure)
_INT_KEYS = frozenset(("frame", "total_size", "out_time_ms", "out_time_us"))

# All keys we keep from a progress block
_VALID_KEYS = frozenset(
    ("frame", "fps", "total_size", "out_time_ms", "out_time_us", "speed", "progress")
)


@dataclass(frozen=True)
class ProgressEvent:
    """A discrete progress update for a running encode."""

    percent: float | None
    """Percent complete (0-100), or None when the duration is unknown."""

    out_time_seconds: float
    """Position of the encoder in the output, in seconds."""

    eta_seconds: float | None
    """Estimated wall-clock seconds remaining, or None when unknown."""

    elapsed_seconds: float
    """Wall-clock seconds since the encode started."""

    finished: bool = False
    """True at 100%, or when ffmpeg reported progress=end."""


def parse_progress_line(line: str) -> dict[str, str | int | float]:
    """Parse a single line from FFmpeg -progress output.

    Args:
        line: A line such as "out_time_ms=60000000".

    Returns:
        Dictionary with the parsed key-value pair, or empty dict if the line
        is not a recognised progress key or its value is not usable.
    """
    line = line.strip()
    if "=" not in line:
        return {}

    key, _, value = line.partition("=")
    key = key.strip()
    value = value.strip()

    if key not in _VALID_KEYS or not value or value == "N/A":
        return {}

    if key in _INT_KEYS:
        try:
            return {key: int(value)}
        except ValueError:
            return {}
    if key == "fps":
        try:
            return {key: float(value)}
        except ValueError:
            return {}
    return {key: value}


def compute_percent(out_time_seconds: float, duration_seconds: float) -> float:
    """Calculate percent complete, clamped to 0-100.

    Args:
        out_time_seconds: Encoded output position.
        duration_seconds: Total duration (must be > 0).

    Returns:
        Percent complete.
    """
    return min(100.0, max(0.0, 100.0 * out_time_seconds / duration_seconds))


def estimate_eta(elapsed_seconds: float, percent: float) -> float:
    """Estimate remaining wall-clock time from the rate so far.

    Args:
        elapsed_seconds: Wall-clock time since the encode started.
        percent: Percent complete.

    Returns:
        Estimated seconds remaining.
    """
    remaining = max(0.001, 100.0 - percent)
    return elapsed_seconds * (remaining / max(0.001, percent))


class ProgressTracker:
    """Turns a stream of -progress lines into throttled ProgressEvents.

    With a known duration an event is produced whenever the percentage has
    advanced by at least ``min_step`` since the last event, or has reached
    100. With an unknown duration, a percent-less event is produced at the
    end of every progress block so callers can still show activity.
    """

    def __init__(
        self,
        duration_seconds: float,
        min_step: float = DEFAULT_MIN_STEP,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """Initialize the tracker and start its wall clock.

        Args:
            duration_seconds: Total input duration; <= 0 means unknown.
            min_step: Minimum percent advance between events.
            clock: Monotonic clock, injectable for tests.
        """
        self.duration_seconds = max(0.0, duration_seconds)
        self.min_step = min_step
        self._clock = clock
        self._start = clock()
        self._last_percent = -1.0
        self._out_time_seconds = 0.0

    @property
    def has_duration(self) -> bool:
        """True if percentages can be computed."""
        return self.duration_seconds > 0

    @property
    def last_percent(self) -> float | None:
        """Percentage of the last emitted event, or None if none yet."""
        return self._last_percent if self._last_percent >= 0 else None

    def feed(self, line: str) -> ProgressEvent | None:
        """Consume one line of ffmpeg stdout.

        Args:
            line: Raw line from the -progress stream.

        Returns:
            A ProgressEvent when the display should be updated, else None.
        """
        parsed = parse_progress_line(line)
        if not parsed:
            return None

        for key in _OUT_TIME_KEYS:
            if key in parsed:
                self._out_time_seconds = int(parsed[key]) / 1_000_000
                if self.has_duration:
                    return self._maybe_emit()
                return None

        status = parsed.get("progress")
        if status is not None and not self.has_duration:
            return self._event(None, finished=status == "end")
        return None

    def _maybe_emit(self) -> ProgressEvent | None:
        percent = compute_percent(self._out_time_seconds, self.duration_seconds)
        if percent - self._last_percent >= self.min_step or (
            percent == 100.0 and self._last_percent < 100.0
        ):
            self._last_percent = percent
            return self._event(percent, finished=percent == 100.0)
        return None

    def _event(self, percent: float | None, finished: bool) -> ProgressEvent:
        elapsed = self._clock() - self._start
        eta = estimate_eta(elapsed, percent) if percent is not None else None
        return ProgressEvent(
            percent=percent,
            out_time_seconds=self._out_time_seconds,
            eta_seconds=eta,
            elapsed_seconds=elapsed,
            finished=finished,
        )
