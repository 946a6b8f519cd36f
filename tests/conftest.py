"""Shared test fixtures for av1shrink."""

from collections.abc import Callable, Sequence
from pathlib import Path

import pytest

from av1shrink.core.subprocess_utils import RunResult
from av1shrink.tools.models import ToolPaths

FIXTURES_DIR = Path(__file__).parent / "fixtures"


class FakeRunner:
    """Stand-in for run_command that records calls.

    The handler receives the stringified argument list and returns the
    RunResult for that call.
    """

    def __init__(self, handler: Callable[[list[str]], RunResult] | None = None):
        self.calls: list[list[str]] = []
        self.handler = handler or (lambda args: RunResult(0))

    def __call__(self, args: Sequence[str | Path]) -> RunResult:
        str_args = [str(arg) for arg in args]
        self.calls.append(str_args)
        return self.handler(str_args)


@pytest.fixture
def fixtures_dir() -> Path:
    """Return the path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def load_probe_text() -> Callable[[str], str]:
    """Return a loader for ffmpeg probe text fixtures by name."""

    def _load(name: str) -> str:
        return (FIXTURES_DIR / "probe" / f"{name}.txt").read_text(encoding="utf-8")

    return _load


@pytest.fixture
def ffprobe_audio_json() -> str:
    """ffprobe audio stream JSON: one stream at 128 kbps, one without bit_rate."""
    return (FIXTURES_DIR / "ffprobe" / "audio_streams.json").read_text()


@pytest.fixture
def tool_paths() -> ToolPaths:
    """Tool paths pointing at (non-existent) system binaries."""
    return ToolPaths(ffmpeg=Path("/usr/bin/ffmpeg"), ffprobe=Path("/usr/bin/ffprobe"))


@pytest.fixture
def make_runner() -> type[FakeRunner]:
    """Return the FakeRunner class for building scripted runners."""
    return FakeRunner


@pytest.fixture
def input_video(tmp_path: Path) -> Path:
    """Create a sparse 102,400,000 byte input video."""
    path = tmp_path / "videos" / "movie.mp4"
    path.parent.mkdir()
    with path.open("wb") as f:
        f.truncate(102_400_000)
    return path
