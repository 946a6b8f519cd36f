"""Tests for introspector/prober.py."""

import json
from collections.abc import Callable
from pathlib import Path

import pytest

from av1shrink.core.subprocess_utils import FAILED_TO_RUN, RunResult
from av1shrink.exceptions import MediaProbeError
from av1shrink.introspector.prober import MediaProber
from av1shrink.tools.models import ToolPaths

INPUT = Path("/videos/movie.mp4")


def _handler(probe_text: str, ffprobe_result: RunResult) -> Callable:
    def handle(args: list[str]) -> RunResult:
        if args[0].endswith("ffprobe"):
            return ffprobe_result
        # ffmpeg without an output exits 1 and prints metadata to stderr
        return RunResult(1, "", probe_text)

    return handle


class TestProbeText:
    """Tests for MediaProber.probe_text."""

    def test_runs_ffmpeg_with_input_only(self, tool_paths, make_runner) -> None:
        runner = make_runner(lambda args: RunResult(1, "", "Duration: 00:00:01.00"))
        prober = MediaProber(tool_paths, runner=runner)

        prober.probe_text(INPUT)

        assert runner.calls == [["/usr/bin/ffmpeg", "-hide_banner", "-i", str(INPUT)]]

    def test_prefers_stderr(self, tool_paths, make_runner) -> None:
        runner = make_runner(lambda args: RunResult(1, "stdout text", "stderr text"))

        assert MediaProber(tool_paths, runner=runner).probe_text(INPUT) == (
            "stderr text"
        )

    def test_falls_back_to_stdout(self, tool_paths, make_runner) -> None:
        runner = make_runner(lambda args: RunResult(1, "stdout text", ""))

        assert MediaProber(tool_paths, runner=runner).probe_text(INPUT) == (
            "stdout text"
        )

    def test_ffmpeg_not_runnable(self, tool_paths, make_runner) -> None:
        runner = make_runner(
            lambda args: RunResult(FAILED_TO_RUN, "", "ffmpeg could not be run")
        )

        with pytest.raises(MediaProbeError):
            MediaProber(tool_paths, runner=runner).probe_text(INPUT)


class TestQueryAudioStreams:
    """Tests for MediaProber.query_audio_streams."""

    def test_structured_query(
        self, tool_paths, make_runner, ffprobe_audio_json
    ) -> None:
        runner = make_runner(lambda args: RunResult(0, ffprobe_audio_json, ""))

        streams = MediaProber(tool_paths, runner=runner).query_audio_streams(INPUT)

        assert streams is not None
        assert [s.bit_rate_kbps for s in streams] == [128, None]
        assert runner.calls[0] == [
            "/usr/bin/ffprobe",
            "-v",
            "error",
            "-select_streams",
            "a",
            "-show_entries",
            "stream=index,bit_rate",
            "-of",
            "json",
            str(INPUT),
        ]

    def test_without_ffprobe(self, make_runner) -> None:
        runner = make_runner()
        prober = MediaProber(ToolPaths(ffmpeg=Path("/usr/bin/ffmpeg")), runner=runner)

        assert prober.query_audio_streams(INPUT) is None
        assert runner.calls == []

    @pytest.mark.parametrize(
        "result",
        [
            RunResult(1, "", "Invalid data found when processing input"),
            RunResult(0, "", ""),
            RunResult(0, "{not json", ""),
            RunResult(0, '{"streams": []}', ""),
        ],
    )
    def test_unusable_results(self, tool_paths, make_runner, result) -> None:
        runner = make_runner(lambda args: result)

        assert MediaProber(tool_paths, runner=runner).query_audio_streams(INPUT) is None


class TestProbe:
    """Tests for MediaProber.probe."""

    def test_full_probe(
        self, tool_paths, make_runner, load_probe_text, ffprobe_audio_json
    ) -> None:
        runner = make_runner(
            _handler(load_probe_text("with_cover"), RunResult(0, ffprobe_audio_json))
        )

        result = MediaProber(tool_paths, runner=runner).probe(INPUT)

        assert result.duration_seconds == 120.0
        assert result.has_duration
        assert result.attached_picture == "0:2"
        assert result.has_attached_picture
        assert result.audio.total_kbps == 320
        assert result.audio.stream_count == 2
        assert len(runner.calls) == 2

    def test_text_fallback_without_ffprobe(self, make_runner, load_probe_text) -> None:
        """Without ffprobe each "Audio:" marker counts as 192 kbps."""
        runner = make_runner(_handler(load_probe_text("no_cover"), RunResult(1)))
        prober = MediaProber(ToolPaths(ffmpeg=Path("/usr/bin/ffmpeg")), runner=runner)

        result = prober.probe(INPUT)

        assert result.attached_picture is None
        assert result.audio.total_kbps == 384
        assert result.audio.stream_count == 2
        assert result.audio.estimated is True

    def test_text_fallback_when_ffprobe_fails(
        self, tool_paths, make_runner, load_probe_text
    ) -> None:
        runner = make_runner(
            _handler(load_probe_text("with_cover"), RunResult(1, "", "error"))
        )

        result = MediaProber(tool_paths, runner=runner).probe(INPUT)

        assert result.audio.total_kbps == 192
        assert result.audio.stream_count == 1

    def test_custom_default_audio_bitrate(
        self, tool_paths, make_runner, load_probe_text
    ) -> None:
        runner = make_runner(_handler(load_probe_text("no_cover"), RunResult(1)))
        prober = MediaProber(tool_paths, runner=runner, default_audio_kbps=128)

        assert prober.probe(INPUT).audio.total_kbps == 256

    def test_unknown_duration(self, tool_paths, make_runner, load_probe_text) -> None:
        """Missing duration degrades to 0.0 rather than raising."""
        ffprobe_json = json.dumps({"streams": [{"index": 1, "bit_rate": "128000"}]})
        runner = make_runner(
            _handler(load_probe_text("no_duration"), RunResult(0, ffprobe_json))
        )

        result = MediaProber(tool_paths, runner=runner).probe(INPUT)

        assert result.duration_seconds == 0.0
        assert not result.has_duration
        assert result.audio.total_kbps == 128
