"""Tests for introspector/parsers.py."""

from collections.abc import Callable

import pytest

from av1shrink.introspector.parsers import (
    AudioBitrateEstimate,
    AudioStreamInfo,
    count_audio_streams,
    estimate_audio_bitrate,
    find_attached_picture,
    parse_audio_streams_json,
    parse_duration,
)


class TestParseDuration:
    """Tests for parse_duration function."""

    def test_two_minutes(self, load_probe_text: Callable[[str], str]) -> None:
        assert parse_duration(load_probe_text("with_cover")) == 120.0

    def test_hours_and_centiseconds(
        self, load_probe_text: Callable[[str], str]
    ) -> None:
        """01:02:03.45 is 3723.45 seconds."""
        assert parse_duration(load_probe_text("no_cover")) == pytest.approx(3723.45)

    def test_not_available(self, load_probe_text: Callable[[str], str]) -> None:
        """Duration: N/A yields 0.0 (unknown)."""
        assert parse_duration(load_probe_text("no_duration")) == 0.0

    def test_missing(self) -> None:
        assert parse_duration("Input #0, matroska,webm, from 'x.mkv':") == 0.0

    def test_without_fraction(self) -> None:
        assert parse_duration("  Duration: 00:00:05, start: 0.0") == 5.0

    def test_french_label(self) -> None:
        """Localized ffmpeg builds print "Durée"."""
        assert parse_duration("  Durée: 00:01:00.50, début: 0.0") == 60.5


class TestFindAttachedPicture:
    """Tests for find_attached_picture function."""

    def test_finds_cover_stream(self, load_probe_text: Callable[[str], str]) -> None:
        """Specifier is taken from the line marked attached pic."""
        assert find_attached_picture(load_probe_text("with_cover")) == "0:2"

    def test_no_cover(self, load_probe_text: Callable[[str], str]) -> None:
        assert find_attached_picture(load_probe_text("no_cover")) is None

    @pytest.mark.parametrize(
        "line",
        [
            "  Stream #0:1: Video: png, rgb24, 500x500 (attached pic)",
            "  Stream #0:1[0x2]: Video: mjpeg, 500x500 (attached pic)",
            "  Stream #0:1(eng): Video: mjpeg, 500x500 (attached pic)",
        ],
    )
    def test_tolerates_specifier_suffixes(self, line: str) -> None:
        assert find_attached_picture(line) == "0:1"

    def test_marker_without_stream_specifier(self) -> None:
        """A marker on a line without a stream specifier is ignored."""
        assert find_attached_picture("note: attached pic present") is None


class TestCountAudioStreams:
    """Tests for count_audio_streams function."""

    def test_single(self, load_probe_text: Callable[[str], str]) -> None:
        assert count_audio_streams(load_probe_text("with_cover")) == 1

    def test_multiple(self, load_probe_text: Callable[[str], str]) -> None:
        assert count_audio_streams(load_probe_text("no_cover")) == 2

    def test_none(self) -> None:
        assert count_audio_streams("Stream #0:0: Video: h264") == 0


class TestParseAudioStreamsJson:
    """Tests for parse_audio_streams_json function."""

    def test_parses_streams(self, ffprobe_audio_json: str) -> None:
        """bit_rate is converted from bps to kbps; missing stays None."""
        streams = parse_audio_streams_json(ffprobe_audio_json)

        assert streams == [
            AudioStreamInfo(index=1, bit_rate_kbps=128),
            AudioStreamInfo(index=2, bit_rate_kbps=None),
        ]

    def test_rounds_half_up(self) -> None:
        streams = parse_audio_streams_json(
            '{"streams": [{"index": 1, "bit_rate": "127500"}]}'
        )
        assert streams[0].bit_rate_kbps == 128

    def test_numeric_bit_rate(self) -> None:
        streams = parse_audio_streams_json(
            '{"streams": [{"index": 1, "bit_rate": 96000}]}'
        )
        assert streams[0].bit_rate_kbps == 96

    def test_non_numeric_bit_rate(self) -> None:
        streams = parse_audio_streams_json(
            '{"streams": [{"index": 1, "bit_rate": "N/A"}]}'
        )
        assert streams[0].bit_rate_kbps is None

    def test_no_streams(self) -> None:
        assert parse_audio_streams_json('{"streams": []}') == []
        assert parse_audio_streams_json("{}") == []

    def test_invalid_json_raises(self) -> None:
        with pytest.raises(ValueError):
            parse_audio_streams_json("not json")


class TestEstimateAudioBitrate:
    """Tests for estimate_audio_bitrate function."""

    def test_reported_bitrates_are_summed(self) -> None:
        streams = [AudioStreamInfo(1, 128), AudioStreamInfo(2, 64)]

        assert estimate_audio_bitrate(streams) == AudioBitrateEstimate(
            total_kbps=192, stream_count=2, estimated=False
        )

    def test_missing_bitrate_uses_default_per_stream(self) -> None:
        """Each stream without a bitrate contributes 192 kbps."""
        streams = [AudioStreamInfo(1, 128), AudioStreamInfo(2, None)]

        estimate = estimate_audio_bitrate(streams)

        assert estimate.total_kbps == 320
        assert estimate.stream_count == 2
        assert estimate.estimated is True

    def test_custom_default(self) -> None:
        estimate = estimate_audio_bitrate([AudioStreamInfo()], default_kbps=160)
        assert estimate.total_kbps == 160

    def test_no_streams(self) -> None:
        assert estimate_audio_bitrate([]) == AudioBitrateEstimate(0, 0)
