"""Tests for the convert CLI command."""

import json
from pathlib import Path
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from av1shrink import __version__
from av1shrink.cli import main
from av1shrink.cli.convert import _clean_path_input
from av1shrink.config.models import AppConfig
from av1shrink.exceptions import InputNotFoundError, ThumbnailError
from av1shrink.executor.transcode import ConversionJob, TranscodeResult
from av1shrink.introspector.parsers import AudioBitrateEstimate
from av1shrink.introspector.prober import MediaProbeResult
from av1shrink.policy.bitrate import BitratePlan
from av1shrink.tools.encoders import EncoderChoice
from av1shrink.workflow.converter import ConversionResult

INPUT = Path("/videos/movie.mp4")
OUTPUT = Path("/videos/movie_av1.mp4")


@pytest.fixture
def conversion_result() -> ConversionResult:
    job = ConversionJob(
        input_path=INPUT,
        output_path=OUTPUT,
        thumbnail_path=Path("/tmp/video_thumbnail_1.jpg"),
        input_size_bytes=102_400_000,
    )
    return ConversionResult(
        job=job,
        probe=MediaProbeResult(duration_seconds=120.0, raw_text=""),
        audio=AudioBitrateEstimate(total_kbps=192, stream_count=1),
        plan=BitratePlan(6827, 192, 3414, 3222),
        encoder=EncoderChoice(
            "libaom-av1", "software", ("-b:v:0", "3222k"), bitrate_mode=True
        ),
        transcode=TranscodeResult(success=True, output_path=OUTPUT, returncode=0),
        output_size_bytes=51_200_000,
    )


@pytest.fixture
def converter_cls():
    """Patch the session and converter used by the convert command."""
    with (
        patch("av1shrink.cli.convert.ConversionSession") as session_cls,
        patch("av1shrink.cli.convert.Converter") as converter_cls,
        patch("av1shrink.config.configure_logging_from_cli"),
    ):
        session_cls.from_config.return_value = MagicMock()
        yield converter_cls


def invoke(args: list[str], input: str | None = None):
    return CliRunner().invoke(main, args, input=input, obj={"config": AppConfig()})


class TestCleanPathInput:
    """Tests for _clean_path_input function."""

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("/videos/movie.mp4\n", "/videos/movie.mp4"),
            ("  '/videos/my movie.mp4'  \n", "/videos/my movie.mp4"),
            ('"/videos/my movie.mp4"', "/videos/my movie.mp4"),
            ("'/videos/odd.mp4\"", "'/videos/odd.mp4\""),
            ("''", ""),
            ("\n", ""),
        ],
    )
    def test_cleaning(self, raw: str, expected: str) -> None:
        assert _clean_path_input(raw) == expected


class TestConvertCommand:
    """Tests for the convert command."""

    def test_success_human_output(self, converter_cls, conversion_result) -> None:
        converter_cls.return_value.convert.return_value = conversion_result

        result = invoke(["convert", str(INPUT)])

        assert result.exit_code == 0
        converter_cls.return_value.convert.assert_called_once_with(INPUT)
        assert "Conversion finished!" in result.output
        assert f"Output file: {OUTPUT}" in result.output
        assert "Output size: 48.83 MB" in result.output
        assert "Compression: 50.0% of original" in result.output
        assert "without the thumbnail" not in result.output

    def test_success_notes_missing_thumbnail(
        self, converter_cls, conversion_result
    ) -> None:
        conversion_result.transcode.retried_without_thumbnail = True
        converter_cls.return_value.convert.return_value = conversion_result

        result = invoke(["convert", str(INPUT)])

        assert result.exit_code == 0
        assert "written without the thumbnail" in result.output

    def test_success_json(self, converter_cls, conversion_result) -> None:
        converter_cls.return_value.convert.return_value = conversion_result

        result = invoke(["convert", "--json", str(INPUT)])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["status"] == "completed"
        assert data["output"] == str(OUTPUT)
        assert data["target_video_kbps"] == 3222
        assert data["compression_ratio"] == pytest.approx(0.5)
        assert data["encoder"] == "libaom-av1"
        # No status callback in JSON mode
        _, kwargs = converter_cls.call_args
        assert kwargs["status_callback"] is None

    def test_reads_path_from_prompt(self, converter_cls, conversion_result) -> None:
        """Drag-and-drop quotes around the path are removed."""
        converter_cls.return_value.convert.return_value = conversion_result

        result = invoke(["convert"], input="'/videos/my movie.mp4'\n")

        assert result.exit_code == 0
        assert "Please drag and drop your video file here" in result.output
        converter_cls.return_value.convert.assert_called_once_with(
            Path("/videos/my movie.mp4")
        )

    def test_empty_prompt_fails(self, converter_cls) -> None:
        result = invoke(["convert"], input="\n")

        assert result.exit_code == 1
        assert "Error: No file path provided" in result.output
        converter_cls.return_value.convert.assert_not_called()

    def test_conversion_error(self, converter_cls) -> None:
        converter_cls.return_value.convert.side_effect = ThumbnailError(
            "Thumbnail file is missing or empty. Cannot proceed."
        )

        result = invoke(["convert", str(INPUT)])

        assert result.exit_code == 1
        assert "An error occurred during conversion." in result.output
        assert (
            "Error: Thumbnail file is missing or empty. Cannot proceed."
            in result.output
        )

    def test_conversion_error_json(self, converter_cls) -> None:
        converter_cls.return_value.convert.side_effect = InputNotFoundError(INPUT)

        result = invoke(["convert", "--json", str(INPUT)])

        assert result.exit_code == 1
        data = json.loads(result.output)
        assert data["status"] == "failed"
        assert data["error"]["code"] == "INPUT_NOT_FOUND"
        assert data["error"]["message"] == f"File not found at '{INPUT}'"

    def test_interrupt(self, converter_cls) -> None:
        converter_cls.return_value.convert.side_effect = KeyboardInterrupt

        result = invoke(["convert", str(INPUT)])

        assert result.exit_code == 130
        assert "Error: Conversion interrupted" in result.output


class TestMainGroup:
    """Tests for the top-level command group."""

    def test_version(self) -> None:
        result = CliRunner().invoke(main, ["--version"])

        assert result.exit_code == 0
        assert f"av1shrink, version {__version__}" in result.output

    def test_invalid_config_file(self, tmp_path: Path) -> None:
        path = tmp_path / "config.toml"
        path.write_text("[conversion]\ntarget_ratio = 7\n")

        result = CliRunner().invoke(main, ["--config", str(path), "convert", "x"])

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output

    def test_log_options_passed_through(self, tmp_path: Path) -> None:
        log_file = tmp_path / "a.log"
        with patch("av1shrink.config.configure_logging_from_cli") as configure:
            result = CliRunner().invoke(
                main,
                [
                    "--log-level",
                    "debug",
                    "--log-file",
                    str(log_file),
                    "--log-json",
                    "convert",
                    "--help",
                ],
                obj={"config": AppConfig()},
            )

        assert result.exit_code == 0
        _, kwargs = configure.call_args
        assert kwargs == {"level": "debug", "file": log_file, "format": "json"}
