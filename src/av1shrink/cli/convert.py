"""CLI command for converting a video to AV1."""

import logging
from pathlib import Path

import click

from av1shrink.cli.exit_codes import ExitCode
from av1shrink.cli.output import CLIResult, ProgressDisplay, error_exit
from av1shrink.config.models import AppConfig
from av1shrink.core.formatting import format_megabytes, format_ratio
from av1shrink.exceptions import ConversionError
from av1shrink.workflow.converter import ConversionResult, ConversionSession, Converter

logger = logging.getLogger(__name__)

PROMPT = "Please drag and drop your video file here and press Enter:"


def _clean_path_input(raw: str) -> str:
    """Strip whitespace and surrounding quotes added by drag and drop."""
    value = raw.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        value = value[1:-1].strip()
    return value


def _prompt_for_path() -> Path | None:
    click.echo(PROMPT)
    line = click.get_text_stream("stdin").readline()
    value = _clean_path_input(line)
    return Path(value).expanduser() if value else None


def _result_data(result: ConversionResult) -> dict:
    return {
        "input": str(result.job.input_path),
        "output": str(result.job.output_path),
        "input_size_bytes": result.job.input_size_bytes,
        "output_size_bytes": result.output_size_bytes,
        "compression_ratio": result.compression_ratio,
        "duration_seconds": result.probe.duration_seconds,
        "original_total_kbps": result.plan.original_total_kbps,
        "audio_kbps": result.audio.total_kbps,
        "audio_streams": result.audio.stream_count,
        "target_video_kbps": result.plan.target_video_kbps,
        "encoder": result.encoder.encoder,
        "encoder_options": list(result.encoder.options),
        "retried_without_thumbnail": result.transcode.retried_without_thumbnail,
    }


def _print_summary(result: ConversionResult) -> None:
    click.echo("Conversion finished!")
    if result.transcode.retried_without_thumbnail:
        click.echo("Note: the output was written without the thumbnail.")
    click.echo(f"Output file: {result.job.output_path}")
    if result.output_size_bytes is not None:
        click.echo(f"Output size: {format_megabytes(result.output_size_bytes)}")
        click.echo(f"Compression: {format_ratio(result.compression_ratio)}")


@click.command("convert")
@click.argument(
    "input_path",
    required=False,
    type=click.Path(path_type=Path),
)
@click.option(
    "--json",
    "json_output",
    is_flag=True,
    default=False,
    help="Print a single JSON result instead of progress output.",
)
@click.pass_context
def convert_command(
    ctx: click.Context, input_path: Path | None, json_output: bool
) -> None:
    """Convert INPUT_PATH to AV1 at about half its size.

    Audio and subtitle streams are copied unchanged and a thumbnail is
    attached as cover art. The result is written next to the input as
    <name>_av1.mp4. Without INPUT_PATH, the path is read from stdin.
    """
    config: AppConfig = ctx.obj["config"]

    if input_path is None:
        input_path = _prompt_for_path()
        if input_path is None:
            error_exit("No file path provided", ExitCode.GENERAL_ERROR, json_output)

    display = ProgressDisplay(enabled=not json_output)
    status = None if json_output else display.status

    try:
        session = ConversionSession.from_config(config)
        converter = Converter(
            session, progress_callback=display.update, status_callback=status
        )
        result = converter.convert(input_path)
    except KeyboardInterrupt:
        display.finish()
        logger.warning("Conversion interrupted")
        error_exit("Conversion interrupted", ExitCode.INTERRUPTED, json_output)
    except ConversionError as e:
        display.finish()
        logger.error("Conversion failed: %s", e, extra={"error_code": e.code})
        if not json_output:
            click.echo("An error occurred during conversion.", err=True)
        error_exit(str(e), ExitCode.GENERAL_ERROR, json_output, error_code=e.code)

    display.finish()
    if json_output:
        cli_result = CLIResult(
            success=True, message="Conversion finished", data=_result_data(result)
        )
        click.echo(cli_result.to_json())
    else:
        _print_summary(result)
