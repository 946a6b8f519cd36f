"""CLI module for av1shrink."""

import logging
from pathlib import Path

import click

from av1shrink import __version__
from av1shrink.cli.exit_codes import ExitCode
from av1shrink.cli.output import error_exit
from av1shrink.exceptions import ConfigError

logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="av1shrink")
@click.option(
    "--config",
    "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: ~/.av1shrink/config.toml).",
)
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
    help="Override log level (default: warning).",
)
@click.option(
    "--log-file",
    type=click.Path(path_type=Path),
    default=None,
    help="Override log file path.",
)
@click.option(
    "--log-json",
    is_flag=True,
    default=False,
    help="Use JSON log format.",
)
@click.pass_context
def main(
    ctx: click.Context,
    config_path: Path | None,
    log_level: str | None,
    log_file: Path | None,
    log_json: bool,
) -> None:
    """av1shrink - Convert videos to AV1 at about half their size."""
    from av1shrink.config import configure_logging_from_cli, get_config

    ctx.ensure_object(dict)
    # Preserve a config injected by tests
    if "config" not in ctx.obj:
        try:
            ctx.obj["config"] = get_config(config_path=config_path)
        except ConfigError as e:
            error_exit(str(e), ExitCode.GENERAL_ERROR, error_code=e.code)

    config = ctx.obj["config"]
    try:
        configure_logging_from_cli(
            config.logging,
            level=log_level,
            file=log_file,
            format="json" if log_json else None,
        )
    except ValueError as e:
        error_exit(str(e), ExitCode.GENERAL_ERROR, error_code="CONFIG_ERROR")

    logger.debug(
        "av1shrink %s starting",
        __version__,
        extra={"config_path": str(config_path) if config_path else None},
    )


def _register_commands() -> None:
    from av1shrink.cli.convert import convert_command

    main.add_command(convert_command)


_register_commands()
