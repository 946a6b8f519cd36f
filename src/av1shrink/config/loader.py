"""Configuration loader with precedence handling.

Configuration is loaded with the following precedence (highest to lowest):
1. CLI arguments (passed directly to functions)
2. Environment variables (AV1SHRINK_*)
3. Config file (~/.av1shrink/config.toml)
4. Default values

Environment variables:
- AV1SHRINK_FFMPEG_PATH: Path to ffmpeg executable
- AV1SHRINK_FFPROBE_PATH: Path to ffprobe executable
- AV1SHRINK_CONFIG_PATH: Path to config file (overrides default location)
- AV1SHRINK_TEMP_DIR: Directory for the temporary thumbnail
- AV1SHRINK_TARGET_RATIO: Fraction of the original bitrate to target
- AV1SHRINK_LOG_LEVEL: Log level (debug, info, warning, error)
- AV1SHRINK_LOG_FILE: Path to log file
"""

import logging
import tempfile
import tomllib
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from av1shrink.config.env import EnvReader
from av1shrink.config.models import (
    AppConfig,
    ConversionConfig,
    LoggingConfig,
    ToolPathsConfig,
)
from av1shrink.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Default config location
DEFAULT_CONFIG_DIR = Path.home() / ".av1shrink"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.toml"


def get_default_config_path(env: EnvReader | None = None) -> Path:
    """Get the default config file path.

    Can be overridden by AV1SHRINK_CONFIG_PATH environment variable.

    Returns:
        Path to config file.
    """
    reader = env or EnvReader()
    return reader.get_path(
        "AV1SHRINK_CONFIG_PATH", must_exist=False, default=DEFAULT_CONFIG_FILE
    )  # type: ignore[return-value]


def load_config_file(path: Path | None = None, strict: bool = False) -> dict:
    """Load configuration from TOML file.

    Args:
        path: Path to config file. If None, uses default location.
        strict: Raise instead of falling back to defaults on a bad file.

    Returns:
        Parsed configuration dict. Empty dict if file doesn't exist.

    Raises:
        ConfigError: If strict and the file cannot be read or parsed.
    """
    if path is None:
        path = get_default_config_path()

    if not path.exists():
        logger.debug("Config file not found: %s", path)
        return {}

    try:
        with path.open("rb") as f:
            config = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        if strict:
            raise ConfigError(f"Failed to load config file {path}: {e}") from e
        logger.warning("Failed to load config file %s: %s", path, e)
        return {}

    logger.debug("Loaded config from %s", path)
    return config


def _file_path(section: Mapping[str, Any], key: str) -> Path | None:
    value = section.get(key)
    return Path(value).expanduser() if value else None


def _build_tools(
    section: Mapping[str, Any],
    env: EnvReader,
    ffmpeg_path: Path | None,
    ffprobe_path: Path | None,
) -> ToolPathsConfig:
    return ToolPathsConfig(
        ffmpeg=(
            ffmpeg_path
            or env.get_path("AV1SHRINK_FFMPEG_PATH")
            or _file_path(section, "ffmpeg")
        ),
        ffprobe=(
            ffprobe_path
            or env.get_path("AV1SHRINK_FFPROBE_PATH")
            or _file_path(section, "ffprobe")
        ),
    )


def _build_conversion(
    section: Mapping[str, Any], env: EnvReader, target_ratio: float | None
) -> ConversionConfig:
    defaults = ConversionConfig()
    return ConversionConfig(
        target_ratio=(
            target_ratio
            if target_ratio is not None
            else env.get_float(
                "AV1SHRINK_TARGET_RATIO",
                section.get("target_ratio", defaults.target_ratio),
            )
        ),  # type: ignore[arg-type]
        min_video_kbps=section.get("min_video_kbps", defaults.min_video_kbps),
        default_audio_kbps=section.get(
            "default_audio_kbps", defaults.default_audio_kbps
        ),
        thumbnail_timestamp=section.get(
            "thumbnail_timestamp", defaults.thumbnail_timestamp
        ),
        container=section.get("container", defaults.container),
        temp_directory=_file_path(section, "temp_directory"),
    )


def _build_logging(section: Mapping[str, Any], env: EnvReader) -> LoggingConfig:
    defaults = LoggingConfig()
    return LoggingConfig(
        level=env.get_str(
            "AV1SHRINK_LOG_LEVEL", section.get("level", defaults.level)
        ),  # type: ignore[arg-type]
        file=(
            env.get_path("AV1SHRINK_LOG_FILE", must_exist=False)
            or _file_path(section, "file")
        ),
        format=section.get("format", defaults.format),
        include_stderr=section.get("include_stderr", defaults.include_stderr),
        max_bytes=section.get("max_bytes", defaults.max_bytes),
        backup_count=section.get("backup_count", defaults.backup_count),
    )


def get_config(
    config_path: Path | None = None,
    # CLI overrides (highest precedence)
    ffmpeg_path: Path | None = None,
    ffprobe_path: Path | None = None,
    target_ratio: float | None = None,
    env: EnvReader | None = None,
    strict: bool = False,
) -> AppConfig:
    """Get av1shrink configuration with full precedence handling.

    Args:
        config_path: Path to config file (overrides AV1SHRINK_CONFIG_PATH).
        ffmpeg_path: CLI override for ffmpeg path.
        ffprobe_path: CLI override for ffprobe path.
        target_ratio: CLI override for the target ratio.
        env: Environment reader; defaults to one over os.environ.
        strict: Raise ConfigError for unreadable files and invalid values.

    Returns:
        AppConfig with merged configuration.

    Raises:
        ConfigError: If a value fails validation (always), or the file cannot
            be parsed (strict only).
    """
    reader = env or EnvReader()
    path = config_path or get_default_config_path(reader)
    file_config = load_config_file(path, strict=strict)

    try:
        return AppConfig(
            tools=_build_tools(
                file_config.get("tools", {}), reader, ffmpeg_path, ffprobe_path
            ),
            conversion=_build_conversion(
                file_config.get("conversion", {}), reader, target_ratio
            ),
            logging=_build_logging(file_config.get("logging", {}), reader),
        )
    except (TypeError, ValueError) as e:
        raise ConfigError(f"Invalid configuration in {path}: {e}") from e


def get_temp_directory(
    config: ConversionConfig | None = None, env: EnvReader | None = None
) -> Path:
    """Get the directory for temporary files.

    Precedence: AV1SHRINK_TEMP_DIR, then config temp_directory, then the
    system temp directory. The directory is created if it does not exist.

    Returns:
        Path to an existing directory.
    """
    reader = env or EnvReader()
    temp_dir = reader.get_path("AV1SHRINK_TEMP_DIR", must_exist=False)
    if temp_dir is None and config is not None:
        temp_dir = config.temp_directory
    if temp_dir is None:
        return Path(tempfile.gettempdir())
    temp_dir.mkdir(parents=True, exist_ok=True)
    return temp_dir
