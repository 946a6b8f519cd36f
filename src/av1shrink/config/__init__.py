"""Configuration management for av1shrink.

Configuration is loaded with precedence handling:
1. CLI flags (highest priority)
2. Environment variables (AV1SHRINK_*)
3. Config file (~/.av1shrink/config.toml)
4. Default values (lowest priority)
"""

from av1shrink.config.env import EnvReader
from av1shrink.config.loader import (
    get_config,
    get_default_config_path,
    get_temp_directory,
    load_config_file,
)
from av1shrink.config.logging_factory import (
    build_logging_config,
    configure_logging_from_cli,
)
from av1shrink.config.models import (
    AppConfig,
    ConversionConfig,
    LoggingConfig,
    ToolPathsConfig,
)

__all__ = [
    # Models
    "AppConfig",
    "ConversionConfig",
    "LoggingConfig",
    "ToolPathsConfig",
    # Loader
    "EnvReader",
    "get_config",
    "get_default_config_path",
    "get_temp_directory",
    "load_config_file",
    # Logging
    "build_logging_config",
    "configure_logging_from_cli",
]
