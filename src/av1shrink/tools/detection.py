"""External tool detection.

This module locates ffmpeg and ffprobe, honouring configured paths before
falling back to a PATH lookup.
"""

import logging
import shutil
from pathlib import Path

from av1shrink.config.models import ToolPathsConfig
from av1shrink.exceptions import ToolNotFoundError
from av1shrink.tools.models import ToolPaths

logger = logging.getLogger(__name__)


def find_tool(name: str, configured_path: Path | None = None) -> Path | None:
    """Find a tool executable.

    Args:
        name: Tool name (e.g., "ffmpeg").
        configured_path: Optional configured path override.

    Returns:
        Path to tool executable, or None if not found.
    """
    # Try configured path first
    if configured_path:
        if configured_path.is_file():
            return configured_path
        logger.warning(
            "Configured path for %s is not a file: %s", name, configured_path
        )

    # Fall back to PATH lookup
    which_result = shutil.which(name)
    if which_result:
        return Path(which_result)

    return None


def resolve_tool_paths(config: ToolPathsConfig) -> ToolPaths:
    """Resolve the tools needed for a conversion session.

    Args:
        config: Configured tool path overrides.

    Returns:
        ToolPaths with ffmpeg and, if found, ffprobe.

    Raises:
        ToolNotFoundError: If ffmpeg cannot be found.
    """
    ffmpeg = find_tool("ffmpeg", config.ffmpeg)
    if ffmpeg is None:
        raise ToolNotFoundError("ffmpeg")

    ffprobe = find_tool("ffprobe", config.ffprobe)
    if ffprobe is None:
        logger.info(
            "ffprobe not found; audio bitrates will be estimated from ffmpeg output"
        )

    logger.debug("Resolved tools: ffmpeg=%s ffprobe=%s", ffmpeg, ffprobe)
    return ToolPaths(ffmpeg=ffmpeg, ffprobe=ffprobe)
