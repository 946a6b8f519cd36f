"""FFmpeg executor utilities.

Shared helpers for temp file cleanup and output validation.
"""

import logging
from pathlib import Path

logger = logging.getLogger(__name__)


def file_size(path: Path) -> int | None:
    """Return the size of a file in bytes, or None if it cannot be read."""
    try:
        return path.stat().st_size
    except OSError:
        return None


def validate_output(
    output_path: Path,
    input_size: int | None = None,
    min_ratio: float = 0.01,
) -> tuple[bool, str | None]:
    """Validate an FFmpeg output file.

    Checks that the output file exists and is non-empty, and warns when it
    is suspiciously small relative to the input.

    Args:
        output_path: Path to output file.
        input_size: Original input file size in bytes (optional).
        min_ratio: Output/input size ratio below which a warning is logged.

    Returns:
        Tuple of (is_valid, error_message).
        error_message is None if valid.
    """
    if not output_path.exists():
        return False, f"Output file does not exist: {output_path}"

    output_size = file_size(output_path)
    if output_size is None:
        return False, f"Could not stat output file: {output_path}"

    if output_size == 0:
        return False, f"Output file is empty: {output_path}"

    if input_size:
        ratio = output_size / input_size
        if ratio < min_ratio:
            logger.warning(
                "Output file %s is only %.2f%% of input size (%.2f MB vs %.2f MB)",
                output_path,
                ratio * 100,
                output_size / (1024 * 1024),
                input_size / (1024 * 1024),
            )

    return True, None


def cleanup_temp_file(path: Path) -> bool:
    """Remove a temporary file, logging any errors.

    Args:
        path: Path to temp file to remove.

    Returns:
        True if the file was removed.
    """
    if not path.exists():
        return False
    try:
        path.unlink()
    except OSError as e:
        logger.warning("Could not clean up temp file %s: %s", path, e)
        return False
    logger.debug("Cleaned up temp file: %s", path)
    return True
