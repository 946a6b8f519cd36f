"""Cover image resolution.

The converted file carries a cover image so file browsers can show a
preview. An image already embedded in the input is reused as-is; otherwise
a single frame is grabbed from early in the video.
"""

import logging
from collections.abc import Callable
from pathlib import Path

from av1shrink.core.subprocess_utils import CommandRunner, run_command
from av1shrink.exceptions import ThumbnailError
from av1shrink.executor.ffmpeg_utils import validate_output
from av1shrink.tools.models import ToolPaths

logger = logging.getLogger(__name__)

DEFAULT_THUMBNAIL_TIMESTAMP = "00:00:01"


class ThumbnailResolver:
    """Produces the thumbnail image for a conversion."""

    def __init__(
        self,
        tools: ToolPaths,
        runner: CommandRunner = run_command,
        timestamp: str = DEFAULT_THUMBNAIL_TIMESTAMP,
        status_callback: Callable[[str], None] | None = None,
    ) -> None:
        self.tools = tools
        self.runner = runner
        self.timestamp = timestamp
        self.status_callback = status_callback

    def _status(self, message: str) -> None:
        if self.status_callback is not None:
            self.status_callback(message)

    def extract_attached(
        self, input_path: Path, thumbnail_path: Path, stream_spec: str
    ) -> bool:
        """Copy an embedded cover image out of the input.

        Returns:
            True if ffmpeg exited successfully.
        """
        # fmt: off
        result = self.runner(
            [
                self.tools.ffmpeg, "-y", "-hide_banner",
                "-i", input_path,
                "-map", stream_spec,
                "-c", "copy",
                thumbnail_path,
            ]
        )
        # fmt: on
        if not result.success:
            logger.warning(
                "Could not extract attached picture %s (rc=%d)",
                stream_spec,
                result.returncode,
            )
        return result.success

    def generate_frame(self, input_path: Path, thumbnail_path: Path) -> bool:
        """Grab a single frame at the configured timestamp.

        Returns:
            True if ffmpeg exited successfully.
        """
        # fmt: off
        result = self.runner(
            [
                self.tools.ffmpeg, "-y", "-hide_banner",
                "-i", input_path,
                "-ss", self.timestamp,
                "-frames:v", "1",
                thumbnail_path,
            ]
        )
        # fmt: on
        if not result.success:
            logger.error(
                "Thumbnail generation failed (rc=%d): %s",
                result.returncode,
                result.stderr.strip()[-500:],
            )
        return result.success

    def resolve(
        self,
        input_path: Path,
        thumbnail_path: Path,
        attached_picture: str | None = None,
    ) -> Path:
        """Produce the thumbnail file.

        Args:
            input_path: Input video.
            thumbnail_path: Where the image is written.
            attached_picture: Stream specifier of an embedded cover, if any.

        Returns:
            thumbnail_path, verified to exist and be non-empty.

        Raises:
            ThumbnailError: If no usable image could be produced.
        """
        extracted = False
        if attached_picture is not None:
            self._status(
                f"Embedded thumbnail found (stream {attached_picture}). Extracting..."
            )
            extracted = self.extract_attached(
                input_path, thumbnail_path, attached_picture
            )
            if not extracted:
                self._status("Error extracting thumbnail, will generate a new one.")
        else:
            self._status(
                "No embedded thumbnail found. Generating from the first second..."
            )

        if not extracted and not self.generate_frame(input_path, thumbnail_path):
            verb = "extract or generate" if attached_picture is not None else "generate"
            raise ThumbnailError(f"Failed to {verb} thumbnail for {input_path}")

        valid, error = validate_output(thumbnail_path)
        if not valid:
            logger.error("Thumbnail validation failed: %s", error)
            raise ThumbnailError("Thumbnail file is missing or empty. Cannot proceed.")

        logger.debug(
            "Thumbnail ready",
            extra={"thumbnail": str(thumbnail_path), "extracted": extracted},
        )
        return thumbnail_path
