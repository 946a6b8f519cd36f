"""FFmpeg command building for AV1 conversion.

The command keeps every audio and subtitle stream as-is, re-encodes the
first video stream and, optionally, attaches the thumbnail as a cover image.
"""

from pathlib import Path

from av1shrink.executor.transcode.types import ConversionJob
from av1shrink.tools.encoders import EncoderChoice


def build_ffmpeg_command(
    ffmpeg: Path,
    job: ConversionJob,
    encoder: EncoderChoice,
    include_thumbnail: bool = True,
) -> list[str]:
    """Build the FFmpeg command for a conversion.

    Args:
        ffmpeg: Path to ffmpeg.
        job: Conversion job with input, output and thumbnail paths.
        encoder: Selected encoder and options.
        include_thumbnail: Attach the thumbnail as an mjpeg cover stream.

    Returns:
        Argument list; progress is written to stdout in key=value form.
    """
    cmd = [str(ffmpeg), "-hide_banner", "-y", "-i", str(job.input_path)]
    if include_thumbnail:
        cmd.extend(["-i", str(job.thumbnail_path)])

    # "?" keeps the command valid for inputs without audio or subtitles
    cmd.extend(["-map", "0:v:0", "-map", "0:a?", "-map", "0:s?"])
    if include_thumbnail:
        cmd.extend(["-map", "1:v:0"])

    cmd.extend(["-c:v:0", encoder.encoder, *encoder.options])
    cmd.extend(["-c:a", "copy", "-c:s", "copy"])
    if include_thumbnail:
        cmd.extend(["-c:v:1", "mjpeg", "-disposition:v:1", "attached_pic"])

    cmd.extend(["-movflags", "+faststart", "-pix_fmt:v:0", "yuv420p"])
    cmd.extend(["-progress", "pipe:1", str(job.output_path)])
    return cmd
