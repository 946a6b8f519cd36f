"""av1shrink - Convert videos to AV1 at about half their original size."""

__version__ = "0.1.0"
