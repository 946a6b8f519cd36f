"""Structured logging module for av1shrink.

Provides configurable logging with JSON format support and file rotation.
"""

from av1shrink.logging.config import configure_logging
from av1shrink.logging.context import (
    ConversionContextFilter,
    conversion_context,
    get_input_file,
)
from av1shrink.logging.handlers import JSONFormatter

__all__ = [
    "ConversionContextFilter",
    "JSONFormatter",
    "configure_logging",
    "conversion_context",
    "get_input_file",
]
