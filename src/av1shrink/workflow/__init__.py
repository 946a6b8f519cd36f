"""Conversion workflow."""

from av1shrink.workflow.converter import (
    ConversionResult,
    ConversionSession,
    Converter,
    create_job,
)

__all__ = [
    "ConversionResult",
    "ConversionSession",
    "Converter",
    "create_job",
]
