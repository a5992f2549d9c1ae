"""Supported coverage report formats."""

from covhealth.formats.base import ReportFormat
from covhealth.formats.codecover import CodeCoverFormat
from covhealth.formats.karma import KarmaFormat
from covhealth.formats.registry import FormatRegistry, UnknownFormatError, default_registry

__all__ = [
    "CodeCoverFormat",
    "FormatRegistry",
    "KarmaFormat",
    "ReportFormat",
    "UnknownFormatError",
    "default_registry",
]
