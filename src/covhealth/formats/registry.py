"""Explicit registry of report formats, built once at startup."""

from __future__ import annotations

import logging

from covhealth.formats.base import ReportFormat
from covhealth.formats.codecover import CodeCoverFormat
from covhealth.formats.karma import KarmaFormat

logger = logging.getLogger(__name__)


class UnknownFormatError(LookupError):
    """Raised when a format name has no registered handler."""


class FormatRegistry:
    """Maps format names to their :class:`ReportFormat` handler."""

    def __init__(self, formats: list[ReportFormat] | None = None) -> None:
        self._formats: dict[str, ReportFormat] = {}
        for fmt in formats or []:
            self.register(fmt)

    def register(self, fmt: ReportFormat) -> None:
        if fmt.name in self._formats:
            logger.warning("Replacing registered report format %s", fmt.name)
        self._formats[fmt.name] = fmt

    def get(self, name: str) -> ReportFormat:
        try:
            return self._formats[name]
        except KeyError:
            msg = f"Unknown report format: {name!r} (available: {', '.join(self.names)})"
            raise UnknownFormatError(msg) from None

    def __contains__(self, name: object) -> bool:
        return name in self._formats

    @property
    def names(self) -> list[str]:
        return sorted(self._formats)


def default_registry() -> FormatRegistry:
    """Return a registry holding the built-in Karma and CodeCover formats."""
    return FormatRegistry([KarmaFormat(), CodeCoverFormat()])
