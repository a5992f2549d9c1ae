"""Karma (Istanbul HTML reporter) coverage reports."""

from __future__ import annotations

from covhealth.formats.base import ReportFormat


class KarmaFormat(ReportFormat):
    """Karma's ``index.html`` summary: lines, statements, functions, branches."""

    @property
    def name(self) -> str:
        return "karma"

    @property
    def metrics(self) -> tuple[str, ...]:
        return ("line", "statement", "function", "branch")

    @property
    def secondary_pattern(self) -> str:
        return "index.html"

    @property
    def default_includes(self) -> str:
        return "coverage"

    @property
    def default_maxima(self) -> dict[str, int]:
        return {"line": 90, "statement": 80, "function": 50, "branch": 50}
