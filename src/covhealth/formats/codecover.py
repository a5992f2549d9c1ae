"""CodeCover coverage reports."""

from __future__ import annotations

from covhealth.formats.base import ReportFormat


class CodeCoverFormat(ReportFormat):
    """CodeCover summary: statements, branches, loops, conditions."""

    @property
    def name(self) -> str:
        return "codecover"

    @property
    def metrics(self) -> tuple[str, ...]:
        return ("statement", "branch", "loop", "condition")

    @property
    def secondary_pattern(self) -> str:
        return "**/coverage*.xml"

    @property
    def default_includes(self) -> str:
        return "report.html"

    @property
    def default_maxima(self) -> dict[str, int]:
        return {"statement": 90, "branch": 80, "loop": 50, "condition": 50}
