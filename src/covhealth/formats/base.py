"""Base class for coverage report formats.

A format bundles what differs between supported test runners: which
metrics their summary page lists (and in which order), where the reports
live, and the default health thresholds.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from covhealth.health import compute_health
from covhealth.models.coverage import CoverageSnapshot
from covhealth.models.health import MetricThreshold, Thresholds
from covhealth.reports import archive_reports, load_ratios, locate_reports

if TYPE_CHECKING:
    from pathlib import Path

    from covhealth.models.health import HealthReport


class ReportFormat(ABC):
    """Locator, parser and scorer for one kind of coverage report."""

    # ── Identity ─────────────────────────────────────────────────

    @property
    @abstractmethod
    def name(self) -> str:
        """Format identifier, also the archive sub-folder name (e.g. 'karma')."""

    @property
    @abstractmethod
    def metrics(self) -> tuple[str, ...]:
        """Metric names in the order the report lists them."""

    @property
    @abstractmethod
    def secondary_pattern(self) -> str:
        """Glob used to find reports inside a directory named by ``includes``."""

    @property
    @abstractmethod
    def default_includes(self) -> str:
        """Specifier used when ``includes`` is left blank."""

    @property
    @abstractmethod
    def default_maxima(self) -> dict[str, int]:
        """Threshold maximum per metric used when none is configured."""

    def default_thresholds(self) -> Thresholds:
        return Thresholds(
            metrics={
                metric: MetricThreshold(minimum=0, maximum=self.default_maxima.get(metric, 0))
                for metric in self.metrics
            }
        )

    # ── Pipeline steps ───────────────────────────────────────────

    def locate_reports(self, workspace: Path, includes: str) -> list[Path]:
        return locate_reports(workspace, includes or self.default_includes, self.secondary_pattern)

    def archive_reports(self, build_dir: Path, files: list[Path]) -> Path:
        """Copy *files* into ``<build_dir>/<name>/`` and return that folder."""
        folder = build_dir / self.name
        archive_reports(folder, files)
        return folder

    def load_snapshot(self, files: list[Path]) -> CoverageSnapshot:
        ratios = load_ratios(files, len(self.metrics))
        return CoverageSnapshot.from_ratios(self.metrics, ratios)

    def compute_health(
        self, snapshot: CoverageSnapshot | None, thresholds: Thresholds | None
    ) -> HealthReport | None:
        return compute_health(snapshot, thresholds)
