"""Data models for covhealth."""

from covhealth.models.build import BuildRecord, BuildResult, JobHistory
from covhealth.models.coverage import CoverageResultSummary, CoverageSnapshot, Ratio
from covhealth.models.health import HealthReport, MetricThreshold, Thresholds

__all__ = [
    "BuildRecord",
    "BuildResult",
    "CoverageResultSummary",
    "CoverageSnapshot",
    "HealthReport",
    "JobHistory",
    "MetricThreshold",
    "Ratio",
    "Thresholds",
]
