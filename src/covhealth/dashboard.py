"""Cross-job coverage data for the dashboard grid and the trend chart."""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING

from covhealth.models.coverage import CoverageResultSummary, round_half_even

if TYPE_CHECKING:
    from datetime import date

    from covhealth.models.build import BuildRecord, JobHistory

logger = logging.getLogger(__name__)


def _last_date(jobs: list[JobHistory]) -> date | None:
    dates = [job.last_build.date for job in jobs if job.last_build is not None]
    return max(dates) if dates else None


def _result_for(record: BuildRecord, metrics: tuple[str, ...]) -> CoverageResultSummary:
    """Return the percentages of one build, ``0.0`` for anything missing."""
    coverage: dict[str, float] = {}
    for metric in metrics:
        ratio = record.snapshot.get(metric) if record.snapshot is not None else None
        coverage[metric] = ratio.percentage_float if ratio is not None else 0.0
    return CoverageResultSummary(job=record.job, coverage=coverage)


def summarize(
    summaries: dict[date, CoverageResultSummary],
    record: BuildRecord,
    job_name: str,
    metrics: tuple[str, ...],
) -> None:
    """Fold *record* into the bucket of its date.

    Only the first build visited per job and date is counted; later ones
    (earlier builds of the same day) are ignored. Builds of other jobs on
    the same date are added to the bucket.
    """
    bucket = summaries.get(record.date)
    if bucket is None:
        bucket = CoverageResultSummary()
        summaries[record.date] = bucket
    elif bucket.has_job(job_name):
        return
    bucket.add_coverage_result(_result_for(record, metrics))
    bucket.job = job_name


def load_chart_data_within_range(
    jobs: list[JobHistory], days: int, metrics: tuple[str, ...]
) -> dict[date, CoverageResultSummary] | None:
    """Bucket the coverage of every job's recent builds by build date.

    The window ends at the newest build date across all jobs and covers the
    *days* before it. Returns ``None`` when no job has any build, and the
    buckets sorted by ascending date otherwise.
    """
    last_date = _last_date(jobs)
    if last_date is None:
        return None

    first_date = last_date - timedelta(days=days)
    summaries: dict[date, CoverageResultSummary] = {}

    for job in jobs:
        record = job.last_build
        while record is not None and record.date > first_date:
            summarize(summaries, record, job.name, metrics)
            record = job.previous_build(record)

    logger.debug("Chart data: %d dates from %d jobs", len(summaries), len(jobs))
    return dict(sorted(summaries.items()))


def get_result_summary(jobs: list[JobHistory], metrics: tuple[str, ...]) -> CoverageResultSummary:
    """Summarise each job's last successful build for the dashboard grid.

    Failed builds are skipped entirely rather than walked past. Percentages
    are rounded half-even to one decimal; a job without a successful build,
    or a metric without data, counts as ``0.0``.
    """
    summary = CoverageResultSummary()
    for job in jobs:
        coverage = dict.fromkeys(metrics, 0.0)
        record = job.last_successful_build
        if record is not None and record.snapshot is not None:
            for metric in metrics:
                ratio = record.snapshot.get(metric)
                if ratio is not None:
                    coverage[metric] = round_half_even(ratio.percentage_float)
        summary.add_coverage_result(CoverageResultSummary(job=job.name, coverage=coverage))
    return summary
