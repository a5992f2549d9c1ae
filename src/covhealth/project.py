"""Per-job views over build history: last result, previous result, trend."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from covhealth.health import compute_health
from covhealth.models.build import BuildResult
from covhealth.utils.cache import MemoryCache

if TYPE_CHECKING:
    from covhealth.models.build import BuildRecord, JobHistory
    from covhealth.models.health import HealthReport


def _walk_results(job: JobHistory, start: BuildRecord | None) -> BuildRecord | None:
    record = start
    while record is not None:
        if record.result != BuildResult.FAILURE and record.snapshot is not None:
            return record
        record = job.previous_build(record)
    return None


def last_result(job: JobHistory) -> BuildRecord | None:
    """Return the newest non-failed build that recorded coverage."""
    return _walk_results(job, job.last_build)


def previous_result(job: JobHistory, record: BuildRecord) -> BuildRecord | None:
    """Return the newest non-failed build with coverage that ran before *record*."""
    return _walk_results(job, job.previous_build(record))


@dataclass
class TrendRow:
    """One point of a job's coverage trend."""

    number: int
    result: BuildResult
    percentages: dict[str, float]


def trend_rows(job: JobHistory, limit: int | None = None) -> list[TrendRow]:
    """Return coverage per build, oldest first, for builds that recorded coverage.

    Failed builds are left out, as in :func:`last_result`.
    """
    rows: list[TrendRow] = []
    record = last_result(job)
    while record is not None and record.snapshot is not None:
        if limit is not None and len(rows) >= limit:
            break
        rows.append(
            TrendRow(
                number=record.number,
                result=record.result,
                percentages=record.snapshot.percentages(),
            )
        )
        record = previous_result(job, record)
    rows.reverse()
    return rows


class HealthReports:
    """Memoised health reports, keyed by ``job#number``.

    Old builds keep being scored with the thresholds stored on their record.
    """

    def __init__(self, max_size: int = 64) -> None:
        self._cache: MemoryCache[HealthReport | None] = MemoryCache(max_size=max_size)

    def get(self, record: BuildRecord) -> HealthReport | None:
        return self._cache.get_or_compute(
            record.key, lambda: compute_health(record.snapshot, record.thresholds)
        )

    @property
    def cache(self) -> MemoryCache[HealthReport | None]:
        return self._cache
