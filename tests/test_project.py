"""Tests for covhealth.project — per-job result walking and health memoisation."""

from __future__ import annotations

from datetime import UTC, datetime

from covhealth.models.build import BuildRecord, BuildResult, JobHistory
from covhealth.models.coverage import CoverageSnapshot, Ratio
from covhealth.models.health import MetricThreshold, Thresholds
from covhealth.project import HealthReports, last_result, previous_result, trend_rows

_METRICS = ("line", "statement", "function", "branch")


def _record(
    number: int,
    result: BuildResult = BuildResult.SUCCESS,
    line: Ratio | None = None,
    *,
    with_snapshot: bool = True,
) -> BuildRecord:
    snapshot = (
        CoverageSnapshot.from_ratios(_METRICS, [line or Ratio(number, 10)])
        if with_snapshot
        else None
    )
    return BuildRecord(
        job="web",
        number=number,
        timestamp=datetime(2024, 5, number, tzinfo=UTC),
        result=result,
        snapshot=snapshot,
        thresholds=Thresholds(metrics={"line": MetricThreshold(0, 90)}),
    )


class TestLastResult:
    def test_skips_failed_builds(self) -> None:
        job = JobHistory("web", [_record(1), _record(2, BuildResult.FAILURE)])
        record = last_result(job)
        assert record is not None
        assert record.number == 1

    def test_skips_builds_without_coverage(self) -> None:
        job = JobHistory("web", [_record(1), _record(2, with_snapshot=False)])
        record = last_result(job)
        assert record is not None
        assert record.number == 1

    def test_unstable_builds_count(self) -> None:
        job = JobHistory("web", [_record(1), _record(2, BuildResult.UNSTABLE)])
        record = last_result(job)
        assert record is not None
        assert record.number == 2

    def test_none_without_results(self) -> None:
        assert last_result(JobHistory("web")) is None
        assert last_result(JobHistory("web", [_record(1, BuildResult.FAILURE)])) is None

    def test_previous_result(self) -> None:
        job = JobHistory(
            "web", [_record(1), _record(2, BuildResult.FAILURE), _record(3)]
        )
        newest = job.get(3)
        assert newest is not None
        previous = previous_result(job, newest)
        assert previous is not None
        assert previous.number == 1
        assert previous_result(job, previous) is None


class TestTrendRows:
    def test_oldest_first_without_failures(self) -> None:
        job = JobHistory(
            "web",
            [_record(1), _record(2, BuildResult.FAILURE), _record(3, BuildResult.UNSTABLE)],
        )

        rows = trend_rows(job)

        assert [row.number for row in rows] == [1, 3]
        assert rows[0].percentages["line"] == 10.0
        assert rows[1].result == BuildResult.UNSTABLE

    def test_limit_keeps_newest(self) -> None:
        job = JobHistory("web", [_record(n) for n in range(1, 6)])

        rows = trend_rows(job, limit=2)

        assert [row.number for row in rows] == [4, 5]

    def test_empty(self) -> None:
        assert trend_rows(JobHistory("web")) == []


class TestHealthReports:
    def test_scores_with_stored_thresholds(self) -> None:
        reports = HealthReports()
        report = reports.get(_record(1, line=Ratio(45, 100)))
        assert report is not None
        assert report.score == 50
        assert report.messages == ["Lines 45/100 (45%)."]

    def test_memoised_by_build_key(self) -> None:
        reports = HealthReports(max_size=2)
        record = _record(1)

        first = reports.get(record)
        second = reports.get(record)

        assert first is second
        assert reports.cache.hits == 1
        assert reports.cache.misses == 1

    def test_health_disabled_is_cached_as_none(self) -> None:
        reports = HealthReports()
        record = _record(1)
        record.thresholds = None

        assert reports.get(record) is None
        assert reports.get(record) is None
        assert reports.cache.hits == 1
