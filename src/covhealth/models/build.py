"""Build and job history models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

from covhealth.models.coverage import CoverageSnapshot
from covhealth.models.health import Thresholds

if TYPE_CHECKING:
    from datetime import date


class BuildResult(Enum):
    """Outcome of a build, ordered from best to worst."""

    SUCCESS = "SUCCESS"
    UNSTABLE = "UNSTABLE"
    FAILURE = "FAILURE"
    NOT_BUILT = "NOT_BUILT"
    ABORTED = "ABORTED"

    @property
    def ordinal(self) -> int:
        return _RESULT_ORDER.index(self)

    def is_worse_than(self, other: BuildResult) -> bool:
        return self.ordinal > other.ordinal

    def combine(self, other: BuildResult) -> BuildResult:
        """Return the worse of the two results."""
        return other if other.is_worse_than(self) else self

    @property
    def is_successful(self) -> bool:
        """Return True for SUCCESS and UNSTABLE builds."""
        return not self.is_worse_than(BuildResult.UNSTABLE)


_RESULT_ORDER = list(BuildResult)


@dataclass
class BuildRecord:
    """One build of a job and the coverage data recorded for it."""

    job: str
    number: int
    timestamp: datetime
    result: BuildResult = BuildResult.SUCCESS
    format_name: str = ""
    snapshot: CoverageSnapshot | None = None
    thresholds: Thresholds | None = None
    rule_failed: bool = False
    """True when the enforcement rule judged the coverage as failing."""

    @property
    def date(self) -> date:
        """Return the build's calendar date in the local time zone."""
        return self.timestamp.astimezone().date()

    @property
    def key(self) -> str:
        return f"{self.job}#{self.number}"

    def set_result(self, result: BuildResult) -> None:
        """Downgrade the result; a result never improves once set."""
        self.result = self.result.combine(result)

    def to_dict(self) -> dict[str, Any]:
        return {
            "job": self.job,
            "number": self.number,
            "timestamp": self.timestamp.isoformat(),
            "result": self.result.value,
            "format": self.format_name,
            "snapshot": self.snapshot.to_dict() if self.snapshot is not None else None,
            "thresholds": self.thresholds.to_dict() if self.thresholds is not None else None,
            "rule_failed": self.rule_failed,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> BuildRecord:
        snapshot_raw = data.get("snapshot")
        thresholds_raw = data.get("thresholds")
        return cls(
            job=str(data["job"]),
            number=int(data["number"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            result=BuildResult(data.get("result", BuildResult.SUCCESS.value)),
            format_name=str(data.get("format", "")),
            snapshot=(
                CoverageSnapshot.from_dict(snapshot_raw) if snapshot_raw is not None else None
            ),
            thresholds=(
                Thresholds.from_dict(thresholds_raw) if thresholds_raw is not None else None
            ),
            rule_failed=bool(data.get("rule_failed", False)),
        )


@dataclass
class JobHistory:
    """A job and its builds, newest first."""

    name: str
    builds: list[BuildRecord] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.builds.sort(key=lambda record: record.number, reverse=True)

    @property
    def last_build(self) -> BuildRecord | None:
        return self.builds[0] if self.builds else None

    @property
    def last_successful_build(self) -> BuildRecord | None:
        """Return the newest SUCCESS or UNSTABLE build."""
        return next((record for record in self.builds if record.result.is_successful), None)

    def previous_build(self, record: BuildRecord) -> BuildRecord | None:
        """Return the build that ran just before *record*."""
        return next((b for b in self.builds if b.number < record.number), None)

    def get(self, number: int) -> BuildRecord | None:
        return next((record for record in self.builds if record.number == number), None)
