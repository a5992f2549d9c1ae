"""Coverage ratio, snapshot and summary models."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any, ClassVar

_ONE_DECIMAL = Decimal("0.1")


def round_half_even(value: float) -> float:
    """Round *value* to one decimal place using banker's rounding.

    The float is converted exactly (``Decimal(value)``) before rounding, so
    ``0.25`` rounds to ``0.2`` while ``0.35`` (stored as 0.34999...) rounds
    to ``0.3``.
    """
    return float(Decimal(value).quantize(_ONE_DECIMAL, rounding=ROUND_HALF_EVEN))


def _format_number(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Ratio:
    """Covered-vs-total units for one coverage metric."""

    numerator: float
    """Covered units (lines, statements, branches, ...)."""

    denominator: float
    """Total units."""

    UNPARSED: ClassVar[Ratio]
    """Sentinel stored when a report line could not be parsed."""

    @property
    def is_unparsed(self) -> bool:
        """Return True if this is the ``-1/-1`` sentinel for unparseable text."""
        return self.numerator == -1 and self.denominator == -1

    @property
    def percentage_float(self) -> float:
        """Return the coverage percentage (0.0 when the denominator is zero)."""
        if self.denominator == 0:
            return 0.0
        return 100.0 * self.numerator / self.denominator

    @property
    def percentage(self) -> int:
        """Return the coverage percentage rounded half-up to an integer."""
        return math.floor(self.percentage_float + 0.5)

    def __str__(self) -> str:
        return f"{_format_number(self.numerator)}/{_format_number(self.denominator)}"

    def to_list(self) -> list[float]:
        return [self.numerator, self.denominator]

    @classmethod
    def from_list(cls, data: list[Any]) -> Ratio:
        return cls(numerator=data[0], denominator=data[1])


Ratio.UNPARSED = Ratio(-1, -1)


@dataclass(frozen=True)
class CoverageSnapshot:
    """Coverage ratios of one build, keyed by metric in declared order.

    A slot holding ``None`` means the reports carried no data for that metric.
    """

    metrics: tuple[str, ...]
    ratios: tuple[Ratio | None, ...]

    def __post_init__(self) -> None:
        if len(self.metrics) != len(self.ratios):
            msg = f"Expected {len(self.metrics)} ratios, got {len(self.ratios)}"
            raise ValueError(msg)

    @classmethod
    def from_ratios(
        cls, metrics: tuple[str, ...] | list[str], ratios: list[Ratio | None]
    ) -> CoverageSnapshot:
        """Build a snapshot, padding missing trailing slots with ``None``."""
        padded = list(ratios[: len(metrics)])
        padded.extend([None] * (len(metrics) - len(padded)))
        return cls(metrics=tuple(metrics), ratios=tuple(padded))

    def get(self, metric: str) -> Ratio | None:
        """Return the ratio for *metric*, or ``None`` when absent or unknown."""
        try:
            return self.ratios[self.metrics.index(metric)]
        except ValueError:
            return None

    def items(self) -> list[tuple[str, Ratio | None]]:
        return list(zip(self.metrics, self.ratios, strict=True))

    @property
    def is_empty(self) -> bool:
        """Return True when no metric carries a ratio."""
        return all(ratio is None for ratio in self.ratios)

    def percentages(self) -> dict[str, float]:
        """Return float percentages per metric, absent metrics as ``0.0``."""
        return {
            metric: ratio.percentage_float if ratio is not None else 0.0
            for metric, ratio in self.items()
        }

    def to_dict(self) -> dict[str, Any]:
        return {
            "metrics": {
                metric: ratio.to_list() if ratio is not None else None
                for metric, ratio in self.items()
            }
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CoverageSnapshot:
        raw = data.get("metrics", {})
        metrics = tuple(raw)
        ratios = tuple(Ratio.from_list(value) if value is not None else None for value in raw.values())
        return cls(metrics=metrics, ratios=ratios)


@dataclass
class CoverageResultSummary:
    """Coverage percentages of one job, or the sum over several jobs.

    An aggregate summary keeps every contributing per-job summary in
    ``coverage_results`` so that ``total()`` can average over them.
    """

    job: str | None = None
    """Name of the job this summary belongs to (last contributor for aggregates)."""

    coverage: dict[str, float] = field(default_factory=dict)
    """Percentage per metric (summed over contributors for aggregates)."""

    coverage_results: list[CoverageResultSummary] = field(default_factory=list)
    """Contributing per-job summaries."""

    def add_coverage_result(self, result: CoverageResultSummary) -> CoverageResultSummary:
        """Add *result*'s percentages to this summary and record it as a contributor."""
        for metric, value in result.coverage.items():
            self.coverage[metric] = self.coverage.get(metric, 0.0) + value
        self.coverage_results.append(result)
        return self

    def has_job(self, job_name: str) -> bool:
        """Return True if a contributor for *job_name* was already added."""
        return any(item.job == job_name for item in self.coverage_results)

    def total(self, metric: str) -> float:
        """Return the average percentage of *metric* across contributors."""
        if not self.coverage_results:
            return 0.0
        return round_half_even(self.coverage.get(metric, 0.0) / len(self.coverage_results))

    def totals(self, metrics: tuple[str, ...] | list[str]) -> dict[str, float]:
        return {metric: self.total(metric) for metric in metrics}
