"""Health thresholds and health report models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

_MAX_PERCENT = 100


def _apply_range(minimum: int, value: int, maximum: int) -> int:
    if value < minimum:
        return minimum
    if value > maximum:
        return maximum
    return value


@dataclass
class MetricThreshold:
    """Health scoring window for one metric.

    Coverage at or above ``maximum`` does not lower the score; coverage at
    or below ``minimum`` drives it to zero. ``maximum == 0`` disables the metric.
    """

    minimum: int = 0
    maximum: int = 0

    def ensure_valid(self) -> None:
        """Clamp into ``0 <= minimum <= maximum <= 100``."""
        self.maximum = _apply_range(0, self.maximum, _MAX_PERCENT)
        self.minimum = _apply_range(0, self.minimum, self.maximum)

    def to_dict(self) -> dict[str, int]:
        return {"min": self.minimum, "max": self.maximum}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> MetricThreshold:
        return cls(minimum=int(data.get("min", 0)), maximum=int(data.get("max", 0)))


@dataclass
class Thresholds:
    """Per-metric health thresholds for one job."""

    metrics: dict[str, MetricThreshold] = field(default_factory=dict)

    def ensure_valid(self) -> None:
        for threshold in self.metrics.values():
            threshold.ensure_valid()

    def get(self, metric: str) -> MetricThreshold:
        """Return the threshold for *metric* (a disabled one when unset)."""
        return self.metrics.get(metric, MetricThreshold())

    def to_dict(self) -> dict[str, dict[str, int]]:
        return {metric: threshold.to_dict() for metric, threshold in self.metrics.items()}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Thresholds:
        return cls(
            metrics={
                str(metric): MetricThreshold.from_dict(value)
                for metric, value in data.items()
                if isinstance(value, dict)
            }
        )


@dataclass
class HealthReport:
    """Health score of a build plus the messages explaining it."""

    score: int
    """Score in [0, 100]."""

    messages: list[str] = field(default_factory=list)
    """Deficiency messages in metric order, or the single "perfect" message."""

    @property
    def description(self) -> str:
        return "Coverage: " + " ".join(self.messages)
