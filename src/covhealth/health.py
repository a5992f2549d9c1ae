"""Health scoring of a coverage snapshot against per-metric thresholds.

The score is a worst-metric aggregate, not an average: every metric proposes
a candidate score and the overall score is the lowest candidate. A single
metric at or below its minimum therefore drives the whole build to 0.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covhealth.models.health import HealthReport

if TYPE_CHECKING:
    from covhealth.models.coverage import CoverageSnapshot
    from covhealth.models.health import Thresholds

logger = logging.getLogger(__name__)

PERFECT_SCORE = 100
PERFECT_MESSAGE = "All coverage targets have been met."

METRIC_LABELS = {
    "line": "Lines",
    "statement": "Statements",
    "function": "Functions",
    "branch": "Branches",
    "loop": "Loops",
    "condition": "Conditions",
}


def metric_label(metric: str) -> str:
    """Return the display label of *metric* (``line`` -> ``Lines``)."""
    return METRIC_LABELS.get(metric, metric.capitalize())


def update_health_score(score: int, minimum: int, value: int, maximum: int) -> int:
    """Return the lower of *score* and the candidate score of one metric."""
    if value >= maximum:
        return score
    if value <= minimum:
        return 0
    scaled = int(100.0 * (value - minimum) / (maximum - minimum))
    return min(scaled, score)


def compute_health(
    snapshot: CoverageSnapshot | None, thresholds: Thresholds | None
) -> HealthReport | None:
    """Score *snapshot* against *thresholds*.

    Returns ``None`` when no thresholds are configured: health reporting is
    then disabled for the build, which is different from a score of 0.
    """
    if thresholds is None:
        return None
    thresholds.ensure_valid()

    score = PERFECT_SCORE
    messages: list[str] = []
    for metric, ratio in snapshot.items() if snapshot is not None else []:
        threshold = thresholds.get(metric)
        if ratio is None or threshold.maximum <= 0:
            continue
        if ratio.is_unparsed:
            logger.warning("%s ratio could not be parsed; scoring it as %s", metric, ratio)
        percent = ratio.percentage
        if percent < threshold.maximum:
            messages.append(f"{metric_label(metric)} {ratio} ({percent}%).")
        score = update_health_score(score, threshold.minimum, percent, threshold.maximum)

    if score == PERFECT_SCORE:
        messages.append(PERFECT_MESSAGE)
    return HealthReport(score=score, messages=messages)
