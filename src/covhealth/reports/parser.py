"""Extract coverage ratios from rendered HTML coverage reports.

Karma and CodeCover summary pages render each metric as a line such as::

    <span class="strong">85.71% </span><small>(12 / 14)</small>

The n-th ``<small>`` line found is the n-th metric of the report format, so
the order in which lines occur is the only thing mapping ratios to metrics.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from covhealth.models.coverage import Ratio

if TYPE_CHECKING:
    from collections.abc import Iterable
    from pathlib import Path

logger = logging.getLogger(__name__)

_MARKER = "<small>"
_RATIO_RE = re.compile(r"\d+ / \d+", re.ASCII)


def extract_ratio(line: str) -> Ratio:
    """Parse the ``N / M`` text between the first parentheses of *line*.

    Returns ``Ratio.UNPARSED`` when the text does not have that shape.
    """
    line = line.strip()
    start = line.find("(")
    end = line.find(")")
    text = line[start + 1 : end] if 0 <= start < end else ""
    if not _RATIO_RE.fullmatch(text):
        logger.warning("Unparseable coverage ratio in report line: %s", line)
        return Ratio.UNPARSED
    numerator, denominator = text.split(" / ")
    return Ratio(int(numerator), int(denominator))


def _fill(lines: Iterable[str], ratios: list[Ratio | None]) -> None:
    for line in lines:
        if None not in ratios:
            return
        if _MARKER not in line:
            continue
        ratios[ratios.index(None)] = extract_ratio(line)


def parse_ratios(
    streams: Iterable[Iterable[str]],
    metric_count: int,
    ratios: list[Ratio | None] | None = None,
) -> list[Ratio | None]:
    """Fill *metric_count* ratio slots from the ``<small>`` lines of *streams*.

    Streams are scanned in order and share one slot array, so the first
    *metric_count* matches across all streams win. Slots left unfilled stay
    ``None``.
    """
    if ratios is None or len(ratios) < metric_count:
        ratios = [None] * metric_count
    for stream in streams:
        _fill(stream, ratios)
    return ratios


def load_ratios(files: Iterable[Path], metric_count: int) -> list[Ratio | None]:
    """Read report *files* in order and parse their ratios.

    ``OSError`` while reading propagates to the caller.
    """
    ratios: list[Ratio | None] = [None] * metric_count
    for path in files:
        with path.open(encoding="utf-8", errors="replace") as stream:
            parse_ratios([stream], metric_count, ratios)
    return ratios
