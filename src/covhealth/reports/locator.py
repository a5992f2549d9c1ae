"""Locate coverage report files inside a build workspace.

The ``includes`` specifier is either

- an Ant-style glob (``coverage/**/index.html``), or
- a list of files and folders separated by any of ``;``, ``:`` or ``,``.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)

_SEPARATOR_RE = re.compile(r"\s*[;:,]+\s*")


def _glob_files(root: Path, pattern: str) -> list[Path]:
    """Return files under *root* matching *pattern*, sorted by path."""
    try:
        return sorted(path for path in root.glob(pattern) if path.is_file())
    except (ValueError, NotImplementedError) as exc:
        logger.debug("Pattern %r is not a usable glob: %s", pattern, exc)
        return []


def locate_reports(workspace: Path, includes: str, secondary_pattern: str) -> list[Path]:
    """Resolve *includes* against *workspace* to a list of report files.

    The whole specifier is first tried as a glob. When that matches nothing,
    it is split on separators and each entry is resolved on its own: a
    directory contributes the files matching *secondary_pattern* below it,
    a file is taken as is, and a missing path is skipped.

    Returns an empty list (never raises) when nothing matches.
    """
    includes = includes.strip()
    if not includes:
        return []

    matches = _glob_files(workspace, includes)
    if matches:
        return matches

    files: list[Path] = []
    for part in _SEPARATOR_RE.split(includes):
        if not part:
            continue
        src = workspace / part
        if src.is_dir():
            files.extend(_glob_files(src, secondary_pattern))
        elif src.is_file():
            files.append(src)
        else:
            logger.debug("Skipping missing report path %s", src)
    return files
