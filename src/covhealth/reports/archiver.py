"""Copy located report files into a build's archive folder."""

from __future__ import annotations

import logging
import shutil
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathlib import Path

logger = logging.getLogger(__name__)


def archived_name(index: int) -> str:
    """Return the archive file name for the *index*-th report (0-based)."""
    return f"coverage{index if index > 0 else ''}.xml"


def archive_reports(folder: Path, files: list[Path]) -> list[Path]:
    """Copy *files* into *folder* as ``coverage.xml``, ``coverage1.xml``, ...

    Existing files are overwritten. ``OSError`` from creating the folder or
    copying propagates to the caller.
    """
    folder.mkdir(parents=True, exist_ok=True)
    copied: list[Path] = []
    for index, src in enumerate(files):
        dst = folder / archived_name(index)
        shutil.copyfile(src, dst)
        copied.append(dst)
    logger.debug("Archived %d report files into %s", len(copied), folder)
    return copied
