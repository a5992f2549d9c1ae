"""Build history persistence: one ``build.json`` per job build directory."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from covhealth.models.build import BuildRecord, JobHistory

logger = logging.getLogger(__name__)

_RECORD_FILENAME = "build.json"


class HistoryStore:
    """Read and write build records under ``<root>/<job>/<number>/``."""

    def __init__(self, root: str | Path) -> None:
        self._root = Path(root)

    @property
    def root(self) -> Path:
        return self._root

    def build_dir(self, job: str, number: int) -> Path:
        """Return the directory that holds archived reports of a build."""
        return self._root / job / str(number)

    def record_path(self, job: str, number: int) -> Path:
        return self.build_dir(job, number) / _RECORD_FILENAME

    def save(self, record: BuildRecord) -> Path:
        """Serialise *record* to its ``build.json``.

        Creates the build directory if it does not exist.
        Returns the path to the written file.
        """
        out = self.record_path(record.job, record.number)
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(json.dumps(record.to_dict(), indent=2) + "\n", encoding="utf-8")
        logger.info("Build record saved to %s", out)
        return out

    def load_build(self, job: str, number: int) -> BuildRecord | None:
        """Load one build record.

        Returns ``None`` when the file is missing or invalid.
        """
        return self._read(self.record_path(job, number))

    def load_job(self, job: str) -> JobHistory:
        """Load every readable build of *job*, newest first."""
        job_dir = self._root / job
        builds: list[BuildRecord] = []
        if job_dir.is_dir():
            for path in job_dir.glob(f"*/{_RECORD_FILENAME}"):
                record = self._read(path)
                if record is not None:
                    builds.append(record)
        return JobHistory(name=job, builds=builds)

    def list_jobs(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(path.name for path in self._root.iterdir() if path.is_dir())

    def next_build_number(self, job: str) -> int:
        last = self.load_job(job).last_build
        return last.number + 1 if last else 1

    @staticmethod
    def _read(path: Path) -> BuildRecord | None:
        if not path.is_file():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            if not isinstance(data, dict):
                return None
            return BuildRecord.from_dict(data)
        except (OSError, json.JSONDecodeError, KeyError, ValueError) as exc:
            logger.warning("Failed to read build record %s: %s", path, exc)
            return None
