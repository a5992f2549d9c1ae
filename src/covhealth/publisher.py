"""Post-build step: locate, archive and parse coverage reports of a build."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from covhealth.config import resolve_env_vars
from covhealth.models.build import BuildResult

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path

    from covhealth.formats import ReportFormat
    from covhealth.models.build import BuildRecord
    from covhealth.models.health import Thresholds
    from covhealth.models.store import HistoryStore
    from covhealth.rules import Rule

logger = logging.getLogger(__name__)


class CoveragePublisher:
    """Captures coverage reports of a finished build.

    Args:
        fmt: Report format of the job.
        store: Build history the record and archived reports are written to.
        includes: Report path specifier; blank searches for the format's default.
        thresholds: Health thresholds, ``None`` to omit health reports.
        rule: Enforcement rule that marks the build UNSTABLE, if any.
    """

    def __init__(
        self,
        fmt: ReportFormat,
        store: HistoryStore,
        *,
        includes: str = "",
        thresholds: Thresholds | None = None,
        rule: Rule | None = None,
    ) -> None:
        self._format = fmt
        self._store = store
        self._includes = includes
        self._thresholds = thresholds
        self._rule = rule

    def perform(
        self,
        record: BuildRecord,
        workspace: Path,
        env: Mapping[str, str] | None = None,
    ) -> BuildRecord:
        """Run the step for *record* and persist the updated record.

        ``OSError`` from archiving or reading reports propagates.
        """
        label = self._format.name.capitalize()
        record.format_name = self._format.name
        includes = resolve_env_vars(self._includes, env, keep_unresolved=True).strip()

        if includes:
            logger.info("%s: looking for coverage reports in the provided path: %s", label, includes)
        else:
            logger.info(
                "%s: looking for coverage reports in the entire workspace: %s", label, workspace
            )
            includes = self._format.default_includes

        reports = self._format.locate_reports(workspace, includes)
        if not reports:
            if not record.result.is_worse_than(BuildResult.UNSTABLE):
                logger.warning(
                    "%s: no coverage files found in workspace. Was any report generated?", label
                )
                record.set_result(BuildResult.FAILURE)
            self._store.save(record)
            return record

        logger.info(
            "%s: found %d report files: %s",
            label,
            len(reports),
            ", ".join(str(path) for path in reports),
        )

        folder = self._format.archive_reports(
            self._store.build_dir(record.job, record.number), reports
        )
        logger.info("%s: stored %d report files in the build folder: %s", label, len(reports), folder)

        snapshot = self._format.load_snapshot(reports)
        record.snapshot = snapshot
        record.thresholds = self._thresholds

        health = self._format.compute_health(snapshot, self._thresholds)
        if health is not None:
            logger.info("%s: %s", label, health.description)

        if snapshot.is_empty:
            logger.error("%s: could not parse coverage results. Setting build to failure.", label)
            record.set_result(BuildResult.FAILURE)
        elif self._rule is not None and self._rule.enforce(snapshot):
            logger.warning(
                "%s: code coverage enforcement failed (%s). Setting build to unstable.",
                label,
                self._rule.describe(),
            )
            record.rule_failed = True
            record.set_result(BuildResult.UNSTABLE)

        self._store.save(record)
        return record
