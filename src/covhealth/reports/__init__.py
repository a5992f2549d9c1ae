"""Report locating, archiving and ratio parsing."""

from covhealth.reports.archiver import archive_reports, archived_name
from covhealth.reports.locator import locate_reports
from covhealth.reports.parser import load_ratios, parse_ratios

__all__ = [
    "archive_reports",
    "archived_name",
    "load_ratios",
    "locate_reports",
    "parse_ratios",
]
