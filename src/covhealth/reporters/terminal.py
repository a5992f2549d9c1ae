"""Terminal reporter with rich output formatting."""

from __future__ import annotations

from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from covhealth.health import metric_label

if TYPE_CHECKING:
    from datetime import date

    from covhealth.models.build import BuildRecord
    from covhealth.models.coverage import CoverageResultSummary
    from covhealth.models.health import HealthReport
    from covhealth.project import TrendRow

console = Console()

_HIGH_COVERAGE = 80.0
_MEDIUM_COVERAGE = 50.0

_RESULT_COLORS = {
    "SUCCESS": "green",
    "UNSTABLE": "yellow",
    "FAILURE": "red",
}


def _coverage_color(percentage: float) -> str:
    """Return a Rich color name for a coverage percentage."""
    if percentage >= _HIGH_COVERAGE:
        return "green"
    if percentage >= _MEDIUM_COVERAGE:
        return "yellow"
    return "red"


def _colored_pct(percentage: float) -> str:
    color = _coverage_color(percentage)
    return f"[{color}]{percentage:.1f}%[/{color}]"


class CLIReporter:
    """Rich terminal output for build records, trends and dashboards."""

    def __init__(self) -> None:
        self.console = console

    def print_success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {message}")

    def print_error(self, message: str) -> None:
        self.console.print(f"[red]✗[/red] {message}")

    def print_warning(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {message}")

    def print_info(self, message: str) -> None:
        self.console.print(f"[dim]{message}[/dim]")

    def print_build(self, record: BuildRecord) -> None:
        """Print the coverage ratios recorded for one build."""
        color = _RESULT_COLORS.get(record.result.value, "dim")
        table = Table(
            title=f"{record.job} #{record.number} [{color}]{record.result.value}[/{color}]",
            title_style="bold cyan",
        )
        table.add_column("Metric", style="bold")
        table.add_column("Ratio", justify="right")
        table.add_column("Coverage", justify="right")

        if record.snapshot is not None:
            for metric, ratio in record.snapshot.items():
                if ratio is None:
                    table.add_row(metric_label(metric), "-", "[dim]no data[/dim]")
                elif ratio.is_unparsed:
                    table.add_row(metric_label(metric), str(ratio), "[red]unparsed[/red]")
                else:
                    table.add_row(
                        metric_label(metric), str(ratio), _colored_pct(ratio.percentage_float)
                    )

        self.console.print(table)

    def print_health(self, report: HealthReport | None) -> None:
        """Print a health score line and its messages."""
        if report is None:
            self.print_info("Health reporting is disabled for this build.")
            return
        color = _coverage_color(float(report.score))
        self.console.print(f"Health: [bold {color}]{report.score}%[/bold {color}]")
        for message in report.messages:
            self.console.print(f"  • {message}")

    def print_trend(self, job: str, rows: list[TrendRow], metrics: tuple[str, ...]) -> None:
        """Print per-build coverage of one job, oldest first."""
        table = Table(title=f"Coverage Trend: {job}", title_style="bold cyan")
        table.add_column("Build", style="bold", justify="right")
        table.add_column("Result", justify="center")
        for metric in metrics:
            table.add_column(metric_label(metric), justify="right")

        for row in rows:
            color = _RESULT_COLORS.get(row.result.value, "dim")
            table.add_row(
                f"#{row.number}",
                f"[{color}]{row.result.value}[/{color}]",
                *(_colored_pct(row.percentages.get(metric, 0.0)) for metric in metrics),
            )

        self.console.print(table)

    def print_grid(self, summary: CoverageResultSummary, metrics: tuple[str, ...]) -> None:
        """Print the dashboard grid: one row per job plus the average."""
        table = Table(title="Coverage Summary", title_style="bold cyan")
        table.add_column("Job", style="bold")
        for metric in metrics:
            table.add_column(metric_label(metric), justify="right")

        for item in summary.coverage_results:
            table.add_row(
                item.job or "-",
                *(_colored_pct(item.coverage.get(metric, 0.0)) for metric in metrics),
            )

        table.add_section()
        table.add_row(
            "[bold]Average[/bold]",
            *(_colored_pct(summary.total(metric)) for metric in metrics),
        )
        self.console.print(table)

    def print_chart(
        self, buckets: dict[date, CoverageResultSummary], metrics: tuple[str, ...]
    ) -> None:
        """Print date-bucketed average coverage across jobs."""
        table = Table(title="Coverage by Date", title_style="bold cyan")
        table.add_column("Date", style="bold")
        table.add_column("Jobs", justify="right")
        for metric in metrics:
            table.add_column(metric_label(metric), justify="right")

        for day, bucket in buckets.items():
            table.add_row(
                day.isoformat(),
                str(len(bucket.coverage_results)),
                *(_colored_pct(bucket.total(metric)) for metric in metrics),
            )

        self.console.print(table)


# Singleton instance for easy import
reporter = CLIReporter()
