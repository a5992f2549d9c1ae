"""covhealth CLI — top-level command group."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from datetime import UTC, datetime
from pathlib import Path
from typing import TYPE_CHECKING, Any

import click
import yaml
from rich.console import Console
from rich.logging import RichHandler

from covhealth import __version__
from covhealth.config import ConfigError, CovhealthConfig, load_config, validate_config
from covhealth.dashboard import get_result_summary, load_chart_data_within_range
from covhealth.models.build import BuildRecord, BuildResult
from covhealth.models.store import HistoryStore
from covhealth.project import HealthReports, last_result, trend_rows
from covhealth.publisher import CoveragePublisher
from covhealth.reporters.terminal import console, reporter

if TYPE_CHECKING:
    from collections.abc import Callable

    from covhealth.formats import ReportFormat
    from covhealth.models.build import JobHistory

logger = logging.getLogger(__name__)

# Exit codes for `covhealth publish`
EXIT_FAILURE = 1
EXIT_UNSTABLE = 2

_DEFAULT_TREND_LIMIT = 20


def _configure_logging(*, verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
    )


def _path_option(func: Callable[..., Any]) -> Callable[..., Any]:
    return click.option(
        "--path",
        default=".",
        type=click.Path(exists=True, file_okay=False, resolve_path=True),
        help="Project root directory (where .covhealth.yml lives).",
    )(func)


def _load(path: str, format_name: str | None = None) -> tuple[CovhealthConfig, ReportFormat]:
    """Load configuration and resolve the report format, aborting on errors."""
    try:
        config = load_config(path)
        if format_name:
            config.format = format_name
        return config, config.report_format()
    except (ConfigError, ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e


def _load_jobs(store: HistoryStore, names: tuple[str, ...]) -> list[JobHistory]:
    return [store.load_job(name) for name in (names or tuple(store.list_jobs()))]


@click.group()
@click.option("-v", "--verbose", is_flag=True, help="Show debug logging.")
@click.version_option(version=__version__, prog_name="covhealth")
@click.pass_context
def cli(ctx: click.Context, *, verbose: bool) -> None:
    """covhealth — archive coverage reports and track coverage health of builds."""
    ctx.ensure_object(dict)
    ctx.obj["verbose"] = verbose
    _configure_logging(verbose=verbose)


# ── publish ──────────────────────────────────────────────────────


@cli.command()
@_path_option
@click.option(
    "--workspace",
    default=".",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    help="Build workspace the reports are searched in.",
)
@click.option("--job", required=True, help="Job name.")
@click.option("--number", type=int, default=None, help="Build number (default: next number).")
@click.option("--format", "format_name", default=None, help="Report format (karma, codecover).")
@click.option("--includes", default=None, help="Report path specifier (overrides config).")
@click.option(
    "--result",
    type=click.Choice([result.value for result in BuildResult]),
    default=BuildResult.SUCCESS.value,
    help="Result of the build before coverage is published.",
)
@click.option("--json-output", "as_json", is_flag=True, help="Print the build record as JSON.")
@click.pass_context
def publish(ctx: click.Context, **kwargs: Any) -> None:
    """Capture coverage reports of a finished build.

    Exits with 1 when the build ends as FAILURE and 2 when UNSTABLE.

    Example:
      covhealth publish --job web --workspace ./build --includes "coverage"
    """
    config, fmt = _load(kwargs["path"], kwargs["format_name"])
    if kwargs["includes"] is not None:
        config.includes = kwargs["includes"]

    try:
        rule = config.build_rule()
    except ConfigError as e:
        reporter.print_error(f"Invalid rule configuration: {e}")
        raise click.Abort from e

    store = HistoryStore(config.history_path)
    job: str = kwargs["job"]
    number: int = (
        kwargs["number"] if kwargs["number"] is not None else store.next_build_number(job)
    )
    record = BuildRecord(
        job=job,
        number=number,
        timestamp=datetime.now(UTC),
        result=BuildResult(kwargs["result"]),
    )

    publisher = CoveragePublisher(
        fmt,
        store,
        includes=config.includes,
        thresholds=config.resolve_thresholds(fmt),
        rule=rule,
    )
    try:
        record = publisher.perform(record, Path(kwargs["workspace"]))
    except OSError as e:
        reporter.print_error(f"Failed to publish coverage reports: {e}")
        raise click.Abort from e

    if kwargs["as_json"]:
        click.echo(json.dumps(record.to_dict(), indent=2))
    else:
        reporter.print_build(record)
        if record.snapshot is not None:
            reporter.print_health(fmt.compute_health(record.snapshot, record.thresholds))

    if record.result.is_worse_than(BuildResult.UNSTABLE):
        ctx.exit(EXIT_FAILURE)
    if record.result == BuildResult.UNSTABLE:
        ctx.exit(EXIT_UNSTABLE)


# ── health / trend ───────────────────────────────────────────────


@cli.command()
@_path_option
@click.option("--job", required=True, help="Job name.")
@click.option("--number", type=int, default=None, help="Build number (default: last result).")
def health(path: str, job: str, number: int | None) -> None:
    """Show the coverage and health report of a build."""
    config, _fmt = _load(path)
    history = HistoryStore(config.history_path).load_job(job)

    record = history.get(number) if number is not None else last_result(history)
    if record is None:
        reporter.print_error(f"No coverage results found for {job}")
        raise click.Abort

    reporter.print_build(record)
    reporter.print_health(HealthReports(config.cache_size).get(record))


@cli.command()
@_path_option
@click.option("--job", required=True, help="Job name.")
@click.option("--limit", type=int, default=_DEFAULT_TREND_LIMIT, show_default=True)
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of a table.")
def trend(path: str, job: str, limit: int, *, as_json: bool) -> None:
    """Show coverage of a job's recent builds, oldest first."""
    config, fmt = _load(path)
    history = HistoryStore(config.history_path).load_job(job)
    rows = trend_rows(history, limit)

    if as_json:
        click.echo(
            json.dumps(
                [{**asdict(row), "result": row.result.value} for row in rows],
                indent=2,
            )
        )
        return
    if not rows:
        reporter.print_warning(f"No coverage results found for {job}")
        return
    reporter.print_trend(job, rows, fmt.metrics)


# ── dashboard ────────────────────────────────────────────────────


@cli.command()
@_path_option
@click.option("--job", "jobs", multiple=True, help="Job to include (default: all jobs).")
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of a table.")
def grid(path: str, jobs: tuple[str, ...], *, as_json: bool) -> None:
    """Summarise the last successful build of each job."""
    config, fmt = _load(path)
    histories = _load_jobs(HistoryStore(config.history_path), jobs)
    summary = get_result_summary(histories, fmt.metrics)

    if as_json:
        payload = {
            "jobs": [{"job": item.job, **item.coverage} for item in summary.coverage_results],
            "average": summary.totals(fmt.metrics),
        }
        click.echo(json.dumps(payload, indent=2))
        return
    reporter.print_grid(summary, fmt.metrics)


@cli.command()
@_path_option
@click.option("--job", "jobs", multiple=True, help="Job to include (default: all jobs).")
@click.option("--days", type=int, default=None, help="Days before the newest build to cover.")
@click.option("--json-output", "as_json", is_flag=True, help="Output raw JSON instead of a table.")
def chart(path: str, jobs: tuple[str, ...], days: int | None, *, as_json: bool) -> None:
    """Show average coverage across jobs per build date."""
    config, fmt = _load(path)
    histories = _load_jobs(HistoryStore(config.history_path), jobs)
    buckets = load_chart_data_within_range(
        histories, config.chart_days if days is None else days, fmt.metrics
    )

    if buckets is None:
        reporter.print_warning("No builds found.")
        return
    if as_json:
        payload = {
            day.isoformat(): {"jobs": len(bucket.coverage_results), **bucket.totals(fmt.metrics)}
            for day, bucket in buckets.items()
        }
        click.echo(json.dumps(payload, indent=2))
        return
    reporter.print_chart(buckets, fmt.metrics)


# ── config ───────────────────────────────────────────────────────


@cli.group("config")
def config_group() -> None:
    """Inspect `.covhealth.yml` configuration."""


@config_group.command("show")
@_path_option
@click.option("--json-output", "as_json", is_flag=True, help="Output as JSON instead of YAML.")
def config_show(path: str, *, as_json: bool) -> None:
    """Display the resolved configuration."""
    try:
        config = load_config(path)
    except (ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    config_dict = asdict(config)
    config_dict.pop("raw", None)

    if as_json:
        click.echo(json.dumps(config_dict, indent=2))
    else:
        console.print()
        console.print("[bold cyan]Configuration:[/bold cyan]")
        console.print()
        click.echo(yaml.safe_dump(config_dict, sort_keys=False, default_flow_style=False))


@config_group.command("validate")
@_path_option
def config_validate(path: str) -> None:
    """Validate `.covhealth.yml`.

    Example:
      covhealth config validate
    """
    try:
        config = load_config(path)
    except (ValueError, yaml.YAMLError) as e:
        reporter.print_error(f"Failed to load configuration: {e}")
        raise click.Abort from e

    errors = validate_config(config)

    if not errors:
        reporter.print_success("Configuration is valid!")
        return

    reporter.print_error(f"Found {len(errors)} configuration error(s):")
    console.print()
    for idx, error in enumerate(errors, start=1):
        console.print(f"  {idx}. [red]{error}[/red]")
    console.print()
    raise click.Abort


def main() -> None:
    cli()
