"""Configuration parsing from ``.covhealth.yml``."""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml

from covhealth.formats import default_registry
from covhealth.models.health import MetricThreshold, Thresholds
from covhealth.rules import rule_from_dict, rules_from_config

if TYPE_CHECKING:
    from collections.abc import Mapping

    from covhealth.formats import FormatRegistry, ReportFormat
    from covhealth.rules import Rule

logger = logging.getLogger(__name__)

CONFIG_FILENAME = ".covhealth.yml"

_ENV_VAR_RE = re.compile(r"\$\{(\w+)\}|\$(\w+)")

_MAX_PERCENTAGE = 100


class ConfigError(ValueError):
    """Raised when configuration cannot be applied."""


def resolve_env_vars(
    value: str, env: Mapping[str, str] | None = None, *, keep_unresolved: bool = False
) -> str:
    """Replace ``${VAR}`` and ``$VAR`` placeholders with values from *env*.

    *env* defaults to the process environment. An unset variable becomes an
    empty string, or is left as written when *keep_unresolved* is set.
    """
    environ = os.environ if env is None else env

    def _replace(match: re.Match[str]) -> str:
        var = match.group(1) or match.group(2)
        resolved = environ.get(var)
        if resolved is None:
            logger.warning("Environment variable %s is not set (referenced in config)", var)
            return match.group(0) if keep_unresolved else ""
        return resolved

    return _ENV_VAR_RE.sub(_replace, value)


def _resolve_dict(data: dict[str, Any]) -> dict[str, Any]:
    """Recursively resolve environment variables in a dictionary."""
    result: dict[str, Any] = {}
    for key, value in data.items():
        if isinstance(value, str):
            result[key] = resolve_env_vars(value)
        elif isinstance(value, dict):
            result[key] = _resolve_dict(value)
        elif isinstance(value, list):
            result[key] = [
                _resolve_dict(item)
                if isinstance(item, dict)
                else resolve_env_vars(item)
                if isinstance(item, str)
                else item
                for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass
class CovhealthConfig:
    """Resolved job configuration."""

    root: str
    """Project root directory."""

    format: str = "karma"
    """Report format name (karma, codecover)."""

    includes: str = ""
    """Report path specifier; blank uses the format's default."""

    history_dir: str = ".covhealth/builds"
    """Build history directory, relative to ``root`` unless absolute."""

    health_enabled: bool = True
    """False omits health reports entirely."""

    thresholds: dict[str, MetricThreshold] = field(default_factory=dict)
    """Configured thresholds; metrics left out use the format's defaults."""

    rules: list[dict[str, Any]] = field(default_factory=list)
    """Raw enforcement rule definitions."""

    chart_days: int = 30
    """Days covered by the cross-job chart."""

    cache_size: int = 64
    """Health reports memoised per process."""

    raw: dict[str, Any] = field(default_factory=dict)
    """Raw parsed YAML data."""

    @property
    def history_path(self) -> Path:
        path = Path(self.history_dir)
        return path if path.is_absolute() else Path(self.root) / path

    def report_format(self, registry: FormatRegistry | None = None) -> ReportFormat:
        """Return the handler for the configured format.

        Raises:
            ConfigError: If the format is not registered.
        """
        registry = registry or default_registry()
        if self.format not in registry:
            msg = f"Unknown report format: {self.format!r} (available: {', '.join(registry.names)})"
            raise ConfigError(msg)
        return registry.get(self.format)

    def resolve_thresholds(self, fmt: ReportFormat) -> Thresholds | None:
        """Merge configured thresholds over *fmt*'s defaults.

        Returns ``None`` when health reporting is disabled.
        """
        if not self.health_enabled:
            return None
        thresholds = fmt.default_thresholds()
        for metric, threshold in self.thresholds.items():
            thresholds.metrics[metric] = MetricThreshold(threshold.minimum, threshold.maximum)
        thresholds.ensure_valid()
        return thresholds

    def build_rule(self) -> Rule | None:
        try:
            return rules_from_config(self.rules)
        except ValueError as exc:
            raise ConfigError(str(exc)) from exc


def _parse_thresholds(raw: dict[str, Any]) -> dict[str, MetricThreshold]:
    """Parse the ``thresholds`` section (``metric: {min, max}``)."""
    thresholds_raw = raw.get("thresholds", {})
    if not isinstance(thresholds_raw, dict):
        thresholds_raw = {}

    result: dict[str, MetricThreshold] = {}
    for metric, value in thresholds_raw.items():
        if not isinstance(value, dict):
            logger.warning("Ignoring threshold for %s: expected a mapping", metric)
            continue
        result[str(metric)] = MetricThreshold.from_dict(value)
    return result


def _parse_rules(raw: dict[str, Any]) -> list[dict[str, Any]]:
    rules_raw = raw.get("rules", [])
    if not isinstance(rules_raw, list):
        return []
    return [item for item in rules_raw if isinstance(item, dict)]


def load_config(root: str | Path) -> CovhealthConfig:
    """Load and parse ``.covhealth.yml``.

    Falls back to defaults when the YAML file is missing or incomplete.
    """
    root_path = Path(root).resolve()
    config_file = root_path / CONFIG_FILENAME

    raw: dict[str, Any] = {}
    includes = ""
    if config_file.is_file():
        parsed = yaml.safe_load(config_file.read_text(encoding="utf-8"))
        if isinstance(parsed, dict):
            # includes is expanded per build by the publisher
            includes = str(parsed.get("includes", "") or "")
            raw = _resolve_dict({k: v for k, v in parsed.items() if k != "includes"})
            raw["includes"] = includes

    return CovhealthConfig(
        root=str(raw.get("root", root_path)),
        format=str(raw.get("format", os.environ.get("COVHEALTH_FORMAT", "karma"))),
        includes=includes,
        history_dir=str(raw.get("history_dir", ".covhealth/builds")),
        health_enabled=bool(raw.get("health", True)),
        thresholds=_parse_thresholds(raw),
        rules=_parse_rules(raw),
        chart_days=int(raw.get("chart_days", 30)),
        cache_size=int(raw.get("cache_size", 64)),
        raw=raw,
    )


def _validate_thresholds(config: CovhealthConfig, fmt: ReportFormat | None) -> list[str]:
    errors: list[str] = []
    for metric, threshold in config.thresholds.items():
        if fmt is not None and metric not in fmt.metrics:
            errors.append(
                f"thresholds.{metric} is not a {fmt.name} metric "
                f"(expected one of: {', '.join(fmt.metrics)})"
            )
        for name, value in (("min", threshold.minimum), ("max", threshold.maximum)):
            if not 0 <= value <= _MAX_PERCENTAGE:
                errors.append(
                    f"thresholds.{metric}.{name} must be between 0 and 100 (got: {value})"
                )
        if threshold.minimum > threshold.maximum:
            errors.append(
                f"thresholds.{metric}.min must not exceed max "
                f"(got: {threshold.minimum} > {threshold.maximum})"
            )
    return errors


def _validate_rules(config: CovhealthConfig, fmt: ReportFormat | None) -> list[str]:
    errors: list[str] = []
    for index, item in enumerate(config.rules):
        try:
            rule = rule_from_dict(item)
        except (TypeError, ValueError) as exc:
            errors.append(f"rules[{index}]: {exc}")
            continue
        metric = getattr(rule, "metric", None)
        if fmt is not None and metric is not None and metric not in fmt.metrics:
            errors.append(f"rules[{index}].metric {metric!r} is not a {fmt.name} metric")
    return errors


def validate_config(config: CovhealthConfig, registry: FormatRegistry | None = None) -> list[str]:
    """Validate the configuration and return a list of error messages.

    Returns an empty list if the configuration is valid.
    """
    registry = registry or default_registry()
    errors: list[str] = []

    fmt: ReportFormat | None = None
    if config.format in registry:
        fmt = registry.get(config.format)
    else:
        errors.append(
            f"format must be one of {', '.join(registry.names)} (got: {config.format!r})"
        )

    errors.extend(_validate_thresholds(config, fmt))
    errors.extend(_validate_rules(config, fmt))

    if config.chart_days < 0:
        errors.append(f"chart_days must be non-negative (got: {config.chart_days})")

    if config.cache_size < 1:
        errors.append(f"cache_size must be at least 1 (got: {config.cache_size})")

    return errors
