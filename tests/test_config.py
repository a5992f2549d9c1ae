"""Tests for config.py — .covhealth.yml parsing and validation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import pytest
import yaml

from covhealth.config import (
    ConfigError,
    CovhealthConfig,
    _resolve_dict,
    load_config,
    resolve_env_vars,
    validate_config,
)
from covhealth.formats import CodeCoverFormat, KarmaFormat
from covhealth.models.health import MetricThreshold
from covhealth.rules import AllRules, MinimumCoverageRule

if TYPE_CHECKING:
    from pathlib import Path


def _write_config(root: Path, data: dict[str, Any]) -> None:
    """Write .covhealth.yml with given data."""
    (root / ".covhealth.yml").write_text(yaml.dump(data), encoding="utf-8")


# ── resolve_env_vars / _resolve_dict ─────────────────────────────


class TestResolveEnvVars:
    def test_resolves_braced_var(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("MY_VAR", "hello")
        assert resolve_env_vars("${MY_VAR}/coverage") == "hello/coverage"

    def test_resolves_bare_var(self) -> None:
        assert resolve_env_vars("$WORKSPACE/out", {"WORKSPACE": "ws"}) == "ws/out"

    def test_missing_var_returns_empty(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("MISSING_VAR", raising=False)
        assert resolve_env_vars("${MISSING_VAR}") == ""

    def test_keep_unresolved(self) -> None:
        assert resolve_env_vars("${MISSING}/out", {}, keep_unresolved=True) == "${MISSING}/out"
        assert resolve_env_vars("$MISSING/out", {}, keep_unresolved=True) == "$MISSING/out"

    def test_no_vars_unchanged(self) -> None:
        assert resolve_env_vars("plain text", {}) == "plain text"

    def test_resolve_dict_recurses(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DIR", "reports")
        data = {"includes": "${DIR}", "nested": {"a": "$DIR"}, "list": ["$DIR", 3]}
        assert _resolve_dict(data) == {
            "includes": "reports",
            "nested": {"a": "reports"},
            "list": ["reports", 3],
        }


# ── load_config ──────────────────────────────────────────────────


class TestLoadConfig:
    def test_defaults_without_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.delenv("COVHEALTH_FORMAT", raising=False)
        config = load_config(tmp_path)

        assert config.format == "karma"
        assert config.includes == ""
        assert config.health_enabled
        assert config.chart_days == 30
        assert config.history_path == tmp_path.resolve() / ".covhealth" / "builds"

    def test_format_from_environment(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("COVHEALTH_FORMAT", "codecover")
        assert load_config(tmp_path).format == "codecover"

    def test_parses_sections(self, tmp_path: Path) -> None:
        _write_config(
            tmp_path,
            {
                "format": "codecover",
                "includes": "reports",
                "history_dir": "/var/covhealth",
                "health": False,
                "thresholds": {"loop": {"min": 10, "max": 60}, "bogus": 3},
                "rules": [{"type": "minimum", "metric": "statement", "minimum": 75}, "junk"],
                "chart_days": 14,
                "cache_size": 8,
            },
        )

        config = load_config(tmp_path)

        assert config.format == "codecover"
        assert config.includes == "reports"
        assert str(config.history_path) == "/var/covhealth"
        assert not config.health_enabled
        assert config.thresholds == {"loop": MetricThreshold(10, 60)}
        assert config.rules == [{"type": "minimum", "metric": "statement", "minimum": 75}]
        assert config.chart_days == 14
        assert config.cache_size == 8

    def test_includes_left_for_the_publisher_to_expand(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.delenv("REPORT_DIR", raising=False)
        monkeypatch.setenv("HISTORY", "/var/covhealth")
        _write_config(tmp_path, {"includes": "${REPORT_DIR}/coverage", "history_dir": "$HISTORY"})

        config = load_config(tmp_path)

        assert config.includes == "${REPORT_DIR}/coverage"
        assert config.history_dir == "/var/covhealth"

    def test_non_mapping_yaml_uses_defaults(self, tmp_path: Path) -> None:
        (tmp_path / ".covhealth.yml").write_text("- just\n- a list\n", encoding="utf-8")
        assert load_config(tmp_path).includes == ""


# ── CovhealthConfig helpers ──────────────────────────────────────


class TestCovhealthConfig:
    def test_report_format(self, tmp_path: Path) -> None:
        config = CovhealthConfig(root=str(tmp_path), format="codecover")
        assert isinstance(config.report_format(), CodeCoverFormat)

    def test_unknown_format_raises(self, tmp_path: Path) -> None:
        config = CovhealthConfig(root=str(tmp_path), format="lcov")
        with pytest.raises(ConfigError, match="Unknown report format"):
            config.report_format()

    def test_thresholds_merge_over_defaults(self, tmp_path: Path) -> None:
        config = CovhealthConfig(
            root=str(tmp_path), thresholds={"line": MetricThreshold(40, 120)}
        )

        thresholds = config.resolve_thresholds(KarmaFormat())

        assert thresholds is not None
        assert thresholds.get("line") == MetricThreshold(40, 100)
        assert thresholds.get("statement") == MetricThreshold(0, 80)
        assert thresholds.get("branch") == MetricThreshold(0, 50)

    def test_resolving_does_not_mutate_config(self, tmp_path: Path) -> None:
        config = CovhealthConfig(
            root=str(tmp_path), thresholds={"line": MetricThreshold(40, 120)}
        )
        config.resolve_thresholds(KarmaFormat())
        assert config.thresholds["line"] == MetricThreshold(40, 120)

    def test_health_disabled(self, tmp_path: Path) -> None:
        config = CovhealthConfig(root=str(tmp_path), health_enabled=False)
        assert config.resolve_thresholds(KarmaFormat()) is None

    def test_build_rule(self, tmp_path: Path) -> None:
        assert CovhealthConfig(root=str(tmp_path)).build_rule() is None

        single = CovhealthConfig(root=str(tmp_path), rules=[{"metric": "line", "minimum": 80}])
        assert single.build_rule() == MinimumCoverageRule("line", 80.0)

        multiple = CovhealthConfig(
            root=str(tmp_path), rules=[{"metric": "line"}, {"metric": "branch", "minimum": 5}]
        )
        assert isinstance(multiple.build_rule(), AllRules)

    def test_invalid_rule_raises_config_error(self, tmp_path: Path) -> None:
        config = CovhealthConfig(root=str(tmp_path), rules=[{"type": "maximum"}])
        with pytest.raises(ConfigError, match="Unknown rule type"):
            config.build_rule()


# ── validate_config ──────────────────────────────────────────────


class TestValidateConfig:
    def test_valid_defaults(self, tmp_path: Path) -> None:
        assert validate_config(CovhealthConfig(root=str(tmp_path))) == []

    def test_unknown_format(self, tmp_path: Path) -> None:
        errors = validate_config(CovhealthConfig(root=str(tmp_path), format="lcov"))
        assert len(errors) == 1
        assert "format must be one of codecover, karma" in errors[0]

    def test_threshold_for_other_format_metric(self, tmp_path: Path) -> None:
        config = CovhealthConfig(root=str(tmp_path), thresholds={"loop": MetricThreshold(0, 50)})
        errors = validate_config(config)
        assert any("thresholds.loop is not a karma metric" in e for e in errors)

    def test_threshold_ranges(self, tmp_path: Path) -> None:
        config = CovhealthConfig(
            root=str(tmp_path), thresholds={"line": MetricThreshold(95, 150)}
        )
        errors = validate_config(config)
        assert any("thresholds.line.max must be between 0 and 100" in e for e in errors)

        config.thresholds["line"] = MetricThreshold(90, 80)
        errors = validate_config(config)
        assert errors == ["thresholds.line.min must not exceed max (got: 90 > 80)"]

    def test_rules(self, tmp_path: Path) -> None:
        config = CovhealthConfig(
            root=str(tmp_path),
            rules=[{"type": "minimum"}, {"metric": "loop", "minimum": 10}],
        )
        errors = validate_config(config)
        assert errors == [
            "rules[0]: minimum rule requires a 'metric'",
            "rules[1].metric 'loop' is not a karma metric",
        ]

    def test_numeric_settings(self, tmp_path: Path) -> None:
        config = CovhealthConfig(root=str(tmp_path), chart_days=-1, cache_size=0)
        errors = validate_config(config)
        assert "chart_days must be non-negative (got: -1)" in errors
        assert "cache_size must be at least 1 (got: 0)" in errors
