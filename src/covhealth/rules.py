"""Enforcement rules that mark a build's coverage as failing.

A failing rule makes the publisher mark the build UNSTABLE. Rules are
stored with the job configuration so that old builds keep being judged by
the rule that applied when they ran.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from covhealth.health import metric_label

if TYPE_CHECKING:
    from covhealth.models.coverage import CoverageSnapshot


class Rule(ABC):
    """Judges a coverage snapshot as passing or failing."""

    @abstractmethod
    def enforce(self, snapshot: CoverageSnapshot) -> bool:
        """Return True if *snapshot* violates this rule."""

    @abstractmethod
    def describe(self) -> str:
        """Human-readable summary of the rule."""


@dataclass
class MinimumCoverageRule(Rule):
    """Fails when one metric's percentage is below a minimum.

    An absent metric is not judged.
    """

    metric: str
    minimum: float

    def enforce(self, snapshot: CoverageSnapshot) -> bool:
        ratio = snapshot.get(self.metric)
        if ratio is None:
            return False
        return ratio.percentage_float < self.minimum

    def describe(self) -> str:
        return f"{metric_label(self.metric)} coverage must be at least {self.minimum:g}%"


@dataclass
class AllRules(Rule):
    """Fails when any of the wrapped rules fails."""

    rules: list[Rule]

    def enforce(self, snapshot: CoverageSnapshot) -> bool:
        return any(rule.enforce(snapshot) for rule in self.rules)

    def describe(self) -> str:
        return "; ".join(rule.describe() for rule in self.rules)


RULE_TYPES = ("minimum",)


def rule_from_dict(data: dict[str, Any]) -> Rule:
    """Build a rule from its configuration mapping.

    Raises:
        ValueError: If the rule type is unknown or a field is missing.
    """
    rule_type = str(data.get("type", "minimum"))
    if rule_type == "minimum":
        if "metric" not in data:
            raise ValueError("minimum rule requires a 'metric'")
        return MinimumCoverageRule(
            metric=str(data["metric"]), minimum=float(data.get("minimum", 0.0))
        )
    msg = f"Unknown rule type: {rule_type!r} (expected one of {', '.join(RULE_TYPES)})"
    raise ValueError(msg)


def rules_from_config(raw: list[dict[str, Any]]) -> Rule | None:
    """Combine the configured rules into one, or ``None`` when there are none."""
    rules = [rule_from_dict(item) for item in raw]
    if not rules:
        return None
    if len(rules) == 1:
        return rules[0]
    return AllRules(rules)
