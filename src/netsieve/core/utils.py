"""Core utility functions for netsieve."""

from dataclasses import dataclass, field
from typing import Callable, Iterable

from netsieve.core.constants import Rule
from netsieve.core.models import Decision, RequestEvent


@dataclass
class DecisionCounts:
    """Kept/dropped counts, broken down by deciding rule."""
    kept: int = 0
    dropped: int = 0
    by_rule: dict[Rule, int] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.kept + self.dropped

    @property
    def reduction_percentage(self) -> float:
        """Share of events dropped, as a percentage."""
        if self.total == 0:
            return 0.0
        return (self.dropped / self.total) * 100

    def add(self, decision: Decision) -> None:
        if decision.kept:
            self.kept += 1
        else:
            self.dropped += 1
        self.by_rule[decision.rule] = self.by_rule.get(decision.rule, 0) + 1

    def to_dict(self) -> dict[str, object]:
        """Convert to dictionary."""
        return {
            "total": self.total,
            "kept": self.kept,
            "dropped": self.dropped,
            "reduction_percentage": round(self.reduction_percentage, 2),
            "by_rule": {rule.value: count for rule, count in self.by_rule.items()},
        }


def tally_decisions(
    events: Iterable[RequestEvent],
    explain: Callable[[RequestEvent], Decision],
) -> tuple[list[Decision], DecisionCounts]:
    """
    Classify a collection of events and count the outcomes.

    Args:
        events: Events to classify
        explain: Callable returning a Decision, usually Classifier.explain

    Returns:
        Decisions in input order, and their counts
    """
    counts = DecisionCounts()
    decisions = []

    for event in events:
        decision = explain(event)
        decisions.append(decision)
        counts.add(decision)

    return decisions, counts
