"""
Service / pattern selection and the filter predicate over insights.

An empty selection set never restricts its axis, so clearing a selection shows
everything again. The "select everything" default is applied exactly once,
the first time a non-empty insight collection is seen.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field, replace

from antipattern_insights.insights.models import Insight


def distinct_services(insights: Iterable[Insight]) -> list[str]:
    """Distinct services in first-seen order."""
    return list(dict.fromkeys(i.service for i in insights))


def distinct_patterns(insights: Iterable[Insight]) -> list[str]:
    """Distinct pattern labels in first-seen order."""
    return list(dict.fromkeys(i.name for i in insights))


def filter_insights(
    insights: Iterable[Insight],
    selected_services: Iterable[str] = (),
    selected_patterns: Iterable[str] = (),
) -> list[Insight]:
    """Insights matching both selections, preserving input order."""
    services = frozenset(selected_services)
    patterns = frozenset(selected_patterns)
    return [
        insight
        for insight in insights
        if (not services or insight.service in services)
        and (not patterns or insight.name in patterns)
    ]


@dataclass(frozen=True)
class SelectionState:
    """Services and patterns chosen by the user."""

    selected_services: frozenset[str] = field(default_factory=frozenset)
    selected_patterns: frozenset[str] = field(default_factory=frozenset)
    initialized: bool = False

    def initialize_defaults(self, insights: Iterable[Insight]) -> SelectionState:
        """Fill still-empty selections with every known value, once.

        No-op when already initialized or when ``insights`` is empty, so an
        empty first load leaves the defaults pending for the next refresh.
        """
        if self.initialized:
            return self
        collected = list(insights)
        if not collected:
            return self
        return SelectionState(
            selected_services=self.selected_services or frozenset(distinct_services(collected)),
            selected_patterns=self.selected_patterns or frozenset(distinct_patterns(collected)),
            initialized=True,
        )

    def apply(self, insights: Iterable[Insight]) -> list[Insight]:
        """Filter ``insights`` with this selection."""
        return filter_insights(insights, self.selected_services, self.selected_patterns)

    def with_services(self, services: Iterable[str]) -> SelectionState:
        return replace(self, selected_services=frozenset(services))

    def with_patterns(self, patterns: Iterable[str]) -> SelectionState:
        return replace(self, selected_patterns=frozenset(patterns))

    def toggle_service(self, service: str) -> SelectionState:
        return replace(self, selected_services=self.selected_services ^ {service})

    def toggle_pattern(self, pattern: str) -> SelectionState:
        return replace(self, selected_patterns=self.selected_patterns ^ {pattern})

    def clear(self) -> SelectionState:
        """Drop both selections (no restriction), keeping the defaults consumed."""
        return replace(self, selected_services=frozenset(), selected_patterns=frozenset())

    def to_dict(self) -> dict[str, list[str]]:
        return {
            "selected_services": sorted(self.selected_services),
            "selected_patterns": sorted(self.selected_patterns),
        }
