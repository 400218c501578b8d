"""
Per-category anti-pattern report built from the aggregate endpoint.

The aggregate endpoint answers with one object per category, each holding its
findings under a category-specific key (``cyclic_dependencies.cycles``,
``fan_in_overload.services`` as a mapping, ...). This module turns that into
titled tables for the detection page. Categories without findings are left out.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

# Pseudo-field naming the mapping key of a keyed-collection category
KEY_FIELD = "@key"


@dataclass(frozen=True)
class ReportColumn:
    header: str
    field: str
    joiner: str = ", "


@dataclass(frozen=True)
class ReportCategory:
    """Where one category lives in the aggregate payload and how to show it."""

    key: str
    collection_key: str
    label: str  # Detector label used for insights
    title: str
    description: str
    columns: tuple[ReportColumn, ...]

    def collection(self, aggregate: Mapping[str, Any] | None) -> Any:
        """Findings of this category, or None when absent."""
        if not isinstance(aggregate, Mapping):
            return None
        section = aggregate.get(self.key)
        if not isinstance(section, Mapping):
            return None
        return section.get(self.collection_key)


@dataclass
class AntiPatternSection:
    """Rendered table for one category."""

    key: str
    title: str
    description: str
    headers: list[str]
    rows: list[list[str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": self.key,
            "title": self.title,
            "description": self.description,
            "headers": self.headers,
            "rows": self.rows,
        }


REPORT_CATEGORIES: tuple[ReportCategory, ...] = (
    ReportCategory(
        "cyclic_dependencies", "cycles", "Cyclic Dependencies", "Cyclic Dependencies",
        "Services depend on each other in a loop, making them hard to manage.",
        (ReportColumn("Cycle", "cycle", joiner=" → "),),
    ),
    ReportCategory(
        "knot_patterns", "dense_clusters", "Knot Pattern", "The Knot Pattern",
        "Multiple services are tightly coupled, making the system complex.",
        (ReportColumn("Service", "service"),),
    ),
    ReportCategory(
        "bottleneck_services", "services", "Bottleneck Services", "Bottleneck Services",
        "These services receive too many requests, causing performance slowdowns.",
        (ReportColumn("Service", "service"),),
    ),
    ReportCategory(
        "nano_services", "services", "Nano Services", "Nano Services",
        "Small services with minimal responsibilities, increasing communication overhead.",
        (ReportColumn("Service", "service"), ReportColumn("Connections", "total_connections")),
    ),
    ReportCategory(
        "long_service_chains", "chains", "Long Service Chains", "Long Service Chains",
        "Excessive dependency chains between services, increasing latency.",
        (ReportColumn("Source", "source"), ReportColumn("Target", "target"), ReportColumn("Length", "length")),
    ),
    ReportCategory(
        "fan_in_overload", "services", "Fan-In Overload", "Fan-In Overload",
        "A single service is overloaded with too many upstream dependencies.",
        (ReportColumn("Service", KEY_FIELD), ReportColumn("Upstream Services", "upstream_services")),
    ),
    ReportCategory(
        "fan_out_overload", "services", "Fan-Out Overload", "Fan-Out Overload",
        "A service sends requests to too many downstream services, increasing failure risk.",
        (ReportColumn("Service", KEY_FIELD), ReportColumn("Downstream Services", "downstream_services")),
    ),
    ReportCategory(
        "chatty_services", "services", "Chatty Services", "Chatty Services",
        "Excessive communication between services, causing network congestion.",
        (
            ReportColumn("Service", KEY_FIELD),
            ReportColumn("Total Calls", "total_calls"),
            ReportColumn("Avg Duration (ms)", "avg_duration"),
        ),
    ),
    ReportCategory(
        "sync_overuse", "issues", "Synchronous Call Overuse", "Synchronous Call Overuse",
        "Blocking synchronous calls between services, reducing scalability.",
        (
            ReportColumn("Source", "source"),
            ReportColumn("Destination", "destination"),
            ReportColumn("Method", "method"),
            ReportColumn("Avg Duration (ms)", "avg_duration"),
        ),
    ),
    ReportCategory(
        "api_gateway_usage", "issues", "Improper API Gateway Usage", "Improper API Gateway Usage",
        "API Gateway is overloaded or misused, leading to performance issues.",
        (
            ReportColumn("API Gateway", "api_gateway"),
            ReportColumn("Service", "service"),
            ReportColumn("Avg Duration (ms)", "avg_duration"),
        ),
    ),
    ReportCategory(
        "improper_load_balancer", "imbalances", "Improper Load Balancer", "Improper Load Balancer",
        "Load balancing is uneven, leading to bottlenecks and inefficiencies.",
        (
            ReportColumn("Service", "service"),
            ReportColumn("Requests", "requests"),
            ReportColumn("Imbalance Factor", "imbalance_factor"),
        ),
    ),
)


def _format_cell(value: Any, joiner: str) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return joiner.join(str(v) for v in value)
    return str(value)


def _row(record: Any, columns: Sequence[ReportColumn], key: str | None = None) -> list[str]:
    cells: list[str] = []
    for column in columns:
        if column.field == KEY_FIELD:
            cells.append(key or "")
        elif isinstance(record, Mapping):
            cells.append(_format_cell(record.get(column.field), column.joiner))
        elif isinstance(record, str) and column.field == "service":
            # Bottleneck services are listed as bare names
            cells.append(record)
        else:
            cells.append("")
    return cells


def build_section(category: ReportCategory, aggregate: Mapping[str, Any] | None) -> AntiPatternSection | None:
    """Table for one category, or None when it has no findings."""
    collection = category.collection(aggregate)
    if not collection:
        return None

    if isinstance(collection, Mapping):
        rows = [_row(details, category.columns, key=str(name)) for name, details in collection.items()]
    elif isinstance(collection, (list, tuple)):
        rows = [_row(record, category.columns) for record in collection]
    else:
        return None

    return AntiPatternSection(
        key=category.key,
        title=category.title,
        description=category.description,
        headers=[c.header for c in category.columns],
        rows=rows,
    )


def build_report(aggregate: Mapping[str, Any] | None) -> list[AntiPatternSection]:
    """Sections for every category with findings, in display order."""
    sections = (build_section(category, aggregate) for category in REPORT_CATEGORIES)
    return [s for s in sections if s is not None]
