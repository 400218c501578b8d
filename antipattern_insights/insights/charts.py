"""
Chart projections over a filtered insight view.

Every projection is a pure function of the view and the active pattern
labels, and returns an empty ``ChartAggregate`` for an empty view.
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable, Sequence
from typing import Any

import pandas as pd

from antipattern_insights.api.models import ChartAggregate, Dataset
from antipattern_insights.core.constants import ChartKind, Severity
from antipattern_insights.insights.models import Insight

INSIGHT_COLUMNS = ["service", "name", "count", "severity", "date"]

# Fixed palette; a dataset's colour depends only on its label
CHART_PALETTE: tuple[str, ...] = (
    "#4E79A7", "#F28E2B", "#E15759", "#76B7B2", "#59A14F", "#EDC948",
    "#B07AA1", "#FF9DA7", "#9C755F", "#BAB0AC", "#17BECF", "#BCBD22",
)

SEVERITY_COLORS: dict[Severity, str] = {
    Severity.HIGH: "#E15759",
    Severity.MEDIUM: "#F28E2B",
    Severity.LOW: "#59A14F",
}

DISTRIBUTION_LABEL = "Occurrences"


def dataset_color(label: str) -> str:
    """Stable palette colour for a dataset label."""
    digest = hashlib.md5(label.encode("utf-8")).hexdigest()
    return CHART_PALETTE[int(digest[:8], 16) % len(CHART_PALETTE)]


def insights_frame(view: Sequence[Insight]) -> pd.DataFrame:
    """Tabular form of a view; severity stored by value."""
    return pd.DataFrame([i.to_dict() for i in view], columns=INSIGHT_COLUMNS)


def _unique(series: pd.Series) -> list[str]:
    """Distinct values in first-seen order."""
    return [str(v) for v in pd.unique(series)]


def by_service_by_pattern(view: Sequence[Insight], active_patterns: Sequence[str]) -> ChartAggregate:
    """Count of each (service, pattern) pair; 0 when absent, first match wins."""
    if not view:
        return ChartAggregate()
    df = insights_frame(view)
    services = _unique(df["service"])
    first = df.drop_duplicates(subset=["service", "name"], keep="first")
    lookup = dict(zip(zip(first["service"], first["name"]), first["count"]))
    return ChartAggregate(
        labels=services,
        datasets=[
            Dataset(
                label=pattern,
                data=[int(lookup.get((service, pattern), 0)) for service in services],
                color=dataset_color(pattern),
            )
            for pattern in active_patterns
        ],
    )


def severity_by_pattern(view: Sequence[Insight], active_patterns: Sequence[str] = ()) -> ChartAggregate:
    """Number of insights per (pattern, severity), severities in High/Medium/Low order."""
    if not view:
        return ChartAggregate()
    df = insights_frame(view)
    patterns = _unique(df["name"])
    counts = df.groupby(["name", "severity"]).size().to_dict()
    return ChartAggregate(
        labels=patterns,
        datasets=[
            Dataset(
                label=severity.value,
                data=[int(counts.get((pattern, severity.value), 0)) for pattern in patterns],
                color=SEVERITY_COLORS[severity],
            )
            for severity in Severity.ordered()
        ],
    )


def pattern_distribution(view: Sequence[Insight], active_patterns: Sequence[str] = ()) -> ChartAggregate:
    """Single dataset: number of insights per pattern label."""
    if not view:
        return ChartAggregate()
    df = insights_frame(view)
    patterns = _unique(df["name"])
    counts = df["name"].value_counts().to_dict()
    return ChartAggregate(
        labels=patterns,
        datasets=[
            Dataset(
                label=DISTRIBUTION_LABEL,
                data=[int(counts.get(pattern, 0)) for pattern in patterns],
                color=dataset_color(DISTRIBUTION_LABEL),
            )
        ],
    )


def trend_over_time(view: Sequence[Insight], active_patterns: Sequence[str]) -> ChartAggregate:
    """Summed counts per (date, pattern), dates ascending."""
    if not view:
        return ChartAggregate()
    df = insights_frame(view)
    dates = sorted(_unique(df["date"]))
    sums = df.groupby(["date", "name"])["count"].sum().to_dict()
    return ChartAggregate(
        labels=dates,
        datasets=[
            Dataset(
                label=pattern,
                data=[int(sums.get((date, pattern), 0)) for date in dates],
                color=dataset_color(pattern),
            )
            for pattern in active_patterns
        ],
    )


PROJECTIONS: dict[ChartKind, Callable[[Sequence[Insight], Sequence[str]], ChartAggregate]] = {
    ChartKind.BY_SERVICE_BY_PATTERN: by_service_by_pattern,
    ChartKind.SEVERITY_BY_PATTERN: severity_by_pattern,
    ChartKind.PATTERN_DISTRIBUTION: pattern_distribution,
    # Radar renders the same aggregation on a different target
    ChartKind.BY_SERVICE_BY_PATTERN_RADAR: by_service_by_pattern,
    ChartKind.TREND_OVER_TIME: trend_over_time,
}


def project(
    view: Sequence[Insight],
    kind: ChartKind | str,
    active_pattern_labels: Sequence[str] = (),
) -> ChartAggregate:
    """Project a filtered view into the aggregate for one chart kind.

    Raises:
        ValueError: If ``kind`` is not a known chart kind.
    """
    chart_kind = ChartKind(kind)
    return PROJECTIONS[chart_kind](list(view), list(active_pattern_labels))


def project_all(
    view: Sequence[Insight],
    active_pattern_labels: Sequence[str] = (),
) -> dict[ChartKind, ChartAggregate]:
    """Every chart kind for the same view."""
    view = list(view)
    return {kind: project(view, kind, active_pattern_labels) for kind in ChartKind}


def summarize(view: Sequence[Insight]) -> dict[str, Any]:
    """Totals per severity, pattern and service for summary tables."""
    df = insights_frame(view)
    by_severity = df["severity"].value_counts().to_dict()
    return {
        "total": len(df),
        "total_count": int(df["count"].sum()) if len(df) else 0,
        "by_severity": {s.value: int(by_severity.get(s.value, 0)) for s in Severity.ordered()},
        "by_pattern": {str(k): int(v) for k, v in df["name"].value_counts().items()},
        "by_service": {str(k): int(v) for k, v in df["service"].value_counts().items()},
    }
