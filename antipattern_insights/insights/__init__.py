"""
Insights module - normalization, severity, filtering and chart projection.

This module contains:
    - normalizer: heterogeneous detector payloads -> Insight records
    - severity: count -> Low/Medium/High
    - filters: selection state and the filter predicate
    - charts: chart-ready aggregates from a filtered view
    - pipeline: refresh orchestration and dashboard state
"""

from antipattern_insights.insights.charts import (
    dataset_color,
    project,
    project_all,
    summarize,
)
from antipattern_insights.insights.filters import (
    SelectionState,
    distinct_patterns,
    distinct_services,
    filter_insights,
)
from antipattern_insights.insights.models import Insight
from antipattern_insights.insights.normalizer import (
    PayloadShape,
    normalize,
    resolve_count,
    resolve_payload_shape,
    resolve_subject,
    utc_today,
)
from antipattern_insights.insights.pipeline import (
    CollectionResult,
    DashboardState,
    InsightDashboard,
    collect_insights,
    insights_from_aggregate,
    refresh,
)
from antipattern_insights.insights.severity import (
    DEFAULT_THRESHOLDS,
    SeverityThresholds,
    classify,
    reclassify,
)

__all__ = [
    # Models
    "Insight",
    # Normalizer
    "PayloadShape",
    "normalize",
    "resolve_count",
    "resolve_payload_shape",
    "resolve_subject",
    "utc_today",
    # Severity
    "DEFAULT_THRESHOLDS",
    "SeverityThresholds",
    "classify",
    "reclassify",
    # Filters
    "SelectionState",
    "distinct_patterns",
    "distinct_services",
    "filter_insights",
    # Charts
    "dataset_color",
    "project",
    "project_all",
    "summarize",
    # Pipeline
    "CollectionResult",
    "DashboardState",
    "InsightDashboard",
    "collect_insights",
    "insights_from_aggregate",
    "refresh",
]
