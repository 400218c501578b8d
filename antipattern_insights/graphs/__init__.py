"""
Graphs module - dependency graphs and trace timelines adjacent to the insights.
"""

from antipattern_insights.graphs.architecture import (
    fetch_architecture_graph,
    normalize_architecture,
)
from antipattern_insights.graphs.client import GraphClient
from antipattern_insights.graphs.traces import (
    TimelineItem,
    TraceTimeline,
    build_timeline,
    fetch_traces,
)
from antipattern_insights.graphs.weighted import (
    WeightedGraphService,
    build_query_params,
    to_microseconds,
    transform,
)

__all__ = [
    "GraphClient",
    # Architecture
    "fetch_architecture_graph",
    "normalize_architecture",
    # Traces
    "TimelineItem",
    "TraceTimeline",
    "build_timeline",
    "fetch_traces",
    # Weighted
    "WeightedGraphService",
    "build_query_params",
    "to_microseconds",
    "transform",
]
