"""
API module - response contracts for the dashboard presentation layer.

The FastAPI application lives in ``antipattern_insights.api.app`` and is not
imported here, so the models stay importable without the web stack.
"""

from antipattern_insights.api.models import (
    API_SCHEMA_VERSION,
    ArchitectureGraph,
    ArchitectureLink,
    ChartAggregate,
    ChartsResponse,
    Dataset,
    GraphData,
    GraphLink,
    GraphNode,
    HealthResponse,
    InsightListResponse,
    InsightRecord,
    RefreshResponse,
    SelectionPayload,
)

__all__ = [
    "API_SCHEMA_VERSION",
    "ArchitectureGraph",
    "ArchitectureLink",
    "ChartAggregate",
    "ChartsResponse",
    "Dataset",
    "GraphData",
    "GraphLink",
    "GraphNode",
    "HealthResponse",
    "InsightListResponse",
    "InsightRecord",
    "RefreshResponse",
    "SelectionPayload",
]
