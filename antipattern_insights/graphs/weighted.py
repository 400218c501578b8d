"""
Weighted dependency graph retrieval.

The endpoint takes an optional time window (microsecond epoch integers) and a
weight type, and answers ``{status, data: {nodes, edges}}``. The graph is
reshaped into the ``{nodes, links}`` structure the graph renderer consumes.
"""

from __future__ import annotations

import logging
import math
from datetime import datetime
from typing import Any

from antipattern_insights.api.models import GraphData, GraphLink, GraphNode
from antipattern_insights.core.constants import WeightType
from antipattern_insights.core.exceptions import GraphFetchError
from antipattern_insights.core.logging import EventType, get_logger, log_event
from antipattern_insights.graphs.client import GraphClient

logger = get_logger(__name__)


def to_microseconds(moment: datetime | None) -> int | None:
    """Epoch microseconds of ``moment`` (naive values are taken as local time)."""
    if moment is None:
        return None
    return int(moment.timestamp() * 1_000_000)


def _is_numeric(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)


def build_query_params(
    start_time: Any = None,
    end_time: Any = None,
    weight_type: WeightType | str = WeightType.CO_EXECUTION,
) -> dict[str, Any]:
    """Query parameters, including each bound only when present and numeric.

    Raises:
        ValueError: If ``weight_type`` is not one of ``WeightType``.
    """
    params: dict[str, Any] = {}
    if _is_numeric(start_time):
        params["start_time"] = int(start_time)
    if _is_numeric(end_time):
        params["end_time"] = int(end_time)
    params["weight_type"] = WeightType(weight_type).value
    return params


def transform(data: dict[str, Any] | None) -> GraphData:
    """Reshape ``{nodes, edges}`` into ``{nodes, links}``; missing node metrics become 0."""
    data = data or {}
    nodes = [
        GraphNode(
            id=node.get("id"),
            importance=node.get("importance"),
            dependence=node.get("dependence"),
        )
        for node in data.get("nodes") or []
        if isinstance(node, dict) and node.get("id") is not None
    ]
    links = [
        GraphLink(source=edge.get("source"), target=edge.get("target"), weight=edge.get("weight"))
        for edge in data.get("edges") or []
        if isinstance(edge, dict) and edge.get("source") is not None and edge.get("target") is not None
    ]
    return GraphData(nodes=nodes, links=links)


class WeightedGraphService:
    """Fetches weighted dependency graphs for a time window.

    Example:
        >>> service = WeightedGraphService(GraphClient())
        >>> graph = service.get_graph(start, end, WeightType.LATENCY)
        >>> graph.is_empty
        False
    """

    def __init__(self, client: GraphClient) -> None:
        self._client = client

    def get_graph(
        self,
        start_time: datetime | int | None = None,
        end_time: datetime | int | None = None,
        weight_type: WeightType | str | None = None,
    ) -> GraphData:
        """Fetch and transform the weighted graph.

        Raises:
            GraphFetchError: If the request fails or the response is not a
                successful graph payload.
        """
        if isinstance(start_time, datetime):
            start_time = to_microseconds(start_time)
        if isinstance(end_time, datetime):
            end_time = to_microseconds(end_time)

        url = self._client.config.weighted_url
        params = build_query_params(
            start_time, end_time, weight_type or self._client.config.default_weight_type
        )
        body = self._client.get_json(url, params=params)

        if not isinstance(body, dict) or body.get("status") != "success" or not body.get("data"):
            log_event(logger, logging.WARNING, EventType.GRAPH_FAILED, "weighted", "invalid response")
            raise GraphFetchError(url, reason="failed to fetch valid weighted dependency graph data")

        graph = transform(body["data"])
        log_event(
            logger, logging.DEBUG, EventType.GRAPH_FETCHED, "weighted", "ok",
            nodes=len(graph.nodes), links=len(graph.links),
        )
        return graph
