"""
System architecture graph: services and the calls between them.

A missing or failed graph yields an empty ``{nodes: [], links: []}`` so the
architecture page renders empty rather than broken.
"""

from __future__ import annotations

import logging
from typing import Any

from antipattern_insights.api.models import ArchitectureGraph, ArchitectureLink
from antipattern_insights.core.exceptions import GraphFetchError
from antipattern_insights.core.logging import EventType, get_logger, log_event
from antipattern_insights.graphs.client import GraphClient

logger = get_logger(__name__)


def normalize_architecture(result: Any) -> ArchitectureGraph:
    """Extract ``result["graph"]`` with link display defaults applied."""
    graph = result.get("graph") if isinstance(result, dict) else None
    if not isinstance(graph, dict):
        log_event(logger, logging.ERROR, EventType.GRAPH_FAILED, "architecture", "invalid graph data")
        return ArchitectureGraph()

    nodes = [n for n in graph.get("nodes") or [] if isinstance(n, dict)]
    links = [
        ArchitectureLink.model_validate(link)
        for link in graph.get("links") or []
        if isinstance(link, dict)
    ]
    return ArchitectureGraph(nodes=nodes, links=links)


def fetch_architecture_graph(client: GraphClient) -> ArchitectureGraph:
    """Fetch the architecture graph; errors are logged and give an empty graph."""
    try:
        result = client.get_json(client.config.architecture_url)
    except GraphFetchError as e:
        log_event(logger, logging.ERROR, EventType.GRAPH_FAILED, "architecture", str(e))
        return ArchitectureGraph()
    return normalize_architecture(result)
