"""
Trace explorer data: spans grouped into timeline items per calling service.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import timedelta
from typing import Any

import pandas as pd

from antipattern_insights.core.exceptions import GraphFetchError
from antipattern_insights.core.logging import EventType, get_logger, log_event
from antipattern_insights.graphs.client import GraphClient

logger = get_logger(__name__)

# Every span is drawn with this fixed width
SPAN_DURATION = timedelta(seconds=1)


@dataclass
class TimelineItem:
    id: str
    content: str
    start: str
    end: str
    group: str
    details: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "content": self.content,
            "start": self.start,
            "end": self.end,
            "group": self.group,
            "details": self.details,
        }


@dataclass
class TraceTimeline:
    items: list[TimelineItem] = field(default_factory=list)
    groups: list[dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {"items": [i.to_dict() for i in self.items], "groups": self.groups}


def fetch_traces(client: GraphClient) -> dict[str, list[dict[str, Any]]]:
    """Trace id -> spans; ``{}`` when the trace service is unavailable."""
    try:
        body = client.get_json(client.config.traces_url)
    except GraphFetchError as e:
        log_event(logger, logging.ERROR, EventType.GRAPH_FAILED, "traces", str(e))
        return {}
    data = body.get("data") if isinstance(body, dict) else None
    return data if isinstance(data, dict) else {}


def _parse_timestamp(value: Any) -> pd.Timestamp | None:
    """Span timestamps are ISO strings or epoch milliseconds."""
    if value is None:
        return None
    try:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return pd.to_datetime(value, unit="ms", utc=True)
        return pd.to_datetime(value, utc=True)
    except (ValueError, TypeError):
        return None


def build_timeline(spans: list[dict[str, Any]]) -> TraceTimeline:
    """Timeline items deduplicated by ``trace_id-span_id``, grouped by source."""
    items: dict[str, TimelineItem] = {}
    groups: dict[str, None] = {}

    for span in spans or []:
        if not isinstance(span, dict):
            continue
        item_id = f"{span.get('trace_id')}-{span.get('span_id')}"
        if item_id in items:
            continue
        start = _parse_timestamp(span.get("timestamp"))
        if start is None:
            logger.debug(f"Skipping span {item_id} with unparseable timestamp")
            continue

        source = str(span.get("source", "Unknown"))
        destination = str(span.get("destination", "Unknown"))
        items[item_id] = TimelineItem(
            id=item_id,
            content=f"{source} → {destination}",
            start=start.isoformat(),
            end=(start + SPAN_DURATION).isoformat(),
            group=source,
            details={
                "method": span.get("method"),
                "status": span.get("http_status"),
                "response": span.get("response") or "N/A",
            },
        )
        groups.setdefault(source, None)

    return TraceTimeline(
        items=list(items.values()),
        groups=[{"id": name, "content": name} for name in groups],
    )
