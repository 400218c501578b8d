"""
Anti-Pattern Insights - dashboard HTTP API.

Serves the settled dashboard state (filtered insights, chart aggregates,
selection) plus the anti-pattern report and the dependency graphs.

Run with: antipattern-insights serve
Access at: http://localhost:8050
"""

import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI, HTTPException, Query, Request
from starlette.concurrency import run_in_threadpool
from starlette.middleware.base import BaseHTTPMiddleware

from antipattern_insights import __version__
from antipattern_insights.api.models import (
    API_SCHEMA_VERSION,
    ArchitectureGraph,
    ChartAggregate,
    ChartsResponse,
    GraphData,
    HealthResponse,
    InsightListResponse,
    InsightRecord,
    RefreshResponse,
    SelectionPayload,
)
from antipattern_insights.core.config import InsightsConfig, get_config
from antipattern_insights.core.constants import ChartKind, WeightType
from antipattern_insights.core.exceptions import GraphFetchError
from antipattern_insights.core.logging import get_logger
from antipattern_insights.detectors.client import AntiPatternClient
from antipattern_insights.detectors.registry import build_detector_specs
from antipattern_insights.detectors.report import build_report
from antipattern_insights.graphs.architecture import fetch_architecture_graph
from antipattern_insights.graphs.client import GraphClient
from antipattern_insights.graphs.traces import build_timeline, fetch_traces
from antipattern_insights.graphs.weighted import WeightedGraphService
from antipattern_insights.insights.charts import summarize
from antipattern_insights.insights.filters import SelectionState
from antipattern_insights.insights.pipeline import DashboardState, InsightDashboard
from antipattern_insights.insights.severity import SeverityThresholds

logger = get_logger(__name__)
access_logger = get_logger("antipattern_insights.access")


# ============================================================================
# Request Logging Middleware (nginx combined log format)
# ============================================================================

class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Request logging middleware using nginx combined log format."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.perf_counter()
        response = await call_next(request)
        duration_secs = time.perf_counter() - start_time

        client_host = request.client.host if request.client else "-"
        path = request.url.path
        if request.url.query:
            path = f"{path}?{request.url.query}"
        http_version = request.scope.get("http_version", "1.1")
        content_length = response.headers.get("content-length", "-")
        referer = request.headers.get("referer", "-")
        user_agent = request.headers.get("user-agent", "-")
        timestamp = datetime.now().astimezone().strftime("[%d/%b/%Y:%H:%M:%S %z]")

        access_logger.info(
            f'{client_host} - - {timestamp} '
            f'"{request.method} {path} HTTP/{http_version}" '
            f'{response.status_code} {content_length} '
            f'"{referer}" "{user_agent}" '
            f'{duration_secs:.3f}'
        )
        return response


def _view_state(
    state: DashboardState,
    services: list[str] | None,
    patterns: list[str] | None,
) -> DashboardState:
    """State with the query-string selection applied over the stored one."""
    selection = state.selection
    if services is not None:
        selection = selection.with_services(services)
    if patterns is not None:
        selection = selection.with_patterns(patterns)
    return state.with_selection(selection)


def _selection_payload(state: DashboardState) -> SelectionPayload:
    return SelectionPayload(
        **state.selection.to_dict(),
        available_services=state.available_services,
        available_patterns=state.available_patterns,
    )


def create_app(
    dashboard: InsightDashboard | None = None,
    *,
    config: InsightsConfig | None = None,
    detector_client: AntiPatternClient | None = None,
    graph_client: GraphClient | None = None,
    refresh_on_startup: bool | None = None,
    access_log: bool = False,
) -> FastAPI:
    """Build the dashboard application around one ``InsightDashboard``."""
    config = config or get_config()
    detector_client = detector_client or AntiPatternClient(config=config.detectors)
    graph_client = graph_client or GraphClient(config=config.graphs)
    if dashboard is None:
        dashboard = InsightDashboard(
            build_detector_specs(detector_client, config.detectors),
            max_workers=config.detectors.max_workers,
            thresholds=SeverityThresholds.from_config(config.severity),
        )
    if refresh_on_startup is None:
        refresh_on_startup = config.dashboard.refresh_on_startup

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if refresh_on_startup:
            await run_in_threadpool(dashboard.refresh)
        yield
        detector_client.close()
        graph_client.close()

    app = FastAPI(title="Anti-Pattern Insights", version=__version__, lifespan=lifespan)
    app.state.dashboard = dashboard
    if access_log:
        app.add_middleware(RequestLoggingMiddleware)

    weighted_graphs = WeightedGraphService(graph_client)

    @app.get("/api/health", response_model=HealthResponse)
    def health_check():
        """Health of the analysis API plus the size of the current collection."""
        healthy, details = detector_client.health_check()
        return HealthResponse(
            status="healthy" if healthy else "degraded",
            schema_version=API_SCHEMA_VERSION,
            detector_api=details,
            insight_count=len(dashboard.state.insights),
        )

    @app.post("/api/refresh", response_model=RefreshResponse)
    def refresh_insights():
        state = dashboard.refresh()
        return RefreshResponse(
            success=state.error is None,
            insight_count=len(state.insights),
            failed_detectors=list(state.failed_detectors),
            error=state.error,
        )

    @app.get("/api/insights", response_model=InsightListResponse)
    def list_insights(
        services: list[str] | None = Query(None),
        patterns: list[str] | None = Query(None),
    ):
        """Filtered insights; query selections override the stored selection."""
        state = _view_state(dashboard.state, services, patterns)
        view = state.filtered_view()
        return InsightListResponse(
            insights=[InsightRecord(**i.to_dict()) for i in view],
            total=len(view),
            error=state.error,
            last_refreshed=state.last_refreshed,
        )

    @app.get("/api/charts", response_model=ChartsResponse)
    def all_charts(
        services: list[str] | None = Query(None),
        patterns: list[str] | None = Query(None),
    ):
        return ChartsResponse(charts=_view_state(dashboard.state, services, patterns).charts())

    @app.get("/api/charts/{kind}", response_model=ChartAggregate)
    def chart(
        kind: str,
        services: list[str] | None = Query(None),
        patterns: list[str] | None = Query(None),
    ):
        try:
            chart_kind = ChartKind(kind)
        except ValueError:
            raise HTTPException(status_code=404, detail=f"Unknown chart kind: {kind}")
        return _view_state(dashboard.state, services, patterns).chart(chart_kind)

    @app.get("/api/selection", response_model=SelectionPayload)
    def get_selection():
        return _selection_payload(dashboard.state)

    @app.post("/api/selection", response_model=SelectionPayload)
    def update_selection(payload: SelectionPayload):
        state = dashboard.state
        selection = SelectionState(
            selected_services=frozenset(payload.selected_services),
            selected_patterns=frozenset(payload.selected_patterns),
            initialized=state.selection.initialized,
        )
        return _selection_payload(dashboard.update_selection(selection))

    @app.get("/api/summary")
    def summary() -> dict[str, Any]:
        return summarize(dashboard.state.filtered_view())

    @app.get("/api/report")
    def report() -> dict[str, Any]:
        """Anti-pattern report built from the aggregate endpoint."""
        aggregate = detector_client.fetch_all()
        if aggregate is None:
            raise HTTPException(status_code=502, detail="Anti-pattern analysis API unavailable")
        return {"sections": [section.to_dict() for section in build_report(aggregate)]}

    @app.get("/api/graphs/weighted", response_model=GraphData)
    def weighted_graph(
        start_time: int | None = None,
        end_time: int | None = None,
        weight_type: WeightType | None = None,
    ):
        try:
            return weighted_graphs.get_graph(start_time, end_time, weight_type)
        except GraphFetchError as e:
            raise HTTPException(status_code=502, detail=str(e))

    @app.get("/api/graphs/architecture", response_model=ArchitectureGraph)
    def architecture_graph():
        return fetch_architecture_graph(graph_client)

    @app.get("/api/traces")
    def traces() -> dict[str, Any]:
        """Trace timelines keyed by trace id."""
        return {
            trace_id: build_timeline(spans).to_dict()
            for trace_id, spans in fetch_traces(graph_client).items()
            if isinstance(spans, list)
        }

    return app
