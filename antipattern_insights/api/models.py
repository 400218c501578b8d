"""
Pydantic data models for the insights dashboard API.

These models are the contracts consumed by the presentation layer:
- chart aggregates (labels + datasets) for chart-rendering components
- insight records for tables and lists
- ``{nodes, links}`` graph structures for graph-rendering components
"""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator

from antipattern_insights.core.constants import ChartKind, Severity

API_SCHEMA_VERSION = "1.0.0"


# =============================================================================
# Chart Models
# =============================================================================


class Dataset(BaseModel):
    """One series of a chart."""

    label: str = Field(..., description="Series label (pattern, severity, ...)")
    data: list[int] = Field(default_factory=list, description="One value per chart label")
    color: str | None = Field(None, description="Deterministic hex colour for the series")


class ChartAggregate(BaseModel):
    """Presentation-ready projection of the filtered insights."""

    labels: list[str] = Field(default_factory=list)
    datasets: list[Dataset] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.labels and not self.datasets

    def dataset(self, label: str) -> Dataset | None:
        """Dataset with the given label, if any."""
        return next((d for d in self.datasets if d.label == label), None)


# =============================================================================
# Insight Models
# =============================================================================


class InsightRecord(BaseModel):
    """Serialized insight for table/list renderers."""

    service: str
    name: str
    count: int = Field(..., ge=1)
    severity: Severity
    date: str


class SelectionPayload(BaseModel):
    selected_services: list[str] = Field(default_factory=list)
    selected_patterns: list[str] = Field(default_factory=list)
    available_services: list[str] = Field(default_factory=list)
    available_patterns: list[str] = Field(default_factory=list)


class InsightListResponse(BaseModel):
    insights: list[InsightRecord] = Field(default_factory=list)
    total: int = 0
    error: str | None = None
    last_refreshed: str | None = None


class RefreshResponse(BaseModel):
    """Outcome of a refresh: counts on success, the error otherwise."""

    success: bool
    insight_count: int
    failed_detectors: list[str] = Field(default_factory=list)
    error: str | None = None


class ChartsResponse(BaseModel):
    charts: dict[ChartKind, ChartAggregate] = Field(default_factory=dict)


# =============================================================================
# Graph Models
# =============================================================================


class GraphNode(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    id: str
    importance: float = 0
    dependence: float = 0

    @field_validator("importance", "dependence", mode="before")
    @classmethod
    def default_missing(cls, v: Any) -> Any:
        """Missing or null node metrics render as 0."""
        return v or 0


class GraphLink(BaseModel):
    model_config = ConfigDict(coerce_numbers_to_str=True)

    source: str
    target: str
    weight: float | None = None


class GraphData(BaseModel):
    """``{nodes, links}`` structure consumed by the graph renderer."""

    nodes: list[GraphNode] = Field(default_factory=list)
    links: list[GraphLink] = Field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.nodes and not self.links


class ArchitectureLink(BaseModel):
    """Call edge of the system architecture graph, with display defaults."""

    model_config = ConfigDict(coerce_numbers_to_str=True)

    source: str = "Unknown Source"
    target: str = "Unknown Target"
    method: str = "Unknown"
    type: str = "Unknown"
    calls: Any = "Not Available"
    avg_duration: Any = "Not Available"
    weight: Any = "Not Available"

    @field_validator("*", mode="before")
    @classmethod
    def drop_nulls(cls, v: Any, info: ValidationInfo) -> Any:
        """Explicit nulls fall back to the display default."""
        if v is None:
            return cls.model_fields[info.field_name].default
        return v


class ArchitectureGraph(BaseModel):
    nodes: list[dict[str, Any]] = Field(default_factory=list)
    links: list[ArchitectureLink] = Field(default_factory=list)


class HealthResponse(BaseModel):
    status: str
    schema_version: str = API_SCHEMA_VERSION
    detector_api: dict[str, Any] = Field(default_factory=dict)
    insight_count: int = 0
