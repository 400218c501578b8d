"""
Shared enumerations and fixed field lists for the insights pipeline.
"""

from __future__ import annotations

from enum import Enum
from typing import Final


class Severity(str, Enum):
    """Discrete severity of an insight's magnitude."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"

    @classmethod
    def ordered(cls) -> list[Severity]:
        """Projection order, most severe first."""
        return [cls.HIGH, cls.MEDIUM, cls.LOW]


class ChartKind(str, Enum):
    """Chart projections supported by the projector."""

    BY_SERVICE_BY_PATTERN = "by-service-by-pattern"
    SEVERITY_BY_PATTERN = "severity-by-pattern"
    PATTERN_DISTRIBUTION = "pattern-distribution"
    BY_SERVICE_BY_PATTERN_RADAR = "by-service-by-pattern-radar"
    TREND_OVER_TIME = "trend-over-time"


class WeightType(str, Enum):
    """Edge weighting understood by the weighted-graph endpoint."""

    CO_EXECUTION = "CO"
    LATENCY = "Lat"
    FREQUENCY = "Freq"

    @property
    def display_name(self) -> str:
        return {
            WeightType.CO_EXECUTION: "CoExecution",
            WeightType.LATENCY: "Latency",
            WeightType.FREQUENCY: "Frequency",
        }[self]


# Subject used when a sequence element names no service
UNKNOWN_SERVICE: Final[str] = "Unknown"

# Count used when no magnitude field resolves
DEFAULT_COUNT: Final[int] = 1

# Severity thresholds (count >= HIGH -> High, count >= MEDIUM -> Medium)
DEFAULT_HIGH_THRESHOLD: Final[int] = 10
DEFAULT_MEDIUM_THRESHOLD: Final[int] = 5

# Fields naming the subject of a sequence element, consulted in order
SEQUENCE_SUBJECT_FIELDS: Final[tuple[str, ...]] = ("service", "source", "api_gateway")

# Magnitude fields for sequence elements, consulted in order
SEQUENCE_COUNT_FIELDS: Final[tuple[str, ...]] = (
    "cycle_length",
    "incoming_calls",
    "total_upstream",
    "total_downstream",
    "total_connections",
    "length",
    "total_calls",
)

# Magnitude fields for keyed-mapping detail objects, consulted in order
MAPPING_COUNT_FIELDS: Final[tuple[str, ...]] = (
    "total_upstream",
    "total_downstream",
    "incoming_calls",
    "total_connections",
    "length",
)
