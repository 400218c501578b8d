"""
Core module - configuration, constants, exceptions and logging.
"""

from antipattern_insights.core.config import (
    DEFAULT_DETECTOR_ENDPOINTS,
    DashboardConfig,
    DetectorApiConfig,
    DetectorEndpointConfig,
    GraphApiConfig,
    InsightsConfig,
    SeverityConfig,
    get_config,
    reset_config,
    set_config,
)
from antipattern_insights.core.constants import (
    DEFAULT_COUNT,
    MAPPING_COUNT_FIELDS,
    SEQUENCE_COUNT_FIELDS,
    SEQUENCE_SUBJECT_FIELDS,
    UNKNOWN_SERVICE,
    ChartKind,
    Severity,
    WeightType,
)
from antipattern_insights.core.exceptions import (
    AggregationError,
    ConfigurationError,
    DetectorError,
    DetectorFetchError,
    GraphFetchError,
    InsightPipelineError,
)
from antipattern_insights.core.logging import (
    EventType,
    configure_logging,
    get_logger,
    log_event,
)

__all__ = [
    # Config
    "DEFAULT_DETECTOR_ENDPOINTS",
    "DashboardConfig",
    "DetectorApiConfig",
    "DetectorEndpointConfig",
    "GraphApiConfig",
    "InsightsConfig",
    "SeverityConfig",
    "get_config",
    "reset_config",
    "set_config",
    # Constants
    "DEFAULT_COUNT",
    "MAPPING_COUNT_FIELDS",
    "SEQUENCE_COUNT_FIELDS",
    "SEQUENCE_SUBJECT_FIELDS",
    "UNKNOWN_SERVICE",
    "ChartKind",
    "Severity",
    "WeightType",
    # Exceptions
    "AggregationError",
    "ConfigurationError",
    "DetectorError",
    "DetectorFetchError",
    "GraphFetchError",
    "InsightPipelineError",
    # Logging
    "EventType",
    "configure_logging",
    "get_logger",
    "log_event",
]
