"""
Anti-Pattern Insights.

Aggregates the findings of microservice anti-pattern detectors (cyclic
dependencies, bottlenecks, chatty services, ...) into a flat collection of
insights, classifies them by severity and projects them into chart-ready
aggregates for a dashboard.

Package Structure:
    - core: Configuration, constants, exceptions, logging
    - detectors: Analysis API client, detector registry, concurrent fetch, report
    - insights: Normalizer, severity classifier, filter engine, chart projector
    - graphs: Weighted/architecture dependency graphs and trace timelines
    - api: Response models and the FastAPI dashboard application

Example usage:
    from antipattern_insights import get_config
    from antipattern_insights.detectors import AntiPatternClient, build_detector_specs
    from antipattern_insights.insights import DashboardState, refresh
"""

__version__ = "1.0.0"

# Core exports - most commonly used items
from antipattern_insights.core.config import InsightsConfig, get_config
from antipattern_insights.core.constants import ChartKind, Severity, WeightType
from antipattern_insights.core.exceptions import InsightPipelineError
from antipattern_insights.core.logging import configure_logging, get_logger
from antipattern_insights.insights.models import Insight

__all__ = [
    # Version
    "__version__",
    # Config
    "get_config",
    "InsightsConfig",
    # Constants
    "ChartKind",
    "Severity",
    "WeightType",
    # Models
    "Insight",
    # Exceptions
    "InsightPipelineError",
    # Logging
    "get_logger",
    "configure_logging",
]
