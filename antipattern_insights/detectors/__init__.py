"""
Detectors module - calling the anti-pattern analysis API.

This module contains:
    - client: pooled HTTP client for detector endpoints
    - registry: detector specifications and per-detector results
    - aggregator: concurrent fetch with per-detector failure isolation
    - report: per-category tables from the aggregate endpoint
"""

from antipattern_insights.detectors.aggregator import fetch_detector_results
from antipattern_insights.detectors.client import AntiPatternClient
from antipattern_insights.detectors.registry import (
    DetectorResult,
    DetectorSpec,
    build_detector_specs,
)
from antipattern_insights.detectors.report import (
    REPORT_CATEGORIES,
    AntiPatternSection,
    ReportCategory,
    ReportColumn,
    build_report,
    build_section,
)

__all__ = [
    # Client
    "AntiPatternClient",
    # Registry
    "DetectorResult",
    "DetectorSpec",
    "build_detector_specs",
    # Aggregation
    "fetch_detector_results",
    # Report
    "REPORT_CATEGORIES",
    "AntiPatternSection",
    "ReportCategory",
    "ReportColumn",
    "build_report",
    "build_section",
]
