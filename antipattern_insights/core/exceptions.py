"""
Custom exception hierarchy for the anti-pattern insights pipeline.

Per-detector failures are isolated and logged by the detector client, so only
aggregation-level, graph and configuration errors normally reach callers.
"""

from __future__ import annotations

from typing import Any


class InsightPipelineError(Exception):
    """Base exception for all pipeline errors.

    All custom exceptions in the pipeline inherit from this class,
    enabling catching all pipeline-related errors with a single except clause.
    """

    def __init__(
        self,
        message: str,
        *,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.message = message
        self.context = context or {}
        self.cause = cause
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """Format the full error message including context."""
        parts = [self.message]
        if self.context:
            context_str = ", ".join(f"{k}={v}" for k, v in self.context.items())
            parts.append(f"[{context_str}]")
        if self.cause:
            parts.append(f"Caused by: {self.cause}")
        return " ".join(parts)


# =============================================================================
# Detector-Related Exceptions
# =============================================================================


class DetectorError(InsightPipelineError):
    """Base exception for detector-related errors."""

    pass


class DetectorFetchError(DetectorError):
    """Raised when a single detector endpoint cannot be read.

    Examples:
        - Connection refused or timeout
        - Non-2xx response status
        - Body that is not a JSON object
    """

    def __init__(
        self,
        label: str,
        *,
        endpoint: str | None = None,
        status_code: int | None = None,
        reason: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        context: dict[str, Any] = {"detector": label}
        if endpoint:
            context["endpoint"] = endpoint
        if status_code is not None:
            context["status_code"] = status_code
        message = f"Failed to fetch detector {label}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, context=context, cause=cause)
        self.label = label
        self.endpoint = endpoint
        self.status_code = status_code


class AggregationError(DetectorError):
    """Raised when the join/flatten stage of a refresh fails as a whole."""

    def __init__(
        self,
        *,
        reason: str,
        detector_count: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        context: dict[str, Any] = {}
        if detector_count is not None:
            context["detectors"] = detector_count
        super().__init__(f"Insight aggregation failed: {reason}", context=context, cause=cause)
        self.reason = reason


# =============================================================================
# Graph-Related Exceptions
# =============================================================================


class GraphFetchError(InsightPipelineError):
    """Raised when a graph endpoint returns no usable graph."""

    def __init__(
        self,
        endpoint: str,
        *,
        status_code: int | None = None,
        reason: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        context: dict[str, Any] = {"endpoint": endpoint}
        if status_code is not None:
            context["status_code"] = status_code
        message = f"Graph fetch failed at {endpoint}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, context=context, cause=cause)
        self.endpoint = endpoint
        self.status_code = status_code


# =============================================================================
# Configuration-Related Exceptions
# =============================================================================


class ConfigurationError(InsightPipelineError):
    """Raised when configuration is invalid or missing."""

    def __init__(
        self,
        parameter: str,
        *,
        reason: str,
        value: Any = None,
    ) -> None:
        context = {"parameter": parameter}
        if value is not None:
            context["value"] = value
        super().__init__(f"Configuration error for {parameter}: {reason}", context=context)
        self.parameter = parameter
