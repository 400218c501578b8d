"""
Pytest configuration and shared fixtures.

This module provides reusable fixtures for testing the antipattern_insights package.
"""

from __future__ import annotations

from collections.abc import Callable, Generator
from typing import Any
from unittest.mock import MagicMock

import pytest
import requests

from antipattern_insights.core import (
    DEFAULT_DETECTOR_ENDPOINTS,
    DetectorApiConfig,
    GraphApiConfig,
    InsightsConfig,
    Severity,
    reset_config,
    set_config,
)
from antipattern_insights.detectors import DetectorSpec
from antipattern_insights.insights import Insight

TODAY = "2026-10-19"

# =============================================================================
# Configuration Fixtures
# =============================================================================


@pytest.fixture
def test_config() -> Generator[InsightsConfig, None, None]:
    """Provide a test configuration."""
    config = InsightsConfig(
        detectors=DetectorApiConfig(
            base_url="http://mock-analysis:8000/api/anti-patterns",
            timeout_seconds=2,
            max_workers=4,
        ),
        graphs=GraphApiConfig(
            base_url="http://mock-analysis:8000/api",
            traces_url="http://mock-traces:8085/traces",
        ),
    )
    set_config(config)
    yield config
    reset_config()


@pytest.fixture
def today() -> str:
    """Shared processing date stamp."""
    return TODAY


# =============================================================================
# Data Fixtures - Detector Bodies
# =============================================================================

# Endpoint path -> JSON body, one per default detector
DETECTOR_BODIES: dict[str, dict[str, Any]] = {
    "cyclic": {"cycles": [{"cycle": ["order-service", "payment", "order-service"], "cycle_length": 3}]},
    "knot": {"dense_clusters": [{"service": "order-service", "total_connections": 6}]},
    "bottleneck": {"services": [{"service": "Service-A", "incoming_calls": 12}]},
    "nano-services": {"services": [{"service": "tiny-service", "total_connections": 2}]},
    "long-chain": {"chains": [{"source": "gateway", "target": "db", "length": 7}]},
    "fan-in": {"services": {"Service-A": {"total_upstream": 11, "upstream_services": ["a", "b"]}}},
    "fan-out": {"services": {"gateway": {"total_downstream": 4}}},
    "chatty": {"services": {"Service-A": {"total_calls": 250, "avg_duration": 12.5}}},
    "sync-overuse": {"issues": [{"source": "order-service", "destination": "payment", "method": "POST"}]},
    "api-gateway": {"issues": [{"api_gateway": "gateway", "service": "order-service"}]},
    "consistency": {"issues": []},
    "load-balancer": {"imbalances": [{"service": "payment", "requests": [10, 200], "imbalance_factor": 5.2}]},
}


@pytest.fixture
def detector_bodies() -> dict[str, dict[str, Any]]:
    """Provide one realistic response body per detector endpoint."""
    return {endpoint: dict(body) for endpoint, body in DETECTOR_BODIES.items()}


@pytest.fixture
def make_spec() -> Callable[..., DetectorSpec]:
    """Factory for detector specs answering a fixed body (or raising)."""

    def _make(label: str, result_key: str, body: Any = None, error: Exception | None = None) -> DetectorSpec:
        def fetch() -> Any:
            if error is not None:
                raise error
            return body

        return DetectorSpec(label=label, result_key=result_key, fetch=fetch)

    return _make


@pytest.fixture
def fake_specs(make_spec, detector_bodies) -> list[DetectorSpec]:
    """Specs for every default detector, answering ``DETECTOR_BODIES``."""
    return [
        make_spec(label, result_key, detector_bodies[endpoint])
        for label, (endpoint, result_key) in DEFAULT_DETECTOR_ENDPOINTS.items()
    ]


def _response(body: Any, status_code: int = 200) -> MagicMock:
    response = MagicMock()
    response.status_code = status_code
    response.ok = status_code < 400
    response.reason = "OK" if status_code < 400 else "Internal Server Error"
    response.json.return_value = body
    return response


@pytest.fixture
def mock_session(detector_bodies) -> Callable[..., MagicMock]:
    """Factory for a requests session serving ``detector_bodies``.

    Endpoints listed in ``failing`` raise ``requests.ConnectionError``.
    """

    def _make(failing: tuple[str, ...] = (), bodies: dict[str, Any] | None = None) -> MagicMock:
        served = bodies if bodies is not None else detector_bodies

        def get(url: str, **kwargs: Any) -> MagicMock:
            endpoint = url.rsplit("/", 1)[-1]
            if endpoint in failing:
                raise requests.ConnectionError(f"connection refused: {url}")
            if endpoint not in served:
                return _response(None, status_code=404)
            return _response(served[endpoint])

        session = MagicMock()
        session.get.side_effect = get
        return session

    return _make


# =============================================================================
# Data Fixtures - Insights
# =============================================================================


@pytest.fixture
def sample_insights() -> list[Insight]:
    """Provide a small mixed insight collection."""
    return [
        Insight("Service-A", "Bottleneck Services", 12, Severity.HIGH, TODAY),
        Insight("Service-B", "Bottleneck Services", 6, Severity.MEDIUM, TODAY),
        Insight("Service-A", "Cyclic Dependencies", 3, Severity.LOW, TODAY),
        Insight("gateway", "Long Service Chains", 7, Severity.MEDIUM, "2026-10-18"),
        Insight("Service-C", "Cyclic Dependencies", 10, Severity.HIGH, "2026-10-18"),
    ]


@pytest.fixture
def aggregate_payload() -> dict[str, Any]:
    """Provide an aggregate-endpoint response covering every shape."""
    return {
        "cyclic_dependencies": {"cycles": [{"cycle": ["a", "b", "a"], "cycle_length": 3}]},
        "knot_patterns": {"dense_clusters": []},
        "bottleneck_services": {"services": ["Service-A", "Service-B"]},
        "nano_services": {"services": [{"service": "tiny", "total_connections": 2}]},
        "long_service_chains": {"chains": [{"source": "gateway", "target": "db", "length": 6}]},
        "fan_in_overload": {"services": {"Service-A": {"total_upstream": 11, "upstream_services": ["x", "y"]}}},
        "fan_out_overload": {"services": {}},
        "chatty_services": {"services": {"Service-B": {"total_calls": 250, "avg_duration": 12.5}}},
        "sync_overuse": {"issues": [{"source": "order", "destination": "payment", "method": "POST"}]},
        "api_gateway_usage": {"issues": []},
    }
