"""
Detector specifications: what to call, and where its findings live.
"""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from antipattern_insights.core.config import DetectorApiConfig, get_config
from antipattern_insights.core.constants import (
    MAPPING_COUNT_FIELDS,
    SEQUENCE_COUNT_FIELDS,
)

if TYPE_CHECKING:
    from antipattern_insights.detectors.client import AntiPatternClient

# Zero-argument call returning the endpoint's JSON object, or None
FetchFn = Callable[[], "dict[str, Any] | None"]


@dataclass(frozen=True)
class DetectorSpec:
    """One anti-pattern detector, defined at startup."""

    label: str
    result_key: str
    fetch: FetchFn
    count_fields: tuple[str, ...] = SEQUENCE_COUNT_FIELDS
    mapping_count_fields: tuple[str, ...] = MAPPING_COUNT_FIELDS

    def extract(self, body: dict[str, Any] | None) -> Any:
        """Collection stored under ``result_key``, or None when absent."""
        if not isinstance(body, dict):
            return None
        return body.get(self.result_key)


@dataclass(frozen=True)
class DetectorResult:
    """Outcome of invoking one detector during a refresh."""

    label: str
    payload: Any = None
    ok: bool = True
    error: str | None = None

    @property
    def empty(self) -> bool:
        return not self.payload


def build_detector_specs(
    client: AntiPatternClient,
    config: DetectorApiConfig | None = None,
) -> list[DetectorSpec]:
    """Detector specs for every configured endpoint, in registry order."""
    api_config = config or get_config().detectors
    specs: list[DetectorSpec] = []
    for endpoint in api_config.endpoints:
        specs.append(DetectorSpec(
            label=endpoint.label,
            result_key=endpoint.result_key,
            fetch=_bind_fetch(client, endpoint.endpoint, endpoint.label),
        ))
    return specs


def _bind_fetch(client: AntiPatternClient, endpoint: str, label: str) -> FetchFn:
    def fetch() -> dict[str, Any] | None:
        return client.fetch_endpoint(endpoint, label=label)

    return fetch


def labels(specs: Sequence[DetectorSpec]) -> list[str]:
    return [spec.label for spec in specs]
