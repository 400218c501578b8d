"""
HTTP client for the anti-pattern analysis API.

Each detector lives under ``{base_url}/{endpoint}`` and answers with a JSON
object holding its findings under a detector-specific key. A failing endpoint
is logged and reported as ``None`` so that it never takes the other detectors
down with it.
"""

from __future__ import annotations

import logging
import time
from types import TracebackType
from typing import Any

import requests
import urllib3

from antipattern_insights.core.config import DetectorApiConfig, get_config
from antipattern_insights.core.exceptions import DetectorFetchError
from antipattern_insights.core.logging import EventType, get_logger, log_event

logger = get_logger(__name__)


class AntiPatternClient:
    """Pooled requests client for the detector endpoints.

    Example:
        >>> with AntiPatternClient() as client:
        ...     body = client.fetch_endpoint("cyclic")
        ...     cycles = body.get("cycles", []) if body else []
    """

    def __init__(
        self,
        base_url: str | None = None,
        config: DetectorApiConfig | None = None,
    ) -> None:
        self._config = config or get_config().detectors
        self._base_url = (base_url or self._config.base_url).rstrip("/")
        self._session = self._create_session()

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def timeout(self) -> int:
        return self._config.timeout_seconds

    def _create_session(self) -> requests.Session:
        """Create a configured requests session with connection pooling."""
        session = requests.Session()

        adapter = requests.adapters.HTTPAdapter(
            pool_connections=self._config.pool_connections,
            pool_maxsize=self._config.pool_maxsize,
            max_retries=urllib3.util.retry.Retry(
                total=self._config.max_retries,
                backoff_factor=self._config.retry_backoff_factor,
                status_forcelist=[500, 502, 503, 504],
                allowed_methods=["GET"],
            ),
            pool_block=False,
        )

        session.mount("http://", adapter)
        session.mount("https://", adapter)
        session.headers.update({"Accept": "application/json"})

        return session

    def url_for(self, endpoint: str) -> str:
        return f"{self._base_url}/{endpoint.lstrip('/')}"

    def get_json(self, endpoint: str, *, label: str | None = None) -> dict[str, Any]:
        """GET an endpoint and return its JSON object body.

        Raises:
            DetectorFetchError: On transport errors, non-2xx status, or a body
                that is empty or not a JSON object.
        """
        url = self.url_for(endpoint)
        name = label or endpoint
        try:
            response = self._session.get(url, timeout=self._config.timeout_seconds)
        except requests.RequestException as e:
            raise DetectorFetchError(name, endpoint=url, reason="request failed", cause=e) from e

        if not response.ok:
            raise DetectorFetchError(
                name,
                endpoint=url,
                status_code=response.status_code,
                reason=f"network response was not ok: {response.reason}",
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DetectorFetchError(name, endpoint=url, reason="invalid JSON body", cause=e) from e

        if not data:
            raise DetectorFetchError(name, endpoint=url, reason="empty response body")
        if not isinstance(data, dict):
            raise DetectorFetchError(
                name, endpoint=url, reason=f"expected JSON object, got {type(data).__name__}"
            )
        return data

    def fetch_endpoint(self, endpoint: str, *, label: str | None = None) -> dict[str, Any] | None:
        """Fetch one detector endpoint; ``None`` (logged) on any failure."""
        name = label or endpoint
        try:
            data = self.get_json(endpoint, label=name)
        except DetectorFetchError as e:
            log_event(logger, logging.WARNING, EventType.DETECTOR_FAILED, name, str(e))
            return None
        log_event(logger, logging.DEBUG, EventType.DETECTOR_FETCHED, name, "ok", keys=",".join(sorted(data)))
        return data

    def fetch_all(self) -> dict[str, Any] | None:
        """Fetch the aggregate endpoint holding every anti-pattern category."""
        return self.fetch_endpoint(self._config.aggregate_endpoint, label="all")

    def health_check(self, max_latency_ms: float = 5000) -> tuple[bool, dict[str, Any]]:
        """Check the aggregate endpoint of the analysis API.

        The API counts as healthy when the aggregate report parses as a JSON
        object within ``max_latency_ms``. Details carry the base URL, how many
        detectors are configured against it and the report categories served.

        Returns:
            Tuple of (is_healthy, details_dict).
        """
        details: dict[str, Any] = {
            "base_url": self._base_url,
            "detectors_configured": len(self._config.endpoints),
            "latency_ms": None,
            "status_code": None,
            "categories": [],
            "error": None,
        }

        started = time.perf_counter()
        try:
            body = self.get_json(self._config.aggregate_endpoint, label="health")
        except DetectorFetchError as e:
            details["status_code"] = e.status_code
            details["error"] = str(e.cause or e.message)
            return False, details
        finally:
            details["latency_ms"] = round((time.perf_counter() - started) * 1000, 2)

        details["categories"] = sorted(body)
        if details["latency_ms"] > max_latency_ms:
            details["error"] = f"aggregate report took {details['latency_ms']:.0f}ms (limit {max_latency_ms:.0f}ms)"
            return False, details
        return True, details

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> AntiPatternClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
