"""
HTTP client shared by the graph and trace endpoints.
"""

from __future__ import annotations

from types import TracebackType
from typing import Any

import requests

from antipattern_insights.core.config import GraphApiConfig, get_config
from antipattern_insights.core.exceptions import GraphFetchError
from antipattern_insights.core.logging import get_logger

logger = get_logger(__name__)


class GraphClient:
    """Thin requests wrapper raising ``GraphFetchError`` on any failure."""

    def __init__(self, config: GraphApiConfig | None = None) -> None:
        self._config = config or get_config().graphs
        self._session = requests.Session()
        self._session.headers.update({"Accept": "application/json"})

    @property
    def config(self) -> GraphApiConfig:
        return self._config

    def get_json(self, url: str, params: dict[str, Any] | None = None) -> Any:
        """GET ``url`` and return the decoded JSON body.

        Raises:
            GraphFetchError: On transport errors, non-2xx status or invalid JSON.
        """
        try:
            response = self._session.get(url, params=params, timeout=self._config.timeout_seconds)
        except requests.RequestException as e:
            raise GraphFetchError(url, reason="request failed", cause=e) from e

        if not response.ok:
            raise GraphFetchError(
                url,
                status_code=response.status_code,
                reason=f"network response was not ok: {response.reason}",
            )

        try:
            return response.json()
        except ValueError as e:
            raise GraphFetchError(url, reason="invalid JSON body", cause=e) from e

    def close(self) -> None:
        self._session.close()

    def __enter__(self) -> GraphClient:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        self.close()
