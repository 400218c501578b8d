"""
Centralized configuration management for the anti-pattern insights pipeline.

This module provides a single source of truth for all configuration values,
supporting:
- JSON configuration file (config.json)
- Environment variable overrides
- Programmatic defaults

Configuration is loaded in priority order:
1. Environment variables (highest priority)
2. JSON config file
3. Dataclass defaults (lowest priority)
"""

from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from antipattern_insights.core.constants import (
    DEFAULT_HIGH_THRESHOLD,
    DEFAULT_MEDIUM_THRESHOLD,
    WeightType,
)
from antipattern_insights.core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

# Default config file locations (searched in order)
CONFIG_FILE_PATHS = [
    Path("config.json"),
    Path("./config/config.json"),
    Path.home() / ".antipattern_insights" / "config.json",
    Path("/etc/antipattern_insights/config.json"),
]


def _load_config_file() -> dict[str, Any]:
    """Load configuration from JSON file.

    Searches for config file in standard locations, or uses
    CONFIG_FILE environment variable if set.

    Returns:
        Dictionary of configuration values, or empty dict if no file found.
    """
    env_config_path = os.getenv("CONFIG_FILE")
    if env_config_path:
        config_path = Path(env_config_path)
        if config_path.exists():
            with config_path.open() as f:
                return json.load(f)
        else:
            logger.warning(f"CONFIG_FILE specified but not found: {env_config_path}")

    for path in CONFIG_FILE_PATHS:
        if path.exists():
            with path.open() as f:
                return json.load(f)

    return {}


def _get_env_or_config(
    env_key: str,
    config_dict: dict[str, Any],
    config_key: str,
    default: Any,
    type_cast: type | None = None
) -> Any:
    """Get value from environment, config file, or default (in priority order).

    Args:
        env_key: Environment variable name
        config_dict: Config dictionary section
        config_key: Key within config dictionary
        default: Default value if not found
        type_cast: Optional type to cast the value to

    Returns:
        Configuration value from highest priority source
    """
    env_value = os.getenv(env_key)
    if env_value is not None:
        if type_cast is bool:
            return env_value.lower() in ("true", "1", "yes")
        try:
            return type_cast(env_value) if type_cast else env_value
        except ValueError as e:
            raise ConfigurationError(env_key, reason=str(e), value=env_value) from e

    if config_key in config_dict:
        return config_dict[config_key]

    return default


# Detector label -> (endpoint path, result key). Order is the registry order.
DEFAULT_DETECTOR_ENDPOINTS: dict[str, tuple[str, str]] = {
    "Cyclic Dependencies": ("cyclic", "cycles"),
    "Knot Pattern": ("knot", "dense_clusters"),
    "Bottleneck Services": ("bottleneck", "services"),
    "Nano Services": ("nano-services", "services"),
    "Long Service Chains": ("long-chain", "chains"),
    "Fan-In Overload": ("fan-in", "services"),
    "Fan-Out Overload": ("fan-out", "services"),
    "Chatty Services": ("chatty", "services"),
    "Synchronous Call Overuse": ("sync-overuse", "issues"),
    "Improper API Gateway Usage": ("api-gateway", "issues"),
    "Eventual Consistency Issues": ("consistency", "issues"),
    "Improper Load Balancer": ("load-balancer", "imbalances"),
}


@dataclass(frozen=True)
class DetectorEndpointConfig:
    """One detector endpoint as configured."""

    label: str
    endpoint: str
    result_key: str

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DetectorEndpointConfig:
        """Create from config dict."""
        try:
            return cls(
                label=data["label"],
                endpoint=data["endpoint"],
                result_key=data["result_key"],
            )
        except KeyError as e:
            raise ConfigurationError(
                "detectors.endpoints", reason=f"missing field {e.args[0]}", value=data
            ) from e


def _default_endpoints() -> tuple[DetectorEndpointConfig, ...]:
    return tuple(
        DetectorEndpointConfig(label=label, endpoint=endpoint, result_key=key)
        for label, (endpoint, key) in DEFAULT_DETECTOR_ENDPOINTS.items()
    )


@dataclass(frozen=True)
class DetectorApiConfig:
    """Configuration for the anti-pattern detector API client."""

    base_url: str = "http://localhost:8000/api/anti-patterns"
    aggregate_endpoint: str = "all"
    timeout_seconds: int = 10
    max_retries: int = 0
    retry_backoff_factor: float = 0.3
    pool_connections: int = 20
    pool_maxsize: int = 20
    max_workers: int = 12
    endpoints: tuple[DetectorEndpointConfig, ...] = field(default_factory=_default_endpoints)

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> DetectorApiConfig:
        """Create configuration from config dict with environment overrides."""
        api_config = config.get("detectors", {})
        endpoint_list = api_config.get("endpoints")
        endpoints = (
            tuple(DetectorEndpointConfig.from_dict(e) for e in endpoint_list)
            if endpoint_list
            else _default_endpoints()
        )
        max_workers = _get_env_or_config(
            "ANTIPATTERN_MAX_WORKERS", api_config, "max_workers", cls.max_workers, int
        )
        if max_workers < 1:
            raise ConfigurationError("max_workers", reason="must be at least 1", value=max_workers)
        return cls(
            base_url=_get_env_or_config("ANTIPATTERN_API_URL", api_config, "base_url", cls.base_url),
            aggregate_endpoint=api_config.get("aggregate_endpoint", cls.aggregate_endpoint),
            timeout_seconds=_get_env_or_config(
                "ANTIPATTERN_TIMEOUT", api_config, "timeout_seconds", cls.timeout_seconds, int
            ),
            max_retries=api_config.get("max_retries", cls.max_retries),
            retry_backoff_factor=api_config.get("retry_backoff_factor", cls.retry_backoff_factor),
            pool_connections=api_config.get("pool_connections", cls.pool_connections),
            pool_maxsize=api_config.get("pool_maxsize", cls.pool_maxsize),
            max_workers=max_workers,
            endpoints=endpoints,
        )

    @classmethod
    def from_env(cls) -> DetectorApiConfig:
        """Create configuration from config file and environment variables."""
        return cls.from_config(_load_config_file())


@dataclass(frozen=True)
class GraphApiConfig:
    """Configuration for the graph and trace endpoints."""

    base_url: str = "http://localhost:8000/api"
    weighted_endpoint: str = "/graphs/weight"
    architecture_endpoint: str = "/graph"
    traces_url: str = "http://localhost:8085/traces"
    timeout_seconds: int = 10
    default_weight_type: WeightType = WeightType.CO_EXECUTION

    @property
    def weighted_url(self) -> str:
        """Full URL for the weighted dependency graph endpoint."""
        return f"{self.base_url}{self.weighted_endpoint}"

    @property
    def architecture_url(self) -> str:
        """Full URL for the system architecture graph endpoint."""
        return f"{self.base_url}{self.architecture_endpoint}"

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> GraphApiConfig:
        """Create configuration from config dict with environment overrides."""
        graph_config = config.get("graphs", {})
        weight_type = graph_config.get("default_weight_type", cls.default_weight_type.value)
        try:
            weight_type = WeightType(weight_type)
        except ValueError as e:
            raise ConfigurationError(
                "graphs.default_weight_type",
                reason=f"expected one of {[w.value for w in WeightType]}",
                value=weight_type,
            ) from e
        return cls(
            base_url=_get_env_or_config("GRAPH_API_URL", graph_config, "base_url", cls.base_url),
            weighted_endpoint=graph_config.get("weighted_endpoint", cls.weighted_endpoint),
            architecture_endpoint=graph_config.get("architecture_endpoint", cls.architecture_endpoint),
            traces_url=_get_env_or_config("TRACES_URL", graph_config, "traces_url", cls.traces_url),
            timeout_seconds=graph_config.get("timeout_seconds", cls.timeout_seconds),
            default_weight_type=weight_type,
        )


@dataclass(frozen=True)
class SeverityConfig:
    """Count thresholds for severity classification."""

    high: int = DEFAULT_HIGH_THRESHOLD
    medium: int = DEFAULT_MEDIUM_THRESHOLD

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> SeverityConfig:
        """Create configuration from config dict."""
        severity_config = config.get("severity", {})
        return cls(
            high=severity_config.get("high", cls.high),
            medium=severity_config.get("medium", cls.medium),
        )


@dataclass(frozen=True)
class DashboardConfig:
    """Configuration for the dashboard HTTP API."""

    host: str = "127.0.0.1"
    port: int = 8050
    refresh_on_startup: bool = True

    @classmethod
    def from_config(cls, config: dict[str, Any]) -> DashboardConfig:
        """Create configuration from config dict with environment overrides."""
        dash_config = config.get("dashboard", {})
        return cls(
            host=_get_env_or_config("DASHBOARD_HOST", dash_config, "host", cls.host),
            port=_get_env_or_config("DASHBOARD_PORT", dash_config, "port", cls.port, int),
            refresh_on_startup=_get_env_or_config(
                "DASHBOARD_REFRESH_ON_STARTUP", dash_config, "refresh_on_startup", cls.refresh_on_startup, bool
            ),
        )


@dataclass
class InsightsConfig:
    """Root configuration aggregating all sub-configurations."""

    detectors: DetectorApiConfig = field(default_factory=DetectorApiConfig)
    graphs: GraphApiConfig = field(default_factory=GraphApiConfig)
    severity: SeverityConfig = field(default_factory=SeverityConfig)
    dashboard: DashboardConfig = field(default_factory=DashboardConfig)

    # Track which config file was loaded (if any)
    config_file_path: str | None = None

    @classmethod
    def from_file(cls, file_path: str | Path) -> InsightsConfig:
        """Load configuration from a specific JSON file.

        Raises:
            FileNotFoundError: If the config file doesn't exist.
            json.JSONDecodeError: If the file contains invalid JSON.
        """
        path = Path(file_path)
        with path.open() as f:
            config_dict = json.load(f)
        return cls.from_config(config_dict, config_file_path=str(path))

    @classmethod
    def from_config(cls, config: dict[str, Any], config_file_path: str | None = None) -> InsightsConfig:
        """Create full configuration from config dictionary."""
        return cls(
            detectors=DetectorApiConfig.from_config(config),
            graphs=GraphApiConfig.from_config(config),
            severity=SeverityConfig.from_config(config),
            dashboard=DashboardConfig.from_config(config),
            config_file_path=config_file_path,
        )

    @classmethod
    def from_env(cls) -> InsightsConfig:
        """Create full configuration from config file and environment variables."""
        config_dict = _load_config_file()

        config_path = None
        env_config = os.getenv("CONFIG_FILE")
        if env_config and Path(env_config).exists():
            config_path = env_config
        else:
            for path in CONFIG_FILE_PATHS:
                if path.exists():
                    config_path = str(path)
                    break

        return cls.from_config(config_dict, config_file_path=config_path)


# Global configuration instance - can be overridden for testing
_config: InsightsConfig | None = None


def get_config() -> InsightsConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = InsightsConfig.from_env()
    return _config


def set_config(config: InsightsConfig) -> None:
    """Set the global configuration instance (useful for testing)."""
    global _config
    _config = config


def reset_config() -> None:
    """Reset configuration to be reloaded on next access."""
    global _config
    _config = None
