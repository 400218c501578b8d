"""
Severity classification of insight counts.

Severity is assigned once, when an insight is normalized. Changing the
thresholds afterwards has no effect until ``reclassify`` is run explicitly.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, replace

from antipattern_insights.core.config import SeverityConfig
from antipattern_insights.core.constants import (
    DEFAULT_HIGH_THRESHOLD,
    DEFAULT_MEDIUM_THRESHOLD,
    Severity,
)
from antipattern_insights.core.exceptions import ConfigurationError
from antipattern_insights.insights.models import Insight


@dataclass(frozen=True)
class SeverityThresholds:
    """Lower bounds (inclusive) of the Medium and High bands."""

    high: int = DEFAULT_HIGH_THRESHOLD
    medium: int = DEFAULT_MEDIUM_THRESHOLD

    def __post_init__(self) -> None:
        if self.medium < 1:
            raise ConfigurationError("severity.medium", reason="must be at least 1", value=self.medium)
        if self.high <= self.medium:
            raise ConfigurationError(
                "severity.high", reason=f"must be greater than medium ({self.medium})", value=self.high
            )

    @classmethod
    def from_config(cls, config: SeverityConfig) -> SeverityThresholds:
        """Build validated thresholds from the severity config section."""
        return cls(high=config.high, medium=config.medium)


DEFAULT_THRESHOLDS = SeverityThresholds()


def classify(count: int, thresholds: SeverityThresholds | None = None) -> Severity:
    """Map an insight count to its severity band.

    Examples:
        >>> classify(4)
        <Severity.LOW: 'Low'>
        >>> classify(10)
        <Severity.HIGH: 'High'>
    """
    bands = thresholds or DEFAULT_THRESHOLDS
    if count >= bands.high:
        return Severity.HIGH
    if count >= bands.medium:
        return Severity.MEDIUM
    return Severity.LOW


def reclassify(insights: Iterable[Insight], thresholds: SeverityThresholds) -> list[Insight]:
    """Return copies of ``insights`` with severity recomputed under ``thresholds``."""
    return [replace(insight, severity=classify(insight.count, thresholds)) for insight in insights]
