"""
Normalized insight record shared by the filter engine and chart projector.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from antipattern_insights.core.constants import Severity


@dataclass(frozen=True)
class Insight:
    """One (subject, pattern, magnitude, severity, date) finding.

    Created by the normalizer and never mutated afterwards.
    """

    service: str
    name: str  # Detector label, verbatim
    count: int  # Always >= 1
    severity: Severity
    date: str  # UTC date, YYYY-MM-DD

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "service": self.service,
            "name": self.name,
            "count": self.count,
            "severity": self.severity.value,
            "date": self.date,
        }
