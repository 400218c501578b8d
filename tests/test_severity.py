"""
Tests for severity classification.
"""

from __future__ import annotations

import pytest

from antipattern_insights.core import ConfigurationError, Severity, SeverityConfig
from antipattern_insights.insights import (
    DEFAULT_THRESHOLDS,
    Insight,
    SeverityThresholds,
    classify,
    reclassify,
)


class TestClassify:
    """Tests for classify()."""

    @pytest.mark.parametrize("count,expected", [
        (1, Severity.LOW),
        (4, Severity.LOW),
        (5, Severity.MEDIUM),
        (9, Severity.MEDIUM),
        (10, Severity.HIGH),
        (500, Severity.HIGH),
    ])
    def test_default_bands(self, count, expected):
        assert classify(count) is expected

    def test_custom_bands(self):
        thresholds = SeverityThresholds(high=20, medium=8)
        assert classify(10, thresholds) is Severity.MEDIUM
        assert classify(7, thresholds) is Severity.LOW
        assert classify(20, thresholds) is Severity.HIGH

    def test_severity_values(self):
        assert [s.value for s in Severity.ordered()] == ["High", "Medium", "Low"]


class TestSeverityThresholds:
    """Tests for threshold validation."""

    def test_defaults(self):
        assert DEFAULT_THRESHOLDS.high == 10
        assert DEFAULT_THRESHOLDS.medium == 5

    def test_high_must_exceed_medium(self):
        with pytest.raises(ConfigurationError):
            SeverityThresholds(high=5, medium=5)

    def test_medium_must_be_positive(self):
        with pytest.raises(ConfigurationError):
            SeverityThresholds(high=5, medium=0)

    def test_from_config(self):
        thresholds = SeverityThresholds.from_config(SeverityConfig(high=15, medium=3))
        assert (thresholds.high, thresholds.medium) == (15, 3)


class TestReclassify:
    """Tests for the explicit re-classification pass."""

    def test_severity_recomputed(self, today):
        insights = [Insight("a", "Knot Pattern", 6, Severity.MEDIUM, today)]
        updated = reclassify(insights, SeverityThresholds(high=6, medium=2))
        assert updated[0].severity is Severity.HIGH
        assert insights[0].severity is Severity.MEDIUM  # original untouched

    def test_unchanged_under_same_thresholds(self, sample_insights):
        assert reclassify(sample_insights, DEFAULT_THRESHOLDS) == sample_insights
