"""
Refresh pipeline and dashboard state.

A refresh fetches every detector, normalizes each payload, concatenates the
results in registry order and only then swaps the new collection into the
state and recomputes selection defaults. If the join/flatten stage fails, the
previous (stale but consistent) collection is kept and the error recorded.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any

from antipattern_insights.api.models import ChartAggregate
from antipattern_insights.core.constants import ChartKind
from antipattern_insights.core.exceptions import AggregationError
from antipattern_insights.core.logging import EventType, get_logger, log_event
from antipattern_insights.detectors.aggregator import fetch_detector_results
from antipattern_insights.detectors.registry import DetectorSpec
from antipattern_insights.detectors.report import REPORT_CATEGORIES
from antipattern_insights.insights.charts import project, project_all
from antipattern_insights.insights.filters import (
    SelectionState,
    distinct_patterns,
    distinct_services,
)
from antipattern_insights.insights.models import Insight
from antipattern_insights.insights.normalizer import normalize, utc_today
from antipattern_insights.insights.severity import SeverityThresholds, reclassify

logger = get_logger(__name__)


@dataclass(frozen=True)
class CollectionResult:
    insights: tuple[Insight, ...]
    failed_detectors: tuple[str, ...] = ()


def collect_insights(
    specs: Sequence[DetectorSpec],
    *,
    today: str | None = None,
    max_workers: int | None = None,
    thresholds: SeverityThresholds | None = None,
) -> CollectionResult:
    """Fetch, normalize and concatenate every detector's findings.

    Raises:
        AggregationError: If the join or flatten stage fails as a whole.
    """
    date = today or utc_today()
    results = fetch_detector_results(specs, max_workers=max_workers)

    try:
        insights: list[Insight] = []
        # Results come back in registry order, one per spec
        for spec, result in zip(specs, results, strict=True):
            insights.extend(normalize(
                spec.label,
                result.payload,
                today=date,
                count_fields=spec.count_fields,
                mapping_count_fields=spec.mapping_count_fields,
                thresholds=thresholds,
            ))
    except Exception as e:
        raise AggregationError(reason="normalization failed", detector_count=len(specs), cause=e) from e

    return CollectionResult(
        insights=tuple(insights),
        failed_detectors=tuple(r.label for r in results if not r.ok),
    )


def insights_from_aggregate(
    aggregate: Mapping[str, Any] | None,
    *,
    today: str | None = None,
    thresholds: SeverityThresholds | None = None,
) -> list[Insight]:
    """Normalize the single aggregate-endpoint response (alternate path)."""
    date = today or utc_today()
    insights: list[Insight] = []
    for category in REPORT_CATEGORIES:
        insights.extend(normalize(
            category.label, category.collection(aggregate), today=date, thresholds=thresholds
        ))
    return insights


@dataclass(frozen=True)
class DashboardState:
    """Everything the dashboard shows, derived views computed on demand."""

    insights: tuple[Insight, ...] = ()
    selection: SelectionState = field(default_factory=SelectionState)
    error: str | None = None
    last_refreshed: str | None = None
    failed_detectors: tuple[str, ...] = ()

    @property
    def available_services(self) -> list[str]:
        return distinct_services(self.insights)

    @property
    def available_patterns(self) -> list[str]:
        return distinct_patterns(self.insights)

    def filtered_view(self) -> list[Insight]:
        return self.selection.apply(self.insights)

    def active_patterns(self) -> list[str]:
        """Selected patterns in display order, or every known pattern when none are."""
        if not self.selection.selected_patterns:
            return self.available_patterns
        known = [p for p in self.available_patterns if p in self.selection.selected_patterns]
        extra = sorted(self.selection.selected_patterns.difference(known))
        return known + extra

    def chart(self, kind: ChartKind | str, active_patterns: Sequence[str] | None = None) -> ChartAggregate:
        patterns = self.active_patterns() if active_patterns is None else list(active_patterns)
        return project(self.filtered_view(), kind, patterns)

    def charts(self, active_patterns: Sequence[str] | None = None) -> dict[ChartKind, ChartAggregate]:
        patterns = self.active_patterns() if active_patterns is None else list(active_patterns)
        return project_all(self.filtered_view(), patterns)

    def with_selection(self, selection: SelectionState) -> DashboardState:
        return replace(self, selection=selection)

    def with_thresholds(self, thresholds: SeverityThresholds) -> DashboardState:
        """Explicit re-classification pass after a threshold change."""
        return replace(self, insights=tuple(reclassify(self.insights, thresholds)))

    def with_collection(self, collected: CollectionResult) -> DashboardState:
        """Swap in a settled collection, keeping this state's selection."""
        # Defaults are derived only once the new collection has fully settled
        return DashboardState(
            insights=collected.insights,
            selection=self.selection.initialize_defaults(collected.insights),
            error=None,
            last_refreshed=datetime.now(timezone.utc).isoformat(),
            failed_detectors=collected.failed_detectors,
        )


def _collect_logged(
    specs: Sequence[DetectorSpec],
    *,
    today: str | None,
    max_workers: int | None,
    thresholds: SeverityThresholds | None,
) -> CollectionResult:
    log_event(logger, logging.INFO, EventType.REFRESH_START, "dashboard", "refreshing", detectors=len(specs))
    try:
        collected = collect_insights(specs, today=today, max_workers=max_workers, thresholds=thresholds)
    except AggregationError as e:
        log_event(logger, logging.ERROR, EventType.REFRESH_FAILED, "dashboard", str(e))
        raise
    log_event(
        logger, logging.INFO, EventType.REFRESH_COMPLETE, "dashboard", "refreshed",
        insights=len(collected.insights), failed=len(collected.failed_detectors),
    )
    return collected


def refresh(
    state: DashboardState,
    specs: Sequence[DetectorSpec],
    *,
    today: str | None = None,
    max_workers: int | None = None,
    thresholds: SeverityThresholds | None = None,
) -> DashboardState:
    """Re-run the whole pipeline, returning the next state.

    The new collection replaces the old one entirely. On ``AggregationError``
    the prior insights and selection are returned unchanged with ``error`` set.
    """
    try:
        collected = _collect_logged(specs, today=today, max_workers=max_workers, thresholds=thresholds)
    except AggregationError as e:
        return replace(state, error=str(e))
    return state.with_collection(collected)


class InsightDashboard:
    """Holds the current ``DashboardState`` for long-lived callers.

    Readers always see a complete state: refreshes fetch outside the lock,
    then apply the new collection to whatever state is current and swap the
    reference under the lock.
    """

    def __init__(
        self,
        specs: Sequence[DetectorSpec],
        *,
        max_workers: int | None = None,
        thresholds: SeverityThresholds | None = None,
    ) -> None:
        self._specs = list(specs)
        self._max_workers = max_workers
        self._thresholds = thresholds
        self._state = DashboardState()
        self._lock = threading.Lock()
        self._refresh_lock = threading.Lock()
        self._loading = False

    @property
    def state(self) -> DashboardState:
        with self._lock:
            return self._state

    @property
    def loading(self) -> bool:
        return self._loading

    @property
    def detector_labels(self) -> list[str]:
        return [spec.label for spec in self._specs]

    def refresh(self, today: str | None = None) -> DashboardState:
        """Run one refresh; concurrent callers wait for the one in flight."""
        with self._refresh_lock:
            self._loading = True
            try:
                return self._refresh(today)
            finally:
                self._loading = False

    def _refresh(self, today: str | None) -> DashboardState:
        with self._lock:
            thresholds = self._thresholds
        try:
            collected = _collect_logged(
                self._specs, today=today, max_workers=self._max_workers, thresholds=thresholds
            )
        except AggregationError as e:
            with self._lock:
                self._state = replace(self._state, error=str(e))
                return self._state

        # Selection and threshold changes made while fetching win over the
        # state this refresh started from
        with self._lock:
            if self._thresholds is not thresholds:
                collected = replace(
                    collected, insights=tuple(reclassify(collected.insights, self._thresholds))
                )
            self._state = self._state.with_collection(collected)
            return self._state

    def update_selection(self, selection: SelectionState) -> DashboardState:
        with self._lock:
            self._state = self._state.with_selection(selection)
            return self._state

    def set_thresholds(self, thresholds: SeverityThresholds) -> DashboardState:
        """Change severity bands and re-classify the current collection."""
        with self._lock:
            self._thresholds = thresholds
            self._state = self._state.with_thresholds(thresholds)
            return self._state
