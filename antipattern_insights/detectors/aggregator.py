"""
Concurrent invocation of every detector with per-detector failure isolation.

All fetches are submitted at once and joined, so a refresh takes about as
long as the slowest detector. A detector that raises, returns nothing, or
lacks its result key contributes an empty result; only a failure of the join
itself aborts the batch with ``AggregationError``.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed

from antipattern_insights.core.exceptions import AggregationError
from antipattern_insights.core.logging import EventType, get_logger, log_event
from antipattern_insights.detectors.registry import DetectorResult, DetectorSpec

logger = get_logger(__name__)


def _invoke_detector(spec: DetectorSpec) -> DetectorResult:
    """Run one detector, converting any failure into an empty result."""
    try:
        body = spec.fetch()
    except Exception as e:
        log_event(logger, logging.WARNING, EventType.DETECTOR_FAILED, spec.label, str(e))
        return DetectorResult(label=spec.label, payload=None, ok=False, error=str(e))

    if body is None:
        return DetectorResult(label=spec.label, payload=None, ok=False, error="no response")

    payload = spec.extract(body)
    if not payload:
        log_event(
            logger, logging.INFO, EventType.DETECTOR_EMPTY, spec.label,
            "no findings", result_key=spec.result_key,
        )
    return DetectorResult(label=spec.label, payload=payload, ok=True)


def fetch_detector_results(
    specs: Sequence[DetectorSpec],
    max_workers: int | None = None,
) -> list[DetectorResult]:
    """Fetch every detector in parallel.

    Args:
        specs: Detectors to invoke.
        max_workers: Thread pool size (defaults to one thread per detector).

    Returns:
        One result per spec, in the same order as ``specs``.

    Raises:
        AggregationError: If the parallel join fails as a whole.
    """
    if not specs:
        return []

    workers = max(1, min(max_workers or len(specs), len(specs)))
    results: list[DetectorResult | None] = [None] * len(specs)

    try:
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="detector") as executor:
            futures = {
                executor.submit(_invoke_detector, spec): index
                for index, spec in enumerate(specs)
            }
            for future in as_completed(futures):
                results[futures[future]] = future.result()
    except Exception as e:
        raise AggregationError(
            reason="detector join failed", detector_count=len(specs), cause=e
        ) from e

    return [r for r in results if r is not None]
