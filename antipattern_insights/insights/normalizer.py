"""
Normalization of heterogeneous detector payloads into ``Insight`` records.

Detectors answer in one of two shapes:

- a sequence of finding objects, each naming its subject in one of
  ``SEQUENCE_SUBJECT_FIELDS`` and its magnitude in one of ``SEQUENCE_COUNT_FIELDS``
- a mapping of subject name to a detail object carrying one of
  ``MAPPING_COUNT_FIELDS``

The shape is resolved once, here. Everything downstream only sees ``Insight``.
Missing fields fall back to the ``"Unknown"`` subject and a count of 1.
"""

from __future__ import annotations

import math
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from antipattern_insights.core.constants import (
    DEFAULT_COUNT,
    MAPPING_COUNT_FIELDS,
    SEQUENCE_COUNT_FIELDS,
    SEQUENCE_SUBJECT_FIELDS,
    UNKNOWN_SERVICE,
)
from antipattern_insights.core.logging import get_logger
from antipattern_insights.insights.models import Insight
from antipattern_insights.insights.severity import SeverityThresholds, classify

logger = get_logger(__name__)


class PayloadShape(str, Enum):
    """Tagged shape of a raw detector payload."""

    SEQUENCE = "sequence"
    MAPPING = "mapping"
    EMPTY = "empty"


def utc_today() -> str:
    """Current processing date, UTC, as YYYY-MM-DD."""
    return datetime.now(timezone.utc).date().isoformat()


def resolve_payload_shape(payload: Any) -> PayloadShape:
    """Decide which of the two payload shapes ``payload`` has.

    Anything that is neither a non-empty sequence nor a non-empty mapping
    resolves to ``EMPTY`` rather than being guessed at.
    """
    if payload is None:
        return PayloadShape.EMPTY
    if isinstance(payload, Mapping):
        return PayloadShape.MAPPING if payload else PayloadShape.EMPTY
    if isinstance(payload, Sequence) and not isinstance(payload, (str, bytes)):
        return PayloadShape.SEQUENCE if payload else PayloadShape.EMPTY
    logger.debug(f"Unrecognized payload type {type(payload).__name__}, treating as empty")
    return PayloadShape.EMPTY


def _as_count(value: Any) -> int | None:
    """Interpret a candidate magnitude value, or None if it is unusable."""
    if not value or isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value >= 1 else None
    if isinstance(value, float):
        number = value
    elif isinstance(value, str):
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    # NaN and infinities ("nan", "inf", "1e400") are unusable, not fatal
    if not math.isfinite(number):
        return None
    try:
        count = int(number)
    except (ValueError, OverflowError):
        return None
    return count if count >= 1 else None


def resolve_count(details: Any, fields: Sequence[str]) -> int:
    """First usable magnitude among ``fields`` (in order), else the default count."""
    if not isinstance(details, Mapping):
        return DEFAULT_COUNT
    for field_name in fields:
        count = _as_count(details.get(field_name))
        if count is not None:
            return count
    return DEFAULT_COUNT


def resolve_subject(element: Any, fields: Sequence[str] = SEQUENCE_SUBJECT_FIELDS) -> str:
    """Subject named by a sequence element.

    A bare string element is its own subject (bottleneck detectors list plain
    service names).
    """
    if isinstance(element, str):
        return element or UNKNOWN_SERVICE
    if isinstance(element, Mapping):
        for field_name in fields:
            value = element.get(field_name)
            if value:
                return str(value)
    return UNKNOWN_SERVICE


def normalize(
    label: str,
    payload: Any,
    *,
    today: str | None = None,
    count_fields: Sequence[str] = SEQUENCE_COUNT_FIELDS,
    mapping_count_fields: Sequence[str] = MAPPING_COUNT_FIELDS,
    subject_fields: Sequence[str] = SEQUENCE_SUBJECT_FIELDS,
    thresholds: SeverityThresholds | None = None,
) -> list[Insight]:
    """Convert one detector's payload into insights.

    Args:
        label: Detector label, copied verbatim into ``Insight.name``.
        payload: The collection found under the detector's result key.
        today: Date stamp shared by every insight of one refresh run.
        count_fields: Magnitude candidates for sequence elements.
        mapping_count_fields: Magnitude candidates for mapping detail objects.
        subject_fields: Subject candidates for sequence elements.
        thresholds: Severity bands (defaults to 10 / 5).

    Returns:
        One insight per element (sequence) or per key (mapping); empty for an
        absent or unrecognized payload.
    """
    shape = resolve_payload_shape(payload)
    if shape is PayloadShape.EMPTY:
        return []

    date = today or utc_today()
    insights: list[Insight] = []

    if shape is PayloadShape.SEQUENCE:
        for element in payload:
            count = resolve_count(element, count_fields)
            insights.append(Insight(
                service=resolve_subject(element, subject_fields),
                name=label,
                count=count,
                severity=classify(count, thresholds),
                date=date,
            ))
    else:
        for subject, details in payload.items():
            count = resolve_count(details, mapping_count_fields)
            insights.append(Insight(
                service=str(subject),
                name=label,
                count=count,
                severity=classify(count, thresholds),
                date=date,
            ))

    return insights
