"""
Logging setup for the anti-pattern insights pipeline.

Log records go to stderr so that commands printing JSON on stdout stay
parseable. Pipeline milestones (a detector answering, a refresh settling, a
graph failing) are logged through ``log_event``, which tags each record with
its event and subject so the JSON format can carry them as fields.
"""

from __future__ import annotations

import logging
import sys
from enum import Enum
from typing import Any

_configured: bool = False

TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s %(message)s"
JSON_FORMAT = (
    '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", '
    '"event": "%(event)s", "subject": "%(subject)s", "message": "%(message)s"}'
)
DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"

# Chatty libraries underneath the detector client and the HTTP API
QUIET_LOGGERS: dict[str, int] = {
    "urllib3": logging.ERROR,
    "requests": logging.WARNING,
    "uvicorn.access": logging.WARNING,
    "httpx": logging.WARNING,
}


class EventType(str, Enum):
    """Pipeline milestones tagged onto structured log records."""

    DETECTOR_FETCHED = "DETECTOR_FETCHED"
    DETECTOR_FAILED = "DETECTOR_FAILED"
    DETECTOR_EMPTY = "DETECTOR_EMPTY"

    REFRESH_START = "REFRESH_START"
    REFRESH_COMPLETE = "REFRESH_COMPLETE"
    REFRESH_FAILED = "REFRESH_FAILED"

    GRAPH_FETCHED = "GRAPH_FETCHED"
    GRAPH_FAILED = "GRAPH_FAILED"


class _EventFields(logging.Filter):
    """Give records logged outside ``log_event`` empty event fields."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "event"):
            record.event = ""
            record.subject = ""
        return True


def configure_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    json_format: bool = False,
) -> None:
    """Install the stderr handler on the root logger.

    Calling it again replaces the previous handler, so the CLI's choice wins
    over the implicit setup done by ``get_logger``.

    Args:
        level: Base logging level.
        verbose: Force DEBUG regardless of ``level``.
        json_format: One JSON object per line instead of plain text.
    """
    global _configured

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(_EventFields())
    handler.setFormatter(logging.Formatter(JSON_FORMAT if json_format else TEXT_FORMAT, DATE_FORMAT))

    logging.basicConfig(
        level=logging.DEBUG if verbose else level,
        handlers=[handler],
        force=True,
    )
    for name, quiet_level in QUIET_LOGGERS.items():
        logging.getLogger(name).setLevel(quiet_level)

    _configured = True


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name``, configuring defaults on first use."""
    if not _configured:
        configure_logging()
    return logging.getLogger(name)


def log_event(
    logger: logging.Logger,
    level: int,
    event: EventType,
    subject: str,
    message: str,
    **context: Any,
) -> None:
    """Log a pipeline milestone about ``subject`` (a detector label, graph or the dashboard).

    ``log_event(logger, WARNING, EventType.DETECTOR_FAILED, "Knot Pattern", "timeout", endpoint="knot")``
    logs ``DETECTOR_FAILED Knot Pattern: timeout endpoint=knot``.
    """
    if not logger.isEnabledFor(level):
        return
    text = f"{event.value} {subject}: {message}"
    if context:
        text += " " + " ".join(f"{key}={value}" for key, value in context.items())
    logger.log(level, text, extra={"event": event.value, "subject": subject})
