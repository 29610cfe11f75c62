"""
Structured JSON logging for Extraction Scorer.

Every record becomes one JSON object per line carrying a UTC timestamp, the
level, the emitting module and the message, plus the optional structured
``context`` dict and the ``field_key`` being scored.

Library modules only call logging.getLogger(__name__) and never install
handlers. An application embedding the scorer calls setup_logging() once;
INFO is the default level and verbose=True switches to DEBUG, which shows
comparator fallbacks and ranking decisions.

Examples:
    >>> from extraction_scorer.utils.logging import get_logger, setup_logging
    >>> setup_logging(verbose=True)
    >>> logger = get_logger("extraction_scorer.compare.engine")
    >>> logger.debug("Durations differ", extra={"field_key": "term"})
"""

import json
import logging
import sys
from typing import IO, Any

from extraction_scorer.utils.time import utc_timestamp


class JSONFormatter(logging.Formatter):
    """
    Render log records as single-line JSON.

    Keys:
    - timestamp: UTC time the record was formatted (ISO 8601, 'Z' suffix)
    - level: Level name
    - component: Logger name, normally the emitting module
    - message: Formatted message
    - context: Structured data passed as extra={"context": {...}}
    - field_key: Field being scored, passed as extra={"field_key": ...}
    - exception: Formatted traceback when exc_info is set
    """

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": utc_timestamp(),
            "level": record.levelname,
            "component": record.name,
            "message": record.getMessage(),
        }

        context = getattr(record, "context", None)
        if isinstance(context, dict):
            entry["context"] = context

        if hasattr(record, "field_key"):
            entry["field_key"] = record.field_key

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        # Values compared by the engine are arbitrary user text
        return json.dumps(entry, default=str)


def setup_logging(verbose: bool = False, stream: IO[str] | None = None) -> None:
    """
    Route all logging through a single JSON handler.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        verbose: Log at DEBUG instead of INFO
        stream: Destination stream (stderr when omitted)
    """
    level = logging.DEBUG if verbose else logging.INFO

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(JSONFormatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)


def get_logger(component: str) -> logging.Logger:
    """Return the logger for a component name (e.g. "extraction_scorer.ranking.engine")."""
    return logging.getLogger(component)


def log_with_context(
    logger: logging.Logger,
    level: int,
    message: str,
    context: dict[str, Any] | None = None,
    field_key: str | None = None,
) -> None:
    """
    Log a message with optional structured context and field key.

    Shorthand for logger.log(level, message, extra={"context": ..., "field_key": ...})
    that leaves out whichever extras are None.

    Example:
        >>> log_with_context(
        ...     get_logger("extraction_scorer.evals.metrics"),
        ...     logging.DEBUG,
        ...     "Field metrics computed",
        ...     context={"true_positives": 8, "false_positives": 2},
        ...     field_key="counterparty",
        ... )
    """
    extra: dict[str, Any] = {}
    if context is not None:
        extra["context"] = context
    if field_key is not None:
        extra["field_key"] = field_key

    logger.log(level, message, extra=extra or None)
