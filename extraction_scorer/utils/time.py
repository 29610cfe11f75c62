"""
UTC timestamp utilities for Extraction Scorer.

All timestamps MUST be in UTC with explicit timezone markers. The scoring
engine itself never reads the clock; timestamps are only attached to log
records.

This module provides:
- utc_now(): Current time as timezone-aware datetime
- utc_timestamp(): ISO 8601 timestamp string with 'Z' suffix

Examples:
    >>> from extraction_scorer.utils.time import utc_timestamp
    >>> utc_timestamp()
    '2025-11-02T08:30:45Z'
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Return current time in UTC with timezone info.

    Returns:
        datetime: Current UTC time with tzinfo=timezone.utc

    Note:
        NEVER use datetime.now() without timezone parameter.
        NEVER use datetime.utcnow() (deprecated, returns naive datetime).
    """
    return datetime.now(UTC)


def utc_timestamp() -> str:
    """
    Return ISO 8601 timestamp string with 'Z' suffix.

    Format: YYYY-MM-DDTHH:MM:SSZ (with colons in time)

    Returns:
        str: ISO 8601 timestamp with 'Z' suffix
    """
    return utc_now().strftime("%Y-%m-%dT%H:%M:%SZ")
