"""
Configuration constants for Extraction Scorer.

This module contains global constants used across the comparator, the ranking
engine and the aggregation step. They are tuned against observed extraction
results; change them here rather than inlining values in the algorithms.
"""

# Two real-valued metrics closer than this are treated as equal, both when
# picking field winners and when ordering models
FLOATING_POINT_PRECISION = 0.001

# Shorter side of a containment match must have at least this many folded
# characters ("ny" inside "new york" is rejected, "acme corp" is accepted)
MIN_PARTIAL_MATCH_LENGTH = 3

# Duration unit ratios, in days
DAYS_PER_WEEK = 7
DAYS_PER_MONTH = 30
DAYS_PER_YEAR = 365

# Durations at least this long are also compared in whole 30-day months,
# so "2 years" (730 days) equals "24 months" (720 days)
MONTH_EQUIVALENCE_MIN_DAYS = 28

# Fraction of list items that must find a counterpart for a partial list match
LIST_PARTIAL_MATCH_THRESHOLD = 0.5

# Placeholder written by the extraction layer when a value is absent
NOT_PRESENT_VALUE = "Not Present"

# UI status placeholders that never count as extracted values
PENDING_STATE_PREFIXES = ("Pending", "Error", "Not Found")

# Predictions still being extracted; metrics leave these rows out entirely
UNSCORED_PREDICTION_PREFIXES = ("Pending", "Error")

# Minimum rapidfuzz ratio (0-100) for fuzzy enum option matching
ENUM_FUZZY_THRESHOLD = 90.0

# Score tiers used by consumers to badge model performance
PERFORMANCE_THRESHOLDS = {
    "excellent": 0.9,
    "good": 0.7,
    "poor": 0.0,
}

DEFAULT_LLM_COMPARISON_PROMPT = (
    "Determine if these two values are semantically equivalent. "
    "Focus on meaning rather than exact phrasing."
)

COMPARE_TYPE_CONFIG_VERSION = "1.0.0"
