"""
Value Comparator package.

Public API:
    - compare / compare_with_config: Compare an extracted value against a reference
    - MatchResult: Immutable comparison verdict
    - FieldJudge: Protocol for the external llm-judge callable
    - validate_enum_value / validate_multiselect_value: Snap values onto option keys
"""

from extraction_scorer.compare.engine import compare, compare_with_config
from extraction_scorer.compare.enum_validator import (
    find_matching_option,
    validate_enum_value,
    validate_multiselect_value,
)
from extraction_scorer.compare.types import (
    MATCH_CLASSIFICATIONS,
    FieldJudge,
    MatchClassification,
    MatchResult,
)

__all__ = [
    "MATCH_CLASSIFICATIONS",
    "FieldJudge",
    "MatchClassification",
    "MatchResult",
    "compare",
    "compare_with_config",
    "find_matching_option",
    "validate_enum_value",
    "validate_multiselect_value",
]
