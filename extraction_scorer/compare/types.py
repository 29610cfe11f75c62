"""
Core comparison types for Extraction Scorer.

This module defines the closed set of comparison strategies, the match
classifications the comparator can return, and the MatchResult value object.

Key components:
- CompareType: Literal type of every supported comparison strategy
  (declared with the configuration schema, re-exported here)
- MatchClassification: Literal type describing why two values matched
- MatchResult: Immutable verdict returned by every comparison
- FieldJudge: Protocol for the external llm-judge callable
"""

from dataclasses import dataclass
from typing import Literal, Protocol, get_args

from extraction_scorer.config.schema import COMPARE_TYPES, CompareType

MatchClassification = Literal["exact", "normalized", "partial", "different-format", "none"]

Confidence = Literal["high", "medium", "low"]

MATCH_CLASSIFICATIONS: tuple[str, ...] = get_args(MatchClassification)
CONFIDENCE_LEVELS: tuple[str, ...] = get_args(Confidence)


@dataclass(frozen=True)
class MatchResult:
    """
    Verdict of comparing one extracted value against one reference value.

    Produced fresh for every comparison and never mutated. is_match is True
    for every classification except "none".

    Attributes:
        is_match: Whether the two values represent the same fact
        match_classification: Why they matched ("exact", "normalized",
            "partial", "different-format") or "none"
        compare_type: Strategy that produced the verdict
        confidence: How much to trust the verdict ("high", "medium", "low")
        details: Optional human-readable explanation (debugging / UI tooltips)

    Example:
        >>> result = MatchResult.matched("partial", "near-exact-string", confidence="medium")
        >>> result.is_match
        True
        >>> MatchResult.no_match("boolean").match_classification
        'none'
    """

    is_match: bool
    match_classification: MatchClassification
    compare_type: CompareType
    confidence: Confidence = "high"
    details: str | None = None

    def __post_init__(self):
        """Validate classification values and the is_match/classification pairing."""
        if self.compare_type not in COMPARE_TYPES:
            raise ValueError(
                f"compare_type must be one of {COMPARE_TYPES}, got: {self.compare_type}"
            )
        if self.match_classification not in MATCH_CLASSIFICATIONS:
            raise ValueError(
                f"match_classification must be one of {MATCH_CLASSIFICATIONS}, "
                f"got: {self.match_classification}"
            )
        if self.confidence not in CONFIDENCE_LEVELS:
            raise ValueError(
                f"confidence must be one of {CONFIDENCE_LEVELS}, got: {self.confidence}"
            )
        if self.is_match != (self.match_classification != "none"):
            raise ValueError(
                f"is_match={self.is_match} is inconsistent with "
                f"match_classification={self.match_classification!r}"
            )

    @classmethod
    def matched(
        cls,
        classification: MatchClassification,
        compare_type: CompareType,
        confidence: Confidence = "high",
        details: str | None = None,
    ) -> "MatchResult":
        """Build a positive verdict with the given classification."""
        return cls(
            is_match=True,
            match_classification=classification,
            compare_type=compare_type,
            confidence=confidence,
            details=details,
        )

    @classmethod
    def no_match(
        cls,
        compare_type: CompareType,
        confidence: Confidence = "high",
        details: str | None = None,
    ) -> "MatchResult":
        """Build a negative verdict."""
        return cls(
            is_match=False,
            match_classification="none",
            compare_type=compare_type,
            confidence=confidence,
            details=details,
        )

    def to_dict(self) -> dict:
        """Serialize to the camelCase shape read by rendering and CSV export."""
        result = {
            "isMatch": self.is_match,
            "matchClassification": self.match_classification,
            "matchType": self.compare_type,
            "confidence": self.confidence,
        }
        if self.details is not None:
            result["details"] = self.details
        return result


class FieldJudge(Protocol):
    """
    External semantic judge used by the "llm-judge" compare type.

    The comparator does not implement semantic judging; callers supply a
    callable that returns an authoritative MatchResult. Implementations may
    raise (JudgeError or anything else); the comparator then falls back to
    near-exact string matching.

    Example implementation:
        >>> class AlwaysAgree:
        ...     def __call__(self, extracted, reference, comparison_prompt):
        ...         return MatchResult.matched("normalized", "llm-judge", confidence="medium")
    """

    def __call__(
        self, extracted: str, reference: str, comparison_prompt: str
    ) -> MatchResult:
        """Judge whether extracted and reference are semantically equivalent."""
        ...
