"""
Value Comparator for Extraction Scorer.

Decides whether an extracted value and a reference value represent the same
real-world fact despite surface differences (formatting, partial phrasing,
units), and classifies why.

Key features:
- One strategy per compare type, dispatched exhaustively
- Shared preamble for empty values, "Not Present" and UI status placeholders
- Near-exact matching: folding, durations, multi-value and substring containment
- List matching with separator auto-detection and item-level containment
- llm-judge routing to a caller-supplied judge with near-exact fallback

The comparator is total: malformed input degrades to a weaker strategy or to
a "none" verdict, never to an exception.
"""

import dataclasses
import logging

from extraction_scorer.config.constants import (
    DEFAULT_LLM_COMPARISON_PROMPT,
    LIST_PARTIAL_MATCH_THRESHOLD,
    NOT_PRESENT_VALUE,
)
from extraction_scorer.config.schema import COMPARE_TYPES, CompareParameters, FieldCompareConfig
from extraction_scorer.utils.logging import log_with_context

from .dates import is_date_like, parse_flexible_date
from .normalizer import (
    detect_separator,
    durations_equivalent,
    fold_text,
    has_multiple_values,
    is_contained,
    is_pending_state,
    items_overlap,
    parse_boolean,
    parse_list,
    parse_duration_days,
    parse_number,
    split_values,
)
from .types import FieldJudge, MatchResult

logger = logging.getLogger(__name__)


def compare(
    compare_type: str,
    parameters: CompareParameters | None,
    extracted: str | None,
    reference: str | None,
    judge: FieldJudge | None = None,
    field_key: str | None = None,
) -> MatchResult:
    """
    Compare an extracted value against a reference value.

    Args:
        compare_type: Comparison strategy (one of COMPARE_TYPES)
        parameters: Strategy parameters (separator, comparison prompt), or None
        extracted: Value produced by the extraction model
        reference: Ground-truth value
        judge: External judge used by "llm-judge" (optional)
        field_key: Field being compared, used only for log context

    Returns:
        MatchResult verdict. is_match is True for every classification
        except "none".

    Example:
        >>> compare("near-exact-string", None, "2 years", "24 months").match_classification
        'normalized'
        >>> compare("boolean", None, "Yes", "No").is_match
        False
    """
    extracted = _as_text(extracted)
    reference = _as_text(reference)
    parameters = parameters or CompareParameters()

    preamble = _compare_preamble(compare_type, extracted, reference)
    if isinstance(preamble, MatchResult):
        return preamble
    extracted, reference = preamble

    if compare_type == "exact-string":
        return _compare_exact_string(extracted, reference)
    elif compare_type == "near-exact-string":
        return _compare_near_exact(extracted, reference)
    elif compare_type == "exact-number":
        return _compare_number(extracted, reference)
    elif compare_type == "boolean":
        return _compare_boolean(extracted, reference)
    elif compare_type == "date-exact":
        return _compare_date(extracted, reference)
    elif compare_type == "list-unordered":
        return _compare_list_unordered(extracted, reference, parameters)
    elif compare_type == "list-ordered":
        return _compare_list_ordered(extracted, reference, parameters)
    elif compare_type == "llm-judge":
        return _compare_with_judge(extracted, reference, parameters, judge, field_key)

    log_with_context(
        logger,
        logging.ERROR,
        f"Unknown compare type: {compare_type}",
        context={"compare_type": compare_type},
        field_key=field_key,
    )
    # MatchResult requires a known compare type; report the miss under the
    # default string strategy
    return MatchResult.no_match(
        "near-exact-string",
        confidence="low",
        details=f"Unknown compare type: {compare_type}",
    )


def compare_with_config(
    extracted: str | None,
    reference: str | None,
    field_config: FieldCompareConfig,
    judge: FieldJudge | None = None,
) -> MatchResult:
    """
    Compare two values using a field's configured strategy.

    Args:
        extracted: Value produced by the extraction model
        reference: Ground-truth value
        field_config: Compare configuration for the field
        judge: External judge used by "llm-judge" (optional)

    Returns:
        MatchResult verdict
    """
    return compare(
        field_config.compare_type,
        field_config.parameters,
        extracted,
        reference,
        judge=judge,
        field_key=field_config.field_key,
    )


def _as_text(value: object) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _compare_preamble(
    compare_type: str, extracted: str, reference: str
) -> MatchResult | tuple[str, str]:
    """
    Handle cases shared by every strategy.

    Returns a final MatchResult, or the (extracted, reference) pair to hand to
    the type-specific strategy.
    """
    # MatchResult needs a known compare type even for preamble verdicts
    result_type = compare_type if compare_type in COMPARE_TYPES else "near-exact-string"

    if not extracted and not reference:
        return MatchResult.matched("exact", result_type, details="Both values empty")

    if extracted == NOT_PRESENT_VALUE and reference == NOT_PRESENT_VALUE:
        return MatchResult.matched("exact", result_type, details="Both values not present")

    # An absent clause reads as "No" for boolean fields
    if compare_type == "boolean":
        if extracted == NOT_PRESENT_VALUE:
            extracted = "No"
        if reference == NOT_PRESENT_VALUE:
            reference = "No"
    elif NOT_PRESENT_VALUE in (extracted, reference):
        return MatchResult.no_match(result_type, details="Only one value present")

    if is_pending_state(extracted) and extracted != reference:
        return MatchResult.no_match(result_type, details="Skipped pending/error state")

    return extracted, reference


def _compare_exact_string(extracted: str, reference: str) -> MatchResult:
    if extracted == reference:
        return MatchResult.matched("exact", "exact-string")
    return MatchResult.no_match("exact-string")


def _compare_near_exact(extracted: str, reference: str) -> MatchResult:
    """
    Near-exact string matching, applied in order until one step succeeds.

    1. Folded equality (case, punctuation, whitespace) -> normalized
    2. Equivalent durations ("2 years" vs "24 months") -> normalized
    3. Dates in different formats -> different-format (different dates -> none)
    4. Multi-value fields split on , | ; -> normalized or partial
    5. Substring containment above the length floor -> partial
    """
    compare_type = "near-exact-string"
    folded_extracted = fold_text(extracted)
    folded_reference = fold_text(reference)

    if folded_extracted == folded_reference:
        return MatchResult.matched("normalized", compare_type)

    extracted_days = parse_duration_days(extracted)
    reference_days = parse_duration_days(reference)
    if extracted_days is not None and reference_days is not None:
        if durations_equivalent(extracted_days, reference_days):
            return MatchResult.matched(
                "normalized",
                compare_type,
                details=f"Equivalent durations ({extracted_days:g} vs {reference_days:g} days)",
            )
        logger.debug(
            f"Durations differ ({extracted_days:g} vs {reference_days:g} days), "
            f"trying containment"
        )

    if is_date_like(extracted) and is_date_like(reference):
        extracted_date = parse_flexible_date(extracted)
        if extracted_date == parse_flexible_date(reference):
            return MatchResult.matched(
                "different-format",
                compare_type,
                details=f"Same date ({extracted_date.isoformat()}), different format",
            )
        return MatchResult.no_match(compare_type, details="Different dates")

    if has_multiple_values(extracted) or has_multiple_values(reference):
        multi_value = _compare_multi_value(
            extracted, reference, folded_extracted, folded_reference
        )
        if multi_value is not None:
            return multi_value

    if is_contained(folded_extracted, folded_reference):
        if len(folded_reference) <= len(folded_extracted):
            details = "Reference value is contained in extracted value"
        else:
            details = "Extracted value is contained in reference value"
        return MatchResult.matched("partial", compare_type, confidence="medium", details=details)

    return MatchResult.no_match(compare_type)


def _compare_multi_value(
    extracted: str, reference: str, folded_extracted: str, folded_reference: str
) -> MatchResult | None:
    compare_type = "near-exact-string"
    extracted_parts = (
        split_values(extracted) if has_multiple_values(extracted) else [folded_extracted]
    )
    reference_parts = (
        split_values(reference) if has_multiple_values(reference) else [folded_reference]
    )
    extracted_parts = [part for part in extracted_parts if part]
    reference_parts = [part for part in reference_parts if part]

    if len(set(extracted_parts)) > 1 and set(extracted_parts) == set(reference_parts):
        return MatchResult.matched(
            "normalized", compare_type, details="Same values with different delimiters"
        )

    for extracted_part in extracted_parts:
        for reference_part in reference_parts:
            if extracted_part == reference_part:
                return MatchResult.matched(
                    "partial", compare_type, details="Value found in multi-value field"
                )

    for extracted_part in extracted_parts:
        for reference_part in reference_parts:
            if is_contained(extracted_part, reference_part):
                return MatchResult.matched(
                    "partial",
                    compare_type,
                    confidence="medium",
                    details="Partial match found in multi-value field",
                )

    return None


def _compare_number(extracted: str, reference: str) -> MatchResult:
    extracted_number = parse_number(extracted)
    reference_number = parse_number(reference)

    if extracted_number is None or reference_number is None:
        logger.debug(f"Failed to parse as number: {extracted!r} vs {reference!r}")
        return MatchResult.no_match("exact-number", details="Failed to parse as number")

    if extracted_number != reference_number:
        return MatchResult.no_match("exact-number")

    if extracted.strip() == reference.strip():
        return MatchResult.matched("exact", "exact-number")
    return MatchResult.matched(
        "different-format", "exact-number", details="Same value, different format"
    )


def _compare_boolean(extracted: str, reference: str) -> MatchResult:
    extracted_value = parse_boolean(extracted)
    reference_value = parse_boolean(reference)

    if extracted_value is None or reference_value is None:
        logger.debug(f"Failed to parse as boolean: {extracted!r} vs {reference!r}")
        return MatchResult.no_match("boolean", details="Failed to parse as boolean")

    if extracted_value != reference_value:
        return MatchResult.no_match("boolean")

    if extracted == reference:
        return MatchResult.matched("exact", "boolean")
    return MatchResult.matched(
        "different-format", "boolean", details="Same value, different spelling"
    )


def _compare_date(extracted: str, reference: str) -> MatchResult:
    extracted_date = parse_flexible_date(extracted)
    reference_date = parse_flexible_date(reference)

    if extracted_date is None or reference_date is None:
        logger.debug(f"Failed to parse as date: {extracted!r} vs {reference!r}")
        return MatchResult.no_match("date-exact", details="Failed to parse as date")

    if extracted_date != reference_date:
        return MatchResult.no_match("date-exact")

    if extracted.strip().lower() == reference.strip().lower():
        return MatchResult.matched("exact", "date-exact")
    return MatchResult.matched(
        "different-format",
        "date-exact",
        details=f"Same date ({extracted_date.isoformat()}), different format",
    )


def _list_items(
    extracted: str, reference: str, parameters: CompareParameters
) -> tuple[list[str], list[str]]:
    separator = parameters.separator or detect_separator(extracted, reference)
    return parse_list(extracted, separator), parse_list(reference, separator)


def _compare_list_unordered(
    extracted: str, reference: str, parameters: CompareParameters
) -> MatchResult:
    compare_type = "list-unordered"
    extracted_items, reference_items = _list_items(extracted, reference, parameters)

    if not extracted_items or not reference_items:
        return MatchResult.no_match(compare_type, details="Empty list")

    folded_extracted = [fold_text(item) for item in extracted_items]
    folded_reference = [fold_text(item) for item in reference_items]

    if sorted(folded_extracted) == sorted(folded_reference):
        if extracted.strip() == reference.strip():
            return MatchResult.matched("exact", compare_type)
        if folded_extracted != folded_reference:
            details = "Same items in different order"
        else:
            details = "Same items, different formatting"
        return MatchResult.matched("different-format", compare_type, details=details)

    matched_reference = sum(
        1 for ref in reference_items if any(items_overlap(ref, ext) for ext in extracted_items)
    )
    matched_extracted = sum(
        1 for ext in extracted_items if any(items_overlap(ext, ref) for ref in reference_items)
    )
    reference_ratio = matched_reference / len(reference_items)
    extracted_ratio = matched_extracted / len(extracted_items)

    if reference_ratio == 1.0 and extracted_ratio == 1.0:
        return MatchResult.matched(
            "normalized", compare_type, details="All items match with possible variations"
        )

    if max(reference_ratio, extracted_ratio) >= LIST_PARTIAL_MATCH_THRESHOLD:
        return MatchResult.matched(
            "partial",
            compare_type,
            confidence="medium",
            details=f"{matched_reference}/{len(reference_items)} reference items found",
        )

    return MatchResult.no_match(compare_type)


def _compare_list_ordered(
    extracted: str, reference: str, parameters: CompareParameters
) -> MatchResult:
    compare_type = "list-ordered"
    extracted_items, reference_items = _list_items(extracted, reference, parameters)

    if not extracted_items or not reference_items:
        return MatchResult.no_match(compare_type, details="Empty list")

    folded_extracted = [fold_text(item) for item in extracted_items]
    folded_reference = [fold_text(item) for item in reference_items]

    if folded_extracted == folded_reference:
        if extracted.strip() == reference.strip():
            return MatchResult.matched("exact", compare_type)
        return MatchResult.matched(
            "different-format", compare_type, details="Same items, different formatting"
        )

    # Position-sensitive: item i is only compared with item i
    matched = sum(
        1
        for ext, ref in zip(extracted_items, reference_items, strict=False)
        if items_overlap(ext, ref)
    )
    total = max(len(extracted_items), len(reference_items))

    if matched == total:
        return MatchResult.matched(
            "normalized", compare_type, details="All items match with possible variations"
        )

    if matched / total >= LIST_PARTIAL_MATCH_THRESHOLD:
        return MatchResult.matched(
            "partial",
            compare_type,
            confidence="medium",
            details=f"{matched}/{total} items match in position",
        )

    if sorted(folded_extracted) == sorted(folded_reference):
        return MatchResult.no_match(compare_type, details="Same items but in different order")
    return MatchResult.no_match(compare_type)


def _compare_with_judge(
    extracted: str,
    reference: str,
    parameters: CompareParameters,
    judge: FieldJudge | None,
    field_key: str | None,
) -> MatchResult:
    """
    Route to the external judge, falling back to near-exact matching.

    The judge's verdict is returned unchanged. When no judge is supplied, or
    the judge raises or returns something other than a MatchResult, the
    near-exact verdict is returned tagged as "llm-judge".
    """
    prompt = parameters.comparison_prompt or DEFAULT_LLM_COMPARISON_PROMPT

    if judge is None:
        log_with_context(
            logger,
            logging.WARNING,
            "No judge supplied for llm-judge comparison, using near-exact fallback",
            field_key=field_key,
        )
        return _judge_fallback(extracted, reference, "No judge available")

    try:
        result = judge(extracted, reference, prompt)
    except Exception as e:
        log_with_context(
            logger,
            logging.WARNING,
            f"Judge failed, using near-exact fallback: {e}",
            context={"error_type": type(e).__name__},
            field_key=field_key,
        )
        return _judge_fallback(extracted, reference, f"Judge error: {e}")

    if not isinstance(result, MatchResult):
        log_with_context(
            logger,
            logging.WARNING,
            f"Judge returned {type(result).__name__}, using near-exact fallback",
            field_key=field_key,
        )
        return _judge_fallback(extracted, reference, "Judge returned an invalid result")

    return result


def _judge_fallback(extracted: str, reference: str, reason: str) -> MatchResult:
    fallback = _compare_near_exact(extracted, reference)
    return dataclasses.replace(
        fallback,
        compare_type="llm-judge",
        details=f"{reason} (near-exact fallback used)",
    )

