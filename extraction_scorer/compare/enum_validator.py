"""
Enum and multiSelect option validation.

Extraction models frequently return a dropdown value in a slightly different
spelling than the template option ("usa" for "United States", "Acme Corp"
for "Acme Corporation"). This module snaps extracted values onto the
configured option keys before they are compared against ground truth.

Matching order for each value:
1. Exact (case-sensitive) option key
2. Case-insensitive option key
3. Similarity: folded equality, containment, country abbreviations
4. Fuzzy: rapidfuzz ratio at or above ENUM_FUZZY_THRESHOLD (best score wins)
"""

import logging
from collections.abc import Sequence

from rapidfuzz import fuzz

from extraction_scorer.config.constants import ENUM_FUZZY_THRESHOLD, NOT_PRESENT_VALUE
from extraction_scorer.utils.logging import log_with_context

from .normalizer import fold_text, is_contained

logger = logging.getLogger(__name__)

# Abbreviation -> full names it stands for
COUNTRY_ABBREVIATIONS: dict[str, tuple[str, ...]] = {
    "usa": ("united states", "united states of america"),
    "us": ("united states", "united states of america"),
    "uk": ("united kingdom", "great britain", "britain"),
    "uae": ("united arab emirates",),
    "jpn": ("japan",),
    "jp": ("japan",),
    "chn": ("china",),
    "cn": ("china",),
    "deu": ("germany",),
    "de": ("germany",),
    "fra": ("france",),
    "fr": ("france",),
    "gbr": ("united kingdom", "great britain"),
    "can": ("canada",),
    "ca": ("canada",),
    "aus": ("australia",),
    "au": ("australia",),
    "nzl": ("new zealand",),
    "nz": ("new zealand",),
    "ind": ("india",),
    "in": ("india",),
}


def _matches_abbreviation(abbreviation: str, full_name: str) -> bool:
    full_names = COUNTRY_ABBREVIATIONS.get(abbreviation, ())
    return any(full_name == name or name in full_name for name in full_names)


def is_similar(value: str, option: str) -> bool:
    """
    Check whether an extracted value is similar enough to an option key.

    Example:
        >>> is_similar("USA", "United States of America")
        True
        >>> is_similar("US", "Russia")
        False
    """
    folded_value = fold_text(value)
    folded_option = fold_text(option)
    if not folded_value or not folded_option:
        return False

    if folded_value == folded_option:
        return True

    if is_contained(folded_value, folded_option):
        return True

    return _matches_abbreviation(folded_value, folded_option) or _matches_abbreviation(
        folded_option, folded_value
    )


def find_matching_option(
    value: str, options: Sequence[str], field_key: str | None = None
) -> str | None:
    """
    Find the option key an extracted value refers to.

    Args:
        value: Extracted value
        options: Allowed option keys
        field_key: Field being validated, used only for log context

    Returns:
        Matching option key, or None if no option matches
    """
    if not value or not options:
        return None

    if value in options:
        return value

    lowered = value.lower()
    for option in options:
        if option.lower() == lowered:
            return option

    for option in options:
        if is_similar(value, option):
            log_with_context(
                logger,
                logging.DEBUG,
                "Enum similarity match found",
                context={"value": value, "matched_option": option},
                field_key=field_key,
            )
            return option

    best_option = None
    best_score = 0.0
    for option in options:
        score = fuzz.ratio(lowered, option.lower())
        if score > best_score:
            best_option, best_score = option, score

    if best_option is not None and best_score >= ENUM_FUZZY_THRESHOLD:
        log_with_context(
            logger,
            logging.DEBUG,
            "Enum fuzzy match found",
            context={"value": value, "matched_option": best_option, "score": best_score},
            field_key=field_key,
        )
        return best_option

    return None


def validate_enum_value(
    value: str | None, options: Sequence[str], field_key: str | None = None
) -> str:
    """
    Snap a single enum value onto its option key.

    Returns:
        Matched option key, or NOT_PRESENT_VALUE when the value is empty or
        matches no option
    """
    if not value or value == NOT_PRESENT_VALUE:
        return NOT_PRESENT_VALUE

    matched = find_matching_option(value, options, field_key)
    if matched is not None:
        return matched

    log_with_context(
        logger,
        logging.WARNING,
        f"Extracted enum value does not match any option: {value!r}",
        context={"available_options": list(options)},
        field_key=field_key,
    )
    return NOT_PRESENT_VALUE


def validate_multiselect_value(
    value: str | Sequence[str] | None,
    options: Sequence[str],
    field_key: str | None = None,
) -> str:
    """
    Snap a multiSelect value onto option keys.

    Args:
        value: Delimited string (pipe preferred, else comma) or sequence of values
        options: Allowed option keys
        field_key: Field being validated, used only for log context

    Returns:
        Matched option keys joined by " | " (duplicates removed, first
        occurrence order), or NOT_PRESENT_VALUE when nothing matches

    Example:
        >>> validate_multiselect_value("usa, Canada", ["United States", "Canada", "Mexico"])
        'United States | Canada'
    """
    if not value or value == NOT_PRESENT_VALUE:
        return NOT_PRESENT_VALUE

    if isinstance(value, str):
        separator = "|" if "|" in value else ","
        values = [part.strip() for part in value.split(separator) if part.strip()]
    else:
        values = [str(part).strip() for part in value if part and str(part).strip()]

    matched_options: list[str] = []
    unmatched_values: list[str] = []
    for item in values:
        matched = find_matching_option(item, options, field_key)
        if matched is None:
            unmatched_values.append(item)
        elif matched not in matched_options:
            matched_options.append(matched)

    if unmatched_values:
        log_with_context(
            logger,
            logging.WARNING,
            f"{len(unmatched_values)} multiSelect value(s) did not match any option",
            context={"unmatched_values": unmatched_values, "matched_options": matched_options},
            field_key=field_key,
        )

    if not matched_options:
        return NOT_PRESENT_VALUE
    return " | ".join(matched_options)
