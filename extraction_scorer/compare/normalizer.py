"""
Field-type-aware canonicalization helpers for the Value Comparator.

Every helper here is pure and total: unparsable input yields None (or an
empty result) instead of raising, so callers can fall through to a weaker
comparison strategy.

Helpers:
- fold_text: case/punctuation/whitespace folding used by near-exact matching
- parse_number: numeric parsing tolerant of currency and thousands separators
- parse_boolean: yes/no/true/false/1/0 token parsing
- words_to_number: written English numbers ("sixty", "one hundred twenty")
- parse_duration_days: "<amount> [qualifier] <unit>" expressions to a day count
- durations_equivalent: day-count equality with whole-month equivalence
- split_values / detect_separator / parse_list: multi-value and list splitting
- extract_core_name: entity name without roles, honorifics, corporate suffixes
- items_overlap: item-level equality, containment or core-name match for lists
"""

import re

from extraction_scorer.config.constants import (
    DAYS_PER_MONTH,
    DAYS_PER_WEEK,
    DAYS_PER_YEAR,
    MIN_PARTIAL_MATCH_LENGTH,
    MONTH_EQUIVALENCE_MIN_DAYS,
    PENDING_STATE_PREFIXES,
)

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")

_CURRENCY_AND_SEPARATORS = re.compile(r"[$€£¥,\s]")
_LEADING_NUMBER = re.compile(r"^[-+]?(?:\d+\.?\d*|\.\d+)(?:[eE][-+]?\d+)?")

_TRUE_TOKENS = frozenset({"true", "yes", "y", "1", "✓", "checked"})
_FALSE_TOKENS = frozenset({"false", "no", "n", "0", "unchecked"})

_ONES = {
    "zero": 0, "one": 1, "two": 2, "three": 3, "four": 4, "five": 5,
    "six": 6, "seven": 7, "eight": 8, "nine": 9, "ten": 10,
    "eleven": 11, "twelve": 12, "thirteen": 13, "fourteen": 14,
    "fifteen": 15, "sixteen": 16, "seventeen": 17, "eighteen": 18,
    "nineteen": 19,
}  # fmt: skip
_TENS = {
    "twenty": 20, "thirty": 30, "forty": 40, "fifty": 50,
    "sixty": 60, "seventy": 70, "eighty": 80, "ninety": 90,
}  # fmt: skip

_DURATION_PATTERN = re.compile(
    r"^(?P<amount>\d+(?:\.\d+)?|[a-z][a-z\s-]*?)\s*"
    r"(?:\(\s*(?P<paren>\d+(?:\.\d+)?)\s*\))?\s*"
    r"(?:(?P<qualifier>business|calendar|working)\s+)?"
    r"(?P<unit>day|week|month|year)s?$"
)

_DAYS_PER_UNIT = {
    "day": 1,
    "week": DAYS_PER_WEEK,
    "month": DAYS_PER_MONTH,
    "year": DAYS_PER_YEAR,
}

# Common delimiters for multi-value fields
_MULTI_VALUE_SPLIT = re.compile(r"[,|;]")

_PARENTHETICAL = re.compile(r"\([^)]*\)")
_HONORIFICS = re.compile(r"\b(?:mr|mrs|ms|dr|prof|sir|dame|lord|lady)\b\.?", re.IGNORECASE)
_CORPORATE_SUFFIXES = frozenset(
    {"inc", "llc", "ltd", "limited", "plc", "corp", "corporation", "gmbh", "sa", "bv", "ag", "na"}
)


def fold_text(text: str | None) -> str:
    """
    Fold text for near-exact comparison.

    Lowercases, removes punctuation and collapses whitespace.

    Example:
        >>> fold_text("  QIWI plc. ")
        'qiwi plc'
        >>> fold_text("Wells Fargo Bank, N.A.")
        'wells fargo bank na'
    """
    if not text or not isinstance(text, str):
        return ""

    folded = _PUNCTUATION.sub("", text.lower())
    return _WHITESPACE.sub(" ", folded).strip()


def is_pending_state(text: str) -> bool:
    """Return True when a value is a UI status placeholder rather than data."""
    return bool(text) and text.startswith(PENDING_STATE_PREFIXES)


def parse_number(text: str | None) -> float | None:
    """
    Parse a number from text, ignoring currency symbols and separators.

    Parses the leading numeric part of the cleaned string, so trailing words
    are ignored ("12 million" parses as 12).

    Example:
        >>> parse_number("$40,000")
        40000.0
        >>> parse_number("40000.0") == parse_number("40000")
        True
        >>> parse_number("n/a") is None
        True
    """
    if not text or not isinstance(text, str):
        return None

    cleaned = _CURRENCY_AND_SEPARATORS.sub("", text)
    match = _LEADING_NUMBER.match(cleaned)
    if not match:
        return None

    try:
        return float(match.group(0))
    except ValueError:
        return None


def parse_boolean(text: str | None) -> bool | None:
    """
    Parse a boolean token case-insensitively.

    Example:
        >>> parse_boolean("Yes"), parse_boolean("FALSE"), parse_boolean("maybe")
        (True, False, None)
    """
    if not text or not isinstance(text, str):
        return None

    token = text.strip().lower()
    if token in _TRUE_TOKENS:
        return True
    if token in _FALSE_TOKENS:
        return False
    return None


def words_to_number(text: str) -> int | None:
    """
    Convert a written English number below one million to an integer.

    Example:
        >>> words_to_number("sixty")
        60
        >>> words_to_number("forty-five")
        45
        >>> words_to_number("one hundred twenty")
        120
        >>> words_to_number("calendar") is None
        True
    """
    tokens = [t for t in re.split(r"[\s-]+", text.strip().lower()) if t and t != "and"]
    if not tokens:
        return None
    if tokens in (["a"], ["an"]):
        return 1

    total = 0
    current = 0
    for token in tokens:
        if token in _ONES:
            current += _ONES[token]
        elif token in _TENS:
            current += _TENS[token]
        elif token == "hundred":
            current = (current or 1) * 100
        elif token == "thousand":
            total += (current or 1) * 1000
            current = 0
        else:
            return None

    return total + current


def parse_duration_days(text: str | None) -> float | None:
    """
    Parse a duration expression into a day count.

    Accepts "<amount> [business|calendar|working] <unit>" where amount is
    digits, a written number, or a written number followed by its digit form
    in parentheses (the parenthetical wins). Qualifiers are ignored.

    Example:
        >>> parse_duration_days("2 years")
        730.0
        >>> parse_duration_days("sixty (60) days")
        60.0
        >>> parse_duration_days("ninety (90) calendar days")
        90.0
        >>> parse_duration_days("30 days notice required") is None
        True
    """
    if not text or not isinstance(text, str):
        return None

    candidate = _WHITESPACE.sub(" ", text.strip().lower()).rstrip(".")
    match = _DURATION_PATTERN.match(candidate)
    if not match:
        return None

    if match.group("paren"):
        amount = float(match.group("paren"))
    else:
        raw_amount = match.group("amount").strip()
        if re.fullmatch(r"\d+(?:\.\d+)?", raw_amount):
            amount = float(raw_amount)
        else:
            words = words_to_number(raw_amount)
            if words is None:
                return None
            amount = float(words)

    return amount * _DAYS_PER_UNIT[match.group("unit")]


def _whole_months(days: float) -> int:
    # Half-up rounding so 45 days reads as 2 months
    return int(days / DAYS_PER_MONTH + 0.5)


def durations_equivalent(first_days: float, second_days: float) -> bool:
    """
    Decide whether two day counts describe the same duration.

    Equal day counts always match. Durations of at least a month also match
    when they round to the same number of 30-day months, which makes
    "1 year" (365 days) equal to "12 months" (360 days).

    Example:
        >>> durations_equivalent(730, 720)
        True
        >>> durations_equivalent(30, 60)
        False
    """
    if abs(first_days - second_days) < 1e-9:
        return True

    if min(first_days, second_days) < MONTH_EQUIVALENCE_MIN_DAYS:
        return False

    return _whole_months(first_days) == _whole_months(second_days)


def has_multiple_values(text: str) -> bool:
    """Return True when text contains a multi-value delimiter (comma, pipe, semicolon)."""
    return bool(text) and _MULTI_VALUE_SPLIT.search(text) is not None


def split_values(text: str) -> list[str]:
    """
    Split a multi-value string on commas, pipes and semicolons into folded sub-values.

    Example:
        >>> split_values("California, State of California")
        ['california', 'state of california']
    """
    if not text:
        return []
    return [folded for part in _MULTI_VALUE_SPLIT.split(text) if (folded := fold_text(part))]


def detect_separator(extracted: str, reference: str) -> str:
    """
    Auto-detect the list separator used by either value.

    Prefers the pipe, which is more explicit than the comma.
    """
    if "|" in (extracted or "") or "|" in (reference or ""):
        return "|"
    return ","


def parse_list(text: str, separator: str) -> list[str]:
    """
    Split a raw list value on separator.

    Items are stripped but not folded; items that fold to nothing are dropped.

    Example:
        >>> parse_list("Apple, , Banana ", ",")
        ['Apple', 'Banana']
    """
    if not text or not isinstance(text, str):
        return []
    return [item.strip() for item in text.split(separator) if fold_text(item)]


def extract_core_name(text: str) -> str:
    """
    Reduce an entity name to its core tokens.

    Removes parenthetical roles, honorifics and corporate suffixes.

    Example:
        >>> extract_core_name("Jeffrey D. Fox (Managing Director)")
        'jeffrey d fox'
        >>> extract_core_name("Acme Corporation")
        'acme'
    """
    if not text or not isinstance(text, str):
        return ""

    cleaned = _PARENTHETICAL.sub("", text.lower())
    cleaned = _HONORIFICS.sub("", cleaned)
    tokens = [t for t in fold_text(cleaned).split(" ") if t and t not in _CORPORATE_SUFFIXES]
    return " ".join(tokens)


def is_contained(first: str, second: str) -> bool:
    """
    Return True when the shorter folded string occurs inside the longer one.

    The shorter side must have at least MIN_PARTIAL_MATCH_LENGTH characters,
    so two-letter fragments such as "ny" never match "new york".
    """
    shorter, longer = sorted((first, second), key=len)
    return len(shorter) >= MIN_PARTIAL_MATCH_LENGTH and shorter in longer


def items_overlap(first: str, second: str) -> bool:
    """
    Decide whether two raw list items name the same entity.

    Items overlap when their folded forms are equal, when one contains the
    other, or when their core names (see extract_core_name) are equal.

    Example:
        >>> items_overlap("Jeffrey D. Fox (Managing Director)", "Jeffrey D. Fox")
        True
        >>> items_overlap("Acme Corp", "Acme Corporation")
        True
    """
    folded_first = fold_text(first)
    folded_second = fold_text(second)
    if not folded_first or not folded_second:
        return False

    if folded_first == folded_second or is_contained(folded_first, folded_second):
        return True

    core_first = extract_core_name(first)
    return bool(core_first) and core_first == extract_core_name(second)
