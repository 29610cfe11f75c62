"""
Custom exceptions for Extraction Scorer.

This module provides a hierarchy of exceptions that enable type-safe error
handling around the scoring engine. All exceptions inherit from the base
ExtractionScorerError for consistent catching.

The comparator and ranking engine themselves never raise for value content:
malformed values degrade to weaker match classifications instead. These
exceptions cover caller mistakes at the edges (configuration files, misaligned
inputs to the aggregation step) and failures inside pluggable judges.

Exception Hierarchy:
    ExtractionScorerError (base)
    ├── ConfigurationError
    │   ├── ConfigFileNotFoundError
    │   └── ConfigValidationError
    ├── JudgeError
    └── MetricsInputError

Usage:
    from extraction_scorer.exceptions import ConfigurationError

    try:
        config = load_compare_config(path)
    except ConfigFileNotFoundError as e:
        logger.error(f"Compare config not found: {e}")
        raise
"""


class ExtractionScorerError(Exception):
    """
    Base exception for all Extraction Scorer errors.

    All custom exceptions in this package inherit from this class.
    This enables catching all package-specific errors with a single except clause.
    """

    pass


# ============================================================================
# Configuration Errors
# ============================================================================


class ConfigurationError(ExtractionScorerError):
    """
    Base class for configuration-related errors.

    Raised when compare configuration loading, parsing, or validation fails.
    """

    pass


class ConfigFileNotFoundError(ConfigurationError):
    """
    Configuration file does not exist at the specified path.

    Example:
        raise ConfigFileNotFoundError("/path/to/compare_config.yaml")
    """

    pass


class ConfigValidationError(ConfigurationError):
    """
    Configuration file is invalid (YAML syntax or schema validation failed).

    Should include details about which field(s) failed validation.

    Example:
        raise ConfigValidationError("fields.0.compare_type: Input should be ...")
    """

    pass


# ============================================================================
# Comparison Errors
# ============================================================================


class JudgeError(ExtractionScorerError):
    """
    An external llm-judge failed to produce a verdict.

    Judge implementations raise this (or any other exception); the comparator
    catches it and falls back to near-exact string matching so that a batch
    evaluation never halts on a single judge failure.

    Attributes:
        field_key: Field being judged, if known
    """

    def __init__(self, message: str, field_key: str | None = None):
        super().__init__(message)
        self.field_key = field_key


# ============================================================================
# Aggregation Errors
# ============================================================================


class MetricsInputError(ExtractionScorerError):
    """
    Inputs handed to the metric aggregation step are inconsistent.

    Raised when predictions and ground truths for a field have different
    lengths, which means the caller paired the wrong files.

    Example:
        raise MetricsInputError("Predictions and ground truths must have the same length")
    """

    pass
