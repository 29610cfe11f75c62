"""
Configuration layer for Extraction Scorer.

Public API:
    - FieldDefinition, FieldCompareConfig, FieldSettings, CompareTypeConfig
    - resolve_compare_config: Configured strategy or the field-type default
    - load_compare_config: Load and validate a YAML compare configuration
"""

from extraction_scorer.config.loader import load_compare_config, parse_compare_config
from extraction_scorer.config.schema import (
    COMPARE_TYPES,
    DEFAULT_COMPARE_TYPE_MAP,
    CompareParameters,
    CompareType,
    CompareTypeConfig,
    FieldCompareConfig,
    FieldDefinition,
    FieldSettings,
    default_compare_config,
    resolve_compare_config,
)

__all__ = [
    "COMPARE_TYPES",
    "DEFAULT_COMPARE_TYPE_MAP",
    "CompareParameters",
    "CompareType",
    "CompareTypeConfig",
    "FieldCompareConfig",
    "FieldDefinition",
    "FieldSettings",
    "default_compare_config",
    "load_compare_config",
    "parse_compare_config",
    "resolve_compare_config",
]
