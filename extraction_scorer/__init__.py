"""
Extraction Scorer: scoring and ranking engine for document-extraction models.

Compares extracted field values against ground truth, aggregates the verdicts
into per-field metrics and ranks competing models.

Public API:
    - compare / compare_with_config: Value Comparator
    - calculate_field_metrics / build_field_averages: Per-field metrics
    - rank_models: Model Ranking Engine
    - load_compare_config: YAML compare configuration
"""

from extraction_scorer.compare import (
    MatchResult,
    compare,
    compare_with_config,
    validate_enum_value,
    validate_multiselect_value,
)
from extraction_scorer.config import (
    CompareTypeConfig,
    FieldCompareConfig,
    FieldDefinition,
    FieldSettings,
    load_compare_config,
)
from extraction_scorer.evals import build_field_averages, calculate_field_metrics
from extraction_scorer.ranking import FieldMetrics, ModelSummary, rank_models

__version__ = "0.1.0"

__all__ = [
    "CompareTypeConfig",
    "FieldCompareConfig",
    "FieldDefinition",
    "FieldMetrics",
    "FieldSettings",
    "MatchResult",
    "ModelSummary",
    "build_field_averages",
    "calculate_field_metrics",
    "compare",
    "compare_with_config",
    "load_compare_config",
    "rank_models",
    "validate_enum_value",
    "validate_multiselect_value",
]
