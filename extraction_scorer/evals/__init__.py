"""
Per-field metric aggregation for Extraction Scorer.

Applies the Value Comparator across a corpus and reduces the verdicts into
the FieldMetrics consumed by the Model Ranking Engine.
"""

from .metrics import build_field_averages, calculate_field_metrics
from .schema import ConfusionCounts, FieldMetricsReport

__all__ = [
    "ConfusionCounts",
    "FieldMetricsReport",
    "build_field_averages",
    "calculate_field_metrics",
]
