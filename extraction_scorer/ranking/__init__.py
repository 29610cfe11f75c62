"""
Model Ranking Engine package.

Public API:
    - rank_models: Run the full ranking pipeline
    - calculate_model_summaries, determine_field_winners, assign_ranks: Pipeline stages
    - FieldMetrics, FieldPerformance, ModelSummary: Frozen ranking models
"""

from extraction_scorer.ranking.engine import (
    assign_ranks,
    calculate_model_summaries,
    determine_field_winners,
    nearly_equal,
    performance_tier,
    rank_models,
)
from extraction_scorer.ranking.models import FieldMetrics, FieldPerformance, ModelSummary

__all__ = [
    "FieldMetrics",
    "FieldPerformance",
    "ModelSummary",
    "assign_ranks",
    "calculate_model_summaries",
    "determine_field_winners",
    "nearly_equal",
    "performance_tier",
    "rank_models",
]
