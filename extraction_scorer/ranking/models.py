"""
Data models for the Model Ranking Engine.

All models are frozen dataclasses: each ranking stage derives new instances
with dataclasses.replace() instead of mutating the previous stage's output.

Models:
    FieldMetrics: Accuracy/precision/recall/F1 for one (field, model) pair
    FieldPerformance: A model's metrics and winner flags on one field
    ModelSummary: A model's aggregate scores, field wins and rank
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

_METRIC_NAMES = ("accuracy", "precision", "recall", "f1")


def _coerce_metric(value: Any) -> float:
    """Read a loose metric value as a float in [0, 1] (missing or non-finite -> 0)."""
    try:
        number = float(value or 0.0)
    except (TypeError, ValueError):
        return 0.0
    if not math.isfinite(number):
        return 0.0
    return min(max(number, 0.0), 1.0)


@dataclass(frozen=True)
class FieldMetrics:
    """
    Per-field metrics for one model, each a real number in [0, 1].

    Attributes:
        accuracy: (TP + TN) / valid rows
        precision: TP / (TP + FP)
        recall: TP / (TP + FN)
        f1: Harmonic mean of precision and recall
    """

    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0

    def __post_init__(self):
        """Validate every metric is a finite number in [0, 1]."""
        for name in _METRIC_NAMES:
            value = getattr(self, name)
            # NaN fails both comparisons
            if not (0.0 <= value <= 1.0):
                raise ValueError(f"{name} must be between 0 and 1, got: {value}")

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "FieldMetrics":
        """
        Build FieldMetrics from a plain mapping.

        Missing, non-numeric or non-finite values read as 0; out-of-range
        values are clamped to [0, 1].

        Example:
            >>> FieldMetrics.from_mapping({"accuracy": 0.9, "precision": 0.95})
            FieldMetrics(accuracy=0.9, precision=0.95, recall=0.0, f1=0.0)
        """
        return cls(**{name: _coerce_metric(data.get(name)) for name in _METRIC_NAMES})


@dataclass(frozen=True)
class FieldPerformance:
    """
    One model's performance on one field.

    Attributes:
        field_key: Field identifier
        field_name: Human-readable field name
        accuracy, precision, recall, f1: Field metrics (0 when missing)
        is_winner: Whether the model won (or shared) this field
        is_shared_victory: Whether the win was shared with other models
        is_included_in_metrics: Whether the field counts toward overall scores
    """

    field_key: str
    field_name: str
    accuracy: float = 0.0
    precision: float = 0.0
    recall: float = 0.0
    f1: float = 0.0
    is_winner: bool = False
    is_shared_victory: bool = False
    is_included_in_metrics: bool = True

    def to_dict(self) -> dict:
        """Serialize to the camelCase shape read by rendering and CSV export."""
        return {
            "fieldKey": self.field_key,
            "fieldName": self.field_name,
            "accuracy": self.accuracy,
            "precision": self.precision,
            "recall": self.recall,
            "f1": self.f1,
            "isWinner": self.is_winner,
            "isSharedVictory": self.is_shared_victory,
            "isIncludedInMetrics": self.is_included_in_metrics,
        }


@dataclass(frozen=True)
class ModelSummary:
    """
    Aggregate ranking entry for one model.

    Created by calculate_model_summaries (fields_won=0, rank=0), refined by
    determine_field_winners (fields_won, winner flags) and finalized by
    assign_ranks (rank).

    Attributes:
        model_name: Model identifier
        overall_accuracy: Macro-averaged accuracy over included fields
        overall_precision: Macro-averaged precision over included fields
        overall_recall: Macro-averaged recall over included fields
        overall_f1: Macro-averaged F1 over included fields
        fields_won: Field wins, fractional for shared victories
        total_fields: Number of included fields
        rank: Competition rank (1 = best), 0 until ranks are assigned
        field_performance: Per-field performance, in field order
    """

    model_name: str
    overall_accuracy: float = 0.0
    overall_precision: float = 0.0
    overall_recall: float = 0.0
    overall_f1: float = 0.0
    fields_won: float = 0.0
    total_fields: int = 0
    rank: int = 0
    field_performance: tuple[FieldPerformance, ...] = ()

    def get_field(self, field_key: str) -> FieldPerformance | None:
        """Get this model's performance on a field, if present."""
        for performance in self.field_performance:
            if performance.field_key == field_key:
                return performance
        return None

    def to_dict(self) -> dict:
        """Serialize to the camelCase shape read by rendering and CSV export."""
        return {
            "modelName": self.model_name,
            "overallAccuracy": self.overall_accuracy,
            "overallPrecision": self.overall_precision,
            "overallRecall": self.overall_recall,
            "overallF1": self.overall_f1,
            "fieldsWon": self.fields_won,
            "totalFields": self.total_fields,
            "rank": self.rank,
            "fieldPerformance": [fp.to_dict() for fp in self.field_performance],
        }
