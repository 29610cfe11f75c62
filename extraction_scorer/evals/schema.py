"""
Pydantic schema models for per-field metric aggregation.

This module defines the data structures produced when the Value Comparator is
applied across a corpus of documents for one (field, model) pair:
- ConfusionCounts: True/false positive/negative counts for one field
- FieldMetricsReport: Metrics, counts and per-row verdicts for one field
"""

from pydantic import BaseModel, ConfigDict, Field, field_validator

from extraction_scorer.compare.types import MatchResult
from extraction_scorer.ranking.models import FieldMetrics


class ConfusionCounts(BaseModel):
    """
    Confusion matrix counts for one field over a corpus.

    A reference value of "Not Present" is a negative; anything else is a
    positive. A wrong value for a present reference counts as both a false
    positive and a false negative.
    """

    true_positives: int = Field(0, ge=0, description="Reference present, prediction matches")
    false_positives: int = Field(
        0, ge=0, description="Prediction present but absent or wrong in reference"
    )
    false_negatives: int = Field(0, ge=0, description="Reference present, prediction wrong")
    true_negatives: int = Field(0, ge=0, description="Both reference and prediction absent")

    @property
    def correct(self) -> int:
        """Rows where the prediction was right (TP + TN)."""
        return self.true_positives + self.true_negatives


class FieldMetricsReport(BaseModel):
    """
    Aggregated metrics for one field and one model.

    Carries the four metrics consumed by the ranking engine together with the
    confusion counts and the per-row verdicts used for cell highlighting.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    field_key: str | None = Field(None, description="Field the metrics were computed for")
    accuracy: float = Field(0.0, ge=0.0, le=1.0, description="(TP + TN) / valid rows")
    precision: float = Field(0.0, ge=0.0, le=1.0, description="TP / (TP + FP)")
    recall: float = Field(0.0, ge=0.0, le=1.0, description="TP / (TP + FN)")
    f1: float = Field(0.0, ge=0.0, le=1.0, description="Harmonic mean of precision and recall")
    counts: ConfusionCounts = Field(default_factory=ConfusionCounts)
    valid_rows: int = Field(0, ge=0, description="Rows that were scored")
    skipped_rows: int = Field(
        0, ge=0, description="Rows skipped because the prediction was empty or pending"
    )
    row_results: list[MatchResult | None] = Field(
        default_factory=list,
        description="Verdict per input row (None for skipped rows)",
    )

    @field_validator("field_key")
    @classmethod
    def validate_field_key(cls, v: str | None) -> str | None:
        """Normalize blank field keys to None."""
        if v is None or v.strip() == "":
            return None
        return v.strip()

    def to_field_metrics(self) -> FieldMetrics:
        """Reduce the report to the FieldMetrics consumed by the ranking engine."""
        return FieldMetrics(
            accuracy=self.accuracy,
            precision=self.precision,
            recall=self.recall,
            f1=self.f1,
        )
