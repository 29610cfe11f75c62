"""
Per-field metric aggregation for Extraction Scorer.

This module applies the Value Comparator across a corpus of documents and
reduces the verdicts into the accuracy/precision/recall/F1 numbers consumed
by the Model Ranking Engine.
"""

import logging
from collections.abc import Mapping, Sequence

from extraction_scorer.compare.engine import compare
from extraction_scorer.compare.normalizer import fold_text
from extraction_scorer.compare.types import FieldJudge, MatchResult
from extraction_scorer.config.constants import (
    NOT_PRESENT_VALUE,
    UNSCORED_PREDICTION_PREFIXES,
)
from extraction_scorer.config.schema import (
    CompareTypeConfig,
    FieldCompareConfig,
    FieldDefinition,
    resolve_compare_config,
)
from extraction_scorer.exceptions import MetricsInputError
from extraction_scorer.ranking.models import FieldMetrics
from extraction_scorer.utils.logging import log_with_context

from .schema import ConfusionCounts, FieldMetricsReport

logger = logging.getLogger(__name__)


def _clamp(value: float) -> float:
    return max(0.0, min(1.0, value))


def _is_skipped(prediction: str | None) -> bool:
    """Empty and pending/error predictions are not scored."""
    if prediction is None:
        return True
    text = str(prediction)
    return not text or text.startswith(UNSCORED_PREDICTION_PREFIXES)


def _present_or_placeholder(value: str | None) -> str:
    """Read values with no content left after folding ("", "-", "  ") as absent."""
    if value is None or not fold_text(str(value)):
        return NOT_PRESENT_VALUE
    return str(value)


def calculate_field_metrics(
    predictions: Sequence[str | None],
    ground_truths: Sequence[str | None],
    compare_config: FieldCompareConfig | None = None,
    judge: FieldJudge | None = None,
) -> FieldMetricsReport:
    """
    Compute accuracy, precision, recall and F1 for one field and one model.

    Rows are classified as:
    - Reference "Not Present", prediction matches it: true negative
    - Reference "Not Present", prediction has a value: false positive
    - Reference present, prediction matches: true positive
    - Reference present, prediction wrong: false positive AND false negative

    Empty predictions and predictions starting with "Pending" or "Error" are
    skipped. Any other value that folds to nothing ("-", whitespace) is read
    as "Not Present" on either side and still scored.

    Args:
        predictions: Extracted values, one per document
        ground_truths: Reference values aligned with predictions
        compare_config: Compare strategy for the field (near-exact-string
            when omitted)
        judge: External judge used by "llm-judge" (optional)

    Returns:
        FieldMetricsReport with metrics clamped to [0, 1]. When every scored
        row is a true negative, precision, recall and F1 are 1.0.

    Raises:
        MetricsInputError: If predictions and ground_truths differ in length
    """
    if len(predictions) != len(ground_truths):
        raise MetricsInputError(
            f"predictions and ground_truths must have the same length, "
            f"got {len(predictions)} and {len(ground_truths)}"
        )

    if compare_config is not None:
        compare_type = compare_config.compare_type
        parameters = compare_config.parameters
        field_key = compare_config.field_key
    else:
        compare_type, parameters, field_key = "near-exact-string", None, None

    true_positives = false_positives = false_negatives = true_negatives = 0
    skipped = 0
    row_results: list[MatchResult | None] = []

    for prediction, ground_truth in zip(predictions, ground_truths, strict=True):
        if _is_skipped(prediction):
            skipped += 1
            row_results.append(None)
            continue

        predicted = _present_or_placeholder(prediction)
        reference = _present_or_placeholder(ground_truth)

        result = compare(
            compare_type, parameters, predicted, reference, judge=judge, field_key=field_key
        )
        row_results.append(result)

        if reference == NOT_PRESENT_VALUE:
            if result.is_match:
                true_negatives += 1
            else:
                false_positives += 1
        elif result.is_match:
            true_positives += 1
        else:
            false_positives += 1
            false_negatives += 1

    valid = len(predictions) - skipped
    accuracy = (true_positives + true_negatives) / valid if valid else 0.0

    if true_positives == 0 and false_positives == 0 and false_negatives == 0 and true_negatives > 0:
        # Every row correctly absent
        precision = recall = f1 = 1.0
    else:
        precision = (
            true_positives / (true_positives + false_positives)
            if (true_positives + false_positives) > 0
            else 0.0
        )
        recall = (
            true_positives / (true_positives + false_negatives)
            if (true_positives + false_negatives) > 0
            else 0.0
        )
        f1 = (
            (2 * precision * recall) / (precision + recall)
            if (precision + recall) > 0
            else 0.0
        )

    counts = ConfusionCounts(
        true_positives=true_positives,
        false_positives=false_positives,
        false_negatives=false_negatives,
        true_negatives=true_negatives,
    )

    log_with_context(
        logger,
        logging.DEBUG,
        "Field metrics computed",
        context={
            "compare_type": compare_type,
            "valid_rows": valid,
            "skipped_rows": skipped,
            **counts.model_dump(),
        },
        field_key=field_key,
    )

    return FieldMetricsReport(
        field_key=field_key,
        accuracy=_clamp(accuracy),
        precision=_clamp(precision),
        recall=_clamp(recall),
        f1=_clamp(f1),
        counts=counts,
        valid_rows=valid,
        skipped_rows=skipped,
        row_results=row_results,
    )


def build_field_averages(
    fields: Sequence[FieldDefinition],
    models: Sequence[str],
    predictions: Mapping[str, Mapping[str, Sequence[str | None]]],
    ground_truths: Mapping[str, Sequence[str | None]],
    config: CompareTypeConfig | None = None,
    judge: FieldJudge | None = None,
) -> dict[str, dict[str, FieldMetrics]]:
    """
    Build the averages[field_key][model] mapping consumed by the ranking engine.

    Args:
        fields: Field definitions
        models: Model names
        predictions: predictions[field_key][model] -> values, one per document
        ground_truths: ground_truths[field_key] -> reference values, one per document
        config: Optional compare configuration (field-type defaults otherwise)
        judge: External judge used by "llm-judge" (optional)

    Returns:
        Nested dict of FieldMetrics. A model with no predictions for a field
        is left out, which the ranking engine reads as all-zero metrics.

    Raises:
        MetricsInputError: If a model's predictions and the ground truths
            for a field differ in length
    """
    averages: dict[str, dict[str, FieldMetrics]] = {}

    for field in fields:
        field_config = resolve_compare_config(field, config)
        references = ground_truths.get(field.key, ())
        field_predictions = predictions.get(field.key, {})
        averages[field.key] = {}

        for model_name in models:
            if model_name not in field_predictions:
                logger.debug(f"No predictions for model '{model_name}' on field '{field.key}'")
                continue

            report = calculate_field_metrics(
                field_predictions[model_name], references, field_config, judge=judge
            )
            averages[field.key][model_name] = report.to_field_metrics()

    return averages
