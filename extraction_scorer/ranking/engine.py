"""
Model Ranking Engine for Extraction Scorer.

Aggregates per-field metrics into a total, deterministically tie-broken
ordering of competing extraction models.

The engine is a three-stage pure pipeline. Each stage returns new frozen
ModelSummary instances and never mutates its input:

1. calculate_model_summaries: macro-average metrics over included fields
2. determine_field_winners: per-field winners with fractional shared credit
3. assign_ranks: sort by accuracy, precision, recall, fields won, name and
   assign skip-style competition ranks

All real-valued comparisons go through nearly_equal() so the same tolerance
applies to winner selection and rank assignment.
"""

import functools
import logging
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import replace
from typing import Any

from extraction_scorer.config.constants import (
    FLOATING_POINT_PRECISION,
    PERFORMANCE_THRESHOLDS,
)
from extraction_scorer.config.schema import FieldDefinition, FieldSettings

from .models import FieldMetrics, FieldPerformance, ModelSummary

logger = logging.getLogger(__name__)

MetricsLike = FieldMetrics | Mapping[str, Any]
Averages = Mapping[str, Mapping[str, MetricsLike]]
FieldSettingsMap = Mapping[str, FieldSettings | Mapping[str, Any]]


def nearly_equal(a: float, b: float, epsilon: float = FLOATING_POINT_PRECISION) -> bool:
    """
    Return True when two metric values differ by no more than epsilon.

    Example:
        >>> nearly_equal(0.9, 0.9004)
        True
        >>> nearly_equal(0.9, 0.95)
        False
    """
    return abs(a - b) <= epsilon


def performance_tier(score: float) -> str:
    """
    Classify a score as "excellent", "good" or "poor".

    Example:
        >>> performance_tier(0.93), performance_tier(0.75), performance_tier(0.2)
        ('excellent', 'good', 'poor')
    """
    if score >= PERFORMANCE_THRESHOLDS["excellent"]:
        return "excellent"
    if score >= PERFORMANCE_THRESHOLDS["good"]:
        return "good"
    return "poor"


def _to_metrics(value: MetricsLike | None) -> FieldMetrics:
    if value is None:
        return FieldMetrics()
    if isinstance(value, FieldMetrics):
        return value
    if isinstance(value, Mapping):
        return FieldMetrics.from_mapping(value)
    logger.debug(f"Ignoring unsupported metrics value of type {type(value).__name__}")
    return FieldMetrics()


def _is_included(field_key: str, field_settings: FieldSettingsMap | None) -> bool:
    """Fields are included unless their settings explicitly exclude them."""
    if not field_settings or field_key not in field_settings:
        return True

    settings = field_settings[field_key]
    if isinstance(settings, FieldSettings):
        return settings.include_in_metrics
    if isinstance(settings, Mapping):
        flag = settings.get("include_in_metrics", settings.get("includeInMetrics", True))
        return flag is not False
    return True


def _log_unknown_settings(
    fields: Sequence[FieldDefinition], field_settings: FieldSettingsMap | None
) -> None:
    if not field_settings:
        return
    known = {field.key for field in fields}
    unknown = sorted(key for key in field_settings if key not in known)
    if unknown:
        logger.debug(f"Ignoring field settings for unknown fields: {', '.join(unknown)}")


def _mean(values: list[float]) -> float:
    return sum(values) / len(values) if values else 0.0


def calculate_model_summaries(
    models: Iterable[str],
    fields: Sequence[FieldDefinition],
    averages: Averages,
    field_settings: FieldSettingsMap | None = None,
) -> tuple[ModelSummary, ...]:
    """
    Build one ModelSummary per model with macro-averaged overall metrics.

    Args:
        models: Visible model names
        fields: Field definitions, in display order
        averages: averages[field_key][model_name] -> FieldMetrics or a mapping
            with accuracy/precision/recall/f1 keys
        field_settings: Optional per-field settings keyed by field key

    Returns:
        Summaries in model order with fields_won=0 and rank=0

    Missing (field, model) metrics read as zero. Overall metrics are means
    over included fields only; with no included fields they are 0.
    """
    _log_unknown_settings(fields, field_settings)

    summaries = []
    for model_name in models:
        performances = []
        for field in fields:
            metrics = _to_metrics((averages.get(field.key) or {}).get(model_name))
            performances.append(
                FieldPerformance(
                    field_key=field.key,
                    field_name=field.name,
                    accuracy=metrics.accuracy,
                    precision=metrics.precision,
                    recall=metrics.recall,
                    f1=metrics.f1,
                    is_included_in_metrics=_is_included(field.key, field_settings),
                )
            )

        included = [fp for fp in performances if fp.is_included_in_metrics]
        summaries.append(
            ModelSummary(
                model_name=model_name,
                overall_accuracy=_mean([fp.accuracy for fp in included]),
                overall_precision=_mean([fp.precision for fp in included]),
                overall_recall=_mean([fp.recall for fp in included]),
                overall_f1=_mean([fp.f1 for fp in included]),
                fields_won=0.0,
                total_fields=len(included),
                rank=0,
                field_performance=tuple(performances),
            )
        )

    return tuple(summaries)


def _narrow_to_best(
    candidates: list[int], performances: Mapping[int, FieldPerformance], metric: str
) -> list[int]:
    """Keep the candidates whose metric is within tolerance of the best value."""
    best = max(getattr(performances[i], metric) for i in candidates)
    return [i for i in candidates if nearly_equal(getattr(performances[i], metric), best)]


def determine_field_winners(
    summaries: Sequence[ModelSummary],
    fields: Sequence[FieldDefinition],
    field_settings: FieldSettingsMap | None = None,
) -> tuple[ModelSummary, ...]:
    """
    Determine each included field's winner(s) and credit field wins.

    Tie-breaking hierarchy per field:
    1. Accuracy (primary)
    2. Precision (first tie-breaker)
    3. Recall (second tie-breaker)

    Every surviving model is a winner. A sole winner is credited 1 field win;
    n tied winners are each credited 1/n and marked as a shared victory, so
    each included field awards exactly 1 in total. Excluded fields award
    nothing.

    Args:
        summaries: Output of calculate_model_summaries
        fields: Field definitions used to build the summaries
        field_settings: Optional per-field settings keyed by field key

    Returns:
        New summaries with winner flags and fields_won filled in
    """
    if not summaries:
        return ()

    fields_won = [summary.fields_won for summary in summaries]
    field_rows = [
        {fp.field_key: fp for fp in summary.field_performance} for summary in summaries
    ]

    for field in fields:
        if not _is_included(field.key, field_settings):
            continue

        # Models without this field (built from a different field list) cannot win it
        candidates = [i for i, row in enumerate(field_rows) if field.key in row]
        if not candidates:
            continue
        performances = {i: field_rows[i][field.key] for i in candidates}

        winners = _narrow_to_best(candidates, performances, "accuracy")
        if len(winners) > 1:
            winners = _narrow_to_best(winners, performances, "precision")
        if len(winners) > 1:
            winners = _narrow_to_best(winners, performances, "recall")

        shared = len(winners) > 1
        credit = 1.0 / len(winners)
        for i in winners:
            field_rows[i][field.key] = replace(
                performances[i], is_winner=True, is_shared_victory=shared
            )
            fields_won[i] += credit

        logger.debug(
            f"Field '{field.key}' won by {', '.join(summaries[i].model_name for i in winners)}"
            + (" (shared)" if shared else "")
        )

    return tuple(
        replace(
            summary,
            fields_won=fields_won[i],
            field_performance=tuple(
                field_rows[i][fp.field_key] for fp in summary.field_performance
            ),
        )
        for i, summary in enumerate(summaries)
    )


_RANKING_CRITERIA = ("overall_accuracy", "overall_precision", "overall_recall", "fields_won")


def _compare_summaries(a: ModelSummary, b: ModelSummary) -> int:
    """Order by the numeric criteria (descending, with tolerance), then name."""
    for criterion in _RANKING_CRITERIA:
        a_value = getattr(a, criterion)
        b_value = getattr(b, criterion)
        if not nearly_equal(a_value, b_value):
            return -1 if a_value > b_value else 1

    a_key = (a.model_name.casefold(), a.model_name)
    b_key = (b.model_name.casefold(), b.model_name)
    if a_key == b_key:
        return 0
    return -1 if a_key < b_key else 1


def _tied(a: ModelSummary, b: ModelSummary) -> bool:
    return all(
        nearly_equal(getattr(a, criterion), getattr(b, criterion))
        for criterion in _RANKING_CRITERIA
    )


def assign_ranks(summaries: Sequence[ModelSummary]) -> tuple[ModelSummary, ...]:
    """
    Sort summaries and assign skip-style competition ranks.

    Sort order:
    1. Overall accuracy (descending)
    2. Overall precision (descending)
    3. Overall recall (descending)
    4. Fields won (descending)
    5. Model name (ascending, final deterministic fallback)

    Models tied on every numeric criterion share a rank; the next distinct
    model's rank is its 1-based position (1, 1, 1, 4).

    Args:
        summaries: Output of determine_field_winners

    Returns:
        New summaries in rank order with rank filled in
    """
    ordered = sorted(summaries, key=functools.cmp_to_key(_compare_summaries))

    ranked: list[ModelSummary] = []
    for index, summary in enumerate(ordered):
        if index > 0 and _tied(ordered[index - 1], summary):
            rank = ranked[-1].rank
        else:
            rank = index + 1
        ranked.append(replace(summary, rank=rank))

    if ranked:
        logger.debug(
            "Model ranking: "
            + ", ".join(f"{summary.rank}. {summary.model_name}" for summary in ranked)
        )

    return tuple(ranked)


def rank_models(
    models: Iterable[str],
    fields: Sequence[FieldDefinition],
    averages: Averages,
    field_settings: FieldSettingsMap | None = None,
) -> tuple[ModelSummary, ...]:
    """
    Run the full ranking pipeline.

    Example:
        >>> fields = [FieldDefinition(key="party", name="Party")]
        >>> averages = {"party": {"a": {"accuracy": 0.9}, "b": {"accuracy": 0.8}}}
        >>> [s.model_name for s in rank_models(["b", "a"], fields, averages)]
        ['a', 'b']
    """
    models = list(models)
    summaries = calculate_model_summaries(models, fields, averages, field_settings)
    summaries = determine_field_winners(summaries, fields, field_settings)
    return assign_ranks(summaries)
