"""
Tests for the Model Ranking Engine (extraction_scorer.ranking.engine).

Tests cover:
- calculate_model_summaries() - macro averaging, missing metrics, exclusion
- determine_field_winners() - tie-breaking, shared victories, credit conservation
- assign_ranks() - sort order, skip-style ranks, name fallback
- rank_models() - full pipeline and input immutability
- nearly_equal() and performance_tier()
"""

import logging

import pytest

from extraction_scorer.config.schema import FieldDefinition, FieldSettings
from extraction_scorer.ranking.engine import (
    assign_ranks,
    calculate_model_summaries,
    determine_field_winners,
    nearly_equal,
    performance_tier,
    rank_models,
)
from extraction_scorer.ranking.models import FieldMetrics, ModelSummary


def metrics(accuracy=0.0, precision=0.0, recall=0.0, f1=0.0):
    return FieldMetrics(accuracy=accuracy, precision=precision, recall=recall, f1=f1)


@pytest.fixture
def contract_fields():
    """Three contract fields."""
    return [
        FieldDefinition(key="counterparty", name="Counterparty"),
        FieldDefinition(key="effective_date", name="Effective Date", type="date"),
        FieldDefinition(key="term", name="Term"),
    ]


class TestCalculateModelSummaries:
    """Test cases for calculate_model_summaries()."""

    def test_macro_average_over_fields(self, contract_fields):
        """Overall metrics are unweighted means of the field metrics."""
        averages = {
            "counterparty": {"gpt": metrics(1.0, 1.0, 1.0, 1.0)},
            "effective_date": {"gpt": metrics(0.5, 0.5, 0.5, 0.5)},
            "term": {"gpt": metrics(0.0, 0.0, 0.0, 0.0)},
        }

        (summary,) = calculate_model_summaries(["gpt"], contract_fields, averages)

        assert summary.overall_accuracy == pytest.approx(0.5)
        assert summary.overall_f1 == pytest.approx(0.5)
        assert summary.total_fields == 3
        assert summary.fields_won == 0
        assert summary.rank == 0
        assert [fp.field_key for fp in summary.field_performance] == [
            "counterparty",
            "effective_date",
            "term",
        ]

    def test_missing_metrics_default_to_zero(self, contract_fields):
        """Missing (field, model) metrics read as zero, never NaN."""
        averages = {"counterparty": {"gpt": metrics(0.9, 0.9, 0.9, 0.9)}}

        (summary,) = calculate_model_summaries(["gpt"], contract_fields, averages)

        term = summary.get_field("term")
        assert (term.accuracy, term.precision, term.recall, term.f1) == (0.0, 0.0, 0.0, 0.0)
        assert summary.overall_accuracy == pytest.approx(0.3)

    def test_plain_mappings_accepted(self, contract_fields):
        """Averages may be plain mappings; missing keys read as zero."""
        averages = {"counterparty": {"gpt": {"accuracy": 0.6, "precision": 0.8}}}

        (summary,) = calculate_model_summaries(["gpt"], contract_fields[:1], averages)

        assert summary.overall_accuracy == pytest.approx(0.6)
        assert summary.overall_precision == pytest.approx(0.8)
        assert summary.overall_recall == 0.0

    def test_excluded_fields_do_not_count(self, contract_fields):
        """Excluded fields are left out of the averages and totals."""
        averages = {
            "counterparty": {"gpt": metrics(1.0)},
            "effective_date": {"gpt": metrics(0.0)},
            "term": {"gpt": metrics(0.5)},
        }
        settings = {"effective_date": FieldSettings(include_in_metrics=False)}

        (summary,) = calculate_model_summaries(["gpt"], contract_fields, averages, settings)

        assert summary.total_fields == 2
        assert summary.overall_accuracy == pytest.approx(0.75)
        assert summary.get_field("effective_date").is_included_in_metrics is False
        assert summary.get_field("term").is_included_in_metrics is True

    def test_settings_accept_mappings(self, contract_fields):
        """Field settings may be plain mappings in either spelling."""
        settings = {"term": {"includeInMetrics": False}, "counterparty": {"include_in_metrics": False}}

        (summary,) = calculate_model_summaries(["gpt"], contract_fields, {}, settings)

        assert summary.total_fields == 1

    def test_all_fields_excluded(self, contract_fields):
        """With no included fields the overall metrics and total are 0."""
        averages = {"counterparty": {"gpt": metrics(1.0, 1.0, 1.0, 1.0)}}
        settings = {field.key: FieldSettings(include_in_metrics=False) for field in contract_fields}

        (summary,) = calculate_model_summaries(["gpt"], contract_fields, averages, settings)

        assert summary.total_fields == 0
        assert summary.overall_accuracy == 0.0
        assert summary.overall_f1 == 0.0

    def test_unknown_settings_key_ignored(self, contract_fields, caplog):
        """Settings for fields that do not exist are ignored and logged at debug."""
        caplog.set_level(logging.DEBUG, logger="extraction_scorer.ranking.engine")
        settings = {"retired_field": FieldSettings(include_in_metrics=False)}

        (summary,) = calculate_model_summaries(["gpt"], contract_fields, {}, settings)

        assert summary.total_fields == 3
        assert any("retired_field" in record.getMessage() for record in caplog.records)

    def test_empty_inputs(self, contract_fields):
        """Empty model or field lists produce degenerate but valid output."""
        assert calculate_model_summaries([], contract_fields, {}) == ()

        (summary,) = calculate_model_summaries(["gpt"], [], {})
        assert summary.total_fields == 0
        assert summary.field_performance == ()


class TestDetermineFieldWinners:
    """Test cases for determine_field_winners()."""

    def test_three_way_tie_is_shared(self):
        """Three models tied on accuracy share the field equally."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {m: metrics(1.0, 1.0, 1.0, 1.0) for m in ("A", "B", "C")}}
        summaries = calculate_model_summaries(["A", "B", "C"], fields, averages)

        result = determine_field_winners(summaries, fields)

        for summary in result:
            performance = summary.get_field("party")
            assert performance.is_winner is True
            assert performance.is_shared_victory is True
            assert summary.fields_won == pytest.approx(1 / 3)

    def test_precision_breaks_accuracy_tie(self):
        """Equal accuracy is broken by precision; the winner wins outright."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {"A": metrics(0.9, 0.95), "B": metrics(0.9, 0.85)}}
        summaries = calculate_model_summaries(["A", "B"], fields, averages)

        a, b = determine_field_winners(summaries, fields)

        assert a.get_field("party").is_winner is True
        assert a.get_field("party").is_shared_victory is False
        assert a.fields_won == 1.0
        assert b.get_field("party").is_winner is False
        assert b.fields_won == 0.0

    def test_recall_breaks_precision_tie(self):
        """Equal accuracy and precision are broken by recall."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {"A": metrics(0.8, 0.8, 0.6), "B": metrics(0.8, 0.8, 0.7)}}
        summaries = calculate_model_summaries(["A", "B"], fields, averages)

        a, b = determine_field_winners(summaries, fields)

        assert a.fields_won == 0.0
        assert b.fields_won == 1.0

    def test_differences_within_tolerance_are_ties(self):
        """Accuracy differences within 0.001 are treated as equal."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {"A": metrics(0.9, 0.5, 0.5), "B": metrics(0.9005, 0.5, 0.5)}}
        summaries = calculate_model_summaries(["A", "B"], fields, averages)

        a, b = determine_field_winners(summaries, fields)

        assert a.fields_won == pytest.approx(0.5)
        assert b.fields_won == pytest.approx(0.5)

    def test_credit_conservation(self, contract_fields):
        """Each included field awards exactly 1 field win in total."""
        averages = {
            "counterparty": {"A": metrics(0.9), "B": metrics(0.9), "C": metrics(0.9)},
            "effective_date": {"A": metrics(0.5), "B": metrics(0.7)},
            "term": {"A": metrics(0.2, 0.4), "B": metrics(0.2, 0.4), "C": metrics(0.1)},
        }
        summaries = calculate_model_summaries(["A", "B", "C"], contract_fields, averages)

        result = determine_field_winners(summaries, contract_fields)

        for field in contract_fields:
            credit = 0.0
            for summary in result:
                performance = summary.get_field(field.key)
                if performance.is_winner:
                    winners = sum(1 for s in result if s.get_field(field.key).is_winner)
                    credit += 1 / winners
            assert credit == pytest.approx(1.0)
        assert sum(summary.fields_won for summary in result) == pytest.approx(3.0)

    def test_excluded_field_has_no_winner(self, contract_fields):
        """Excluded fields award no credit and mark no winners."""
        averages = {"term": {"A": metrics(1.0), "B": metrics(0.5)}}
        settings = {"term": FieldSettings(include_in_metrics=False)}
        summaries = calculate_model_summaries(["A", "B"], contract_fields, averages, settings)

        result = determine_field_winners(summaries, contract_fields, settings)

        assert all(not s.get_field("term").is_winner for s in result)
        # The two remaining all-zero fields are shared
        assert sum(s.fields_won for s in result) == pytest.approx(2.0)

    def test_does_not_mutate_input(self):
        """The input summaries are left untouched."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {"A": metrics(1.0)}}
        summaries = calculate_model_summaries(["A"], fields, averages)

        determine_field_winners(summaries, fields)

        assert summaries[0].fields_won == 0.0
        assert summaries[0].get_field("party").is_winner is False

    def test_empty_summaries(self, contract_fields):
        """No models means no winners."""
        assert determine_field_winners((), contract_fields) == ()


class TestAssignRanks:
    """Test cases for assign_ranks()."""

    def test_sorted_by_accuracy_first(self):
        """Higher overall accuracy ranks first regardless of other criteria."""
        summaries = [
            ModelSummary(model_name="low", overall_accuracy=0.5, overall_precision=1.0),
            ModelSummary(model_name="high", overall_accuracy=0.9, overall_precision=0.1),
        ]

        ranked = assign_ranks(summaries)

        assert [s.model_name for s in ranked] == ["high", "low"]
        assert [s.rank for s in ranked] == [1, 2]

    def test_tie_break_hierarchy(self):
        """Precision, recall and fields won break accuracy ties in order."""
        summaries = [
            ModelSummary(model_name="d", overall_accuracy=0.8, overall_precision=0.7),
            ModelSummary(model_name="c", overall_accuracy=0.8, overall_precision=0.9, overall_recall=0.1),
            ModelSummary(model_name="b", overall_accuracy=0.8, overall_precision=0.9, overall_recall=0.5),
            ModelSummary(
                model_name="a",
                overall_accuracy=0.8,
                overall_precision=0.9,
                overall_recall=0.5,
                fields_won=2.0,
            ),
        ]

        ranked = assign_ranks(summaries)

        assert [s.model_name for s in ranked] == ["a", "b", "c", "d"]
        assert [s.rank for s in ranked] == [1, 2, 3, 4]

    def test_skip_style_ranks(self):
        """Three tied models share rank 1 and the next model ranks 4."""
        summaries = [
            ModelSummary(model_name="delta", overall_accuracy=0.5),
            ModelSummary(model_name="gamma", overall_accuracy=0.9),
            ModelSummary(model_name="alpha", overall_accuracy=0.9),
            ModelSummary(model_name="beta", overall_accuracy=0.9),
        ]

        ranked = assign_ranks(summaries)

        assert [s.model_name for s in ranked] == ["alpha", "beta", "gamma", "delta"]
        assert [s.rank for s in ranked] == [1, 1, 1, 4]

    def test_name_fallback_is_case_insensitive(self):
        """Exact numeric ties fall back to alphabetical model name order."""
        summaries = [
            ModelSummary(model_name="mistral"),
            ModelSummary(model_name="Claude"),
            ModelSummary(model_name="gemini"),
        ]

        ranked = assign_ranks(summaries)

        assert [s.model_name for s in ranked] == ["Claude", "gemini", "mistral"]
        assert [s.rank for s in ranked] == [1, 1, 1]

    def test_ranks_non_decreasing(self):
        """Ranks never decrease along the sorted sequence."""
        summaries = [
            ModelSummary(model_name=f"m{i}", overall_accuracy=(i % 3) / 3) for i in range(9)
        ]

        ranked = assign_ranks(summaries)

        ranks = [s.rank for s in ranked]
        assert ranks == sorted(ranks)
        assert ranks == [1, 1, 1, 4, 4, 4, 7, 7, 7]

    def test_empty_input(self):
        """Ranking nothing returns an empty tuple."""
        assert assign_ranks([]) == ()


class TestRankModels:
    """Test cases for the full rank_models() pipeline."""

    def test_three_way_tie_all_rank_first(self):
        """Three perfect models share the field and all rank 1."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {m: metrics(1.0, 1.0, 1.0, 1.0) for m in ("A", "B", "C")}}

        ranked = rank_models(["C", "A", "B"], fields, averages)

        assert [s.model_name for s in ranked] == ["A", "B", "C"]
        assert [s.rank for s in ranked] == [1, 1, 1]
        assert all(s.fields_won == pytest.approx(1 / 3) for s in ranked)

    def test_precision_winner_ranks_first(self):
        """The precision tie-break winner takes the field and rank 1."""
        fields = [FieldDefinition(key="party", name="Party")]
        averages = {"party": {"A": metrics(0.9, 0.95), "B": metrics(0.9, 0.85)}}

        a, b = rank_models(["B", "A"], fields, averages)

        assert (a.model_name, a.rank, a.fields_won) == ("A", 1, 1.0)
        assert a.get_field("party").is_shared_victory is False
        assert (b.model_name, b.rank) == ("B", 2)

    def test_all_zero_metrics(self, contract_fields):
        """Models with no metrics all tie at rank 1 with zero scores."""
        ranked = rank_models(["x", "y"], contract_fields, {})

        assert [s.rank for s in ranked] == [1, 1]
        assert all(s.overall_accuracy == 0.0 for s in ranked)

    def test_deterministic(self, contract_fields):
        """Repeated runs return identical results."""
        averages = {
            "counterparty": {"A": metrics(0.7, 0.6, 0.5, 0.55), "B": metrics(0.8, 0.5, 0.5, 0.5)},
            "term": {"A": metrics(0.9, 0.9, 0.9, 0.9)},
        }

        assert rank_models(["A", "B"], contract_fields, averages) == rank_models(
            ["A", "B"], contract_fields, averages
        )

    def test_to_dict_shape(self):
        """Summaries serialize to the camelCase shape used by consumers."""
        fields = [FieldDefinition(key="party", name="Party")]
        (summary,) = rank_models(["A"], fields, {"party": {"A": metrics(1.0)}})

        data = summary.to_dict()

        assert data["modelName"] == "A"
        assert data["rank"] == 1
        assert data["fieldsWon"] == 1.0
        assert data["fieldPerformance"][0]["isWinner"] is True


class TestHelpers:
    """Test cases for nearly_equal() and performance_tier()."""

    def test_nearly_equal(self):
        """Values within 0.001 are equal."""
        assert nearly_equal(0.5, 0.5) is True
        assert nearly_equal(0.5, 0.5009) is True
        assert nearly_equal(0.5, 0.502) is False

    @pytest.mark.parametrize(
        "score,tier", [(0.95, "excellent"), (0.9, "excellent"), (0.7, "good"), (0.69, "poor")]
    )
    def test_performance_tier(self, score, tier):
        """Scores map to performance tiers."""
        assert performance_tier(score) == tier

    def test_field_metrics_rejects_out_of_range(self):
        """FieldMetrics validates every metric is in [0, 1]."""
        with pytest.raises(ValueError, match="accuracy"):
            FieldMetrics(accuracy=1.5)

    def test_from_mapping_sanitizes_values(self):
        """from_mapping() reads missing or non-finite values as 0 and clamps."""
        result = FieldMetrics.from_mapping({"accuracy": float("nan"), "precision": 1.2, "recall": None})

        assert result == FieldMetrics(accuracy=0.0, precision=1.0, recall=0.0, f1=0.0)
