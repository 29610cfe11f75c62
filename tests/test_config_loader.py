"""
Tests for compare configuration loading and schema validation.

Tests cover:
- load_compare_config() - valid files, missing files, invalid YAML, empty files
- parse_compare_config() - schema errors surfaced as ConfigValidationError
- resolve_compare_config() - configured strategies and field-type defaults
"""

from pathlib import Path

import pytest
from pydantic import ValidationError

from extraction_scorer.config.loader import load_compare_config, parse_compare_config
from extraction_scorer.config.schema import (
    COMPARE_TYPE_LABELS,
    COMPARE_TYPES,
    CompareParameters,
    CompareTypeConfig,
    FieldDefinition,
    resolve_compare_config,
)
from extraction_scorer.exceptions import (
    ConfigFileNotFoundError,
    ConfigurationError,
    ConfigValidationError,
)

VALID_CONFIG = """
version: "1.0.0"
template_key: contracts
fields:
  - field_key: counterparty
    field_name: Counterparty
    compare_type: near-exact-string
  - field_key: signatories
    field_name: Signatories
    compare_type: list-unordered
    parameters:
      separator: "|"
  - field_key: governing_law
    compare_type: llm-judge
    parameters:
      comparison_prompt: Treat a state and its courts as the same jurisdiction.
field_settings:
  internal_notes:
    include_in_metrics: false
"""


@pytest.fixture
def config_file(tmp_path: Path):
    """Write YAML text to a temporary config file."""

    def _write(content: str) -> Path:
        path = tmp_path / "compare_config.yaml"
        path.write_text(content, encoding="utf-8")
        return path

    return _write


class TestLoadCompareConfig:
    """Test cases for load_compare_config()."""

    def test_valid_config(self, config_file):
        """A valid file loads into a CompareTypeConfig."""
        config = load_compare_config(config_file(VALID_CONFIG))

        assert config.template_key == "contracts"
        assert len(config.fields) == 3
        signatories = config.get_field_config("signatories")
        assert signatories.compare_type == "list-unordered"
        assert signatories.parameters.separator == "|"
        assert config.get_field_config("governing_law").parameters.comparison_prompt.startswith(
            "Treat"
        )
        assert config.field_settings["internal_notes"].include_in_metrics is False

    def test_accepts_string_path(self, config_file):
        """String paths are accepted as well as Path objects."""
        config = load_compare_config(str(config_file(VALID_CONFIG)))

        assert config.get_field_config("counterparty") is not None

    def test_logs_loaded_template(self, config_file, caplog):
        """Loading logs the template key and field count."""
        caplog.set_level("INFO", logger="extraction_scorer.config.loader")

        load_compare_config(config_file(VALID_CONFIG))

        assert "Loaded compare configuration for template 'contracts' (3 fields)" in caplog.text

    def test_missing_file(self, tmp_path):
        """A missing file raises ConfigFileNotFoundError."""
        with pytest.raises(ConfigFileNotFoundError, match="not found"):
            load_compare_config(tmp_path / "missing.yaml")

    def test_invalid_yaml(self, config_file):
        """Malformed YAML raises ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="Invalid YAML"):
            load_compare_config(config_file("fields: [unclosed"))

    def test_empty_file(self, config_file):
        """An empty file raises ConfigValidationError."""
        with pytest.raises(ConfigValidationError, match="empty"):
            load_compare_config(config_file(""))

    def test_non_mapping_root(self, config_file):
        """A YAML list at the root is rejected."""
        with pytest.raises(ConfigValidationError, match="must be a mapping"):
            load_compare_config(config_file("- counterparty\n- signatories\n"))

    def test_unknown_compare_type(self, config_file):
        """Compare types outside the supported set are rejected."""
        content = """
fields:
  - field_key: counterparty
    compare_type: fuzzy-ish
"""
        with pytest.raises(ConfigValidationError, match="fields.0.compare_type"):
            load_compare_config(config_file(content))

    def test_duplicate_field_keys(self, config_file):
        """A field may only be configured once."""
        content = """
fields:
  - field_key: counterparty
    compare_type: exact-string
  - field_key: counterparty
    compare_type: near-exact-string
"""
        with pytest.raises(ConfigValidationError, match="Duplicate field_key"):
            load_compare_config(config_file(content))

    def test_bundled_example_config(self):
        """The example configuration shipped with the repo is valid."""
        path = Path(__file__).parent.parent / "examples" / "compare_config.yaml"

        config = load_compare_config(path)

        assert config.template_key == "contracts"
        assert len(config.fields) == 7
        assert config.get_field_config("signatories").parameters.separator == "|"

    def test_errors_share_base_class(self, tmp_path):
        """Configuration errors can be caught as ConfigurationError."""
        with pytest.raises(ConfigurationError):
            load_compare_config(tmp_path / "missing.yaml")


class TestParseCompareConfig:
    """Test cases for parse_compare_config()."""

    def test_parses_mapping(self):
        """Already-parsed mappings validate without touching the filesystem."""
        config = parse_compare_config(
            {
                "template_key": "invoices",
                "fields": [{"field_key": "total", "compare_type": "exact-number"}],
            }
        )

        assert config.get_field_config("total").compare_type == "exact-number"
        assert config.version == "1.0.0"

    def test_blank_field_key_rejected(self):
        """Blank field keys are rejected with the source in the message."""
        with pytest.raises(ConfigValidationError, match="inline.yaml"):
            parse_compare_config(
                {"fields": [{"field_key": "  ", "compare_type": "boolean"}]}, source="inline.yaml"
            )

    def test_empty_separator_rejected(self):
        """Empty list separators are rejected."""
        with pytest.raises(ValidationError):
            CompareParameters(separator="")


class TestResolveCompareConfig:
    """Test cases for resolve_compare_config()."""

    @pytest.mark.parametrize(
        "field_type,expected",
        [
            ("string", "near-exact-string"),
            ("number", "exact-number"),
            ("date", "date-exact"),
            ("enum", "exact-string"),
            ("multiSelect", "list-unordered"),
        ],
    )
    def test_field_type_defaults(self, field_type, expected):
        """Unconfigured fields use their type's default compare type."""
        field = FieldDefinition(key="f", name="F", type=field_type)

        assert resolve_compare_config(field).compare_type == expected

    def test_configured_field_wins(self):
        """A configured field uses its configured strategy."""
        config = CompareTypeConfig(
            fields=[{"field_key": "effective_date", "compare_type": "llm-judge"}]
        )
        field = FieldDefinition(key="effective_date", name="Effective Date", type="date")

        assert resolve_compare_config(field, config).compare_type == "llm-judge"

    def test_unconfigured_field_falls_back(self):
        """Fields missing from the config fall back to the type default."""
        config = CompareTypeConfig(fields=[{"field_key": "other", "compare_type": "boolean"}])
        field = FieldDefinition(key="effective_date", name="Effective Date", type="date")

        resolved = resolve_compare_config(field, config)

        assert resolved.compare_type == "date-exact"
        assert resolved.field_name == "Effective Date"

    def test_every_compare_type_has_a_label(self):
        """Each compare type has a human-readable label."""
        assert set(COMPARE_TYPE_LABELS) == set(COMPARE_TYPES)
