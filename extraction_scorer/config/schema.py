"""
Configuration schema models for Extraction Scorer.

This module defines Pydantic models for the field definitions and per-field
comparison configuration supplied by the template configuration layer. All
models use Pydantic v2 field validators.

Models:
    FieldDefinition: One extraction field (key, name, type, enum options)
    CompareParameters: Strategy parameters (list separator, judge prompt)
    FieldCompareConfig: Compare strategy configured for one field
    FieldSettings: Per-field inclusion flag for metrics
    CompareTypeConfig: Root configuration model (validates entire YAML)
"""

from typing import Literal, get_args

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from .constants import COMPARE_TYPE_CONFIG_VERSION

CompareType = Literal[
    "exact-string",
    "near-exact-string",
    "list-ordered",
    "list-unordered",
    "date-exact",
    "exact-number",
    "boolean",
    "llm-judge",
]

COMPARE_TYPES: tuple[str, ...] = get_args(CompareType)

# Human-readable labels for compare types
COMPARE_TYPE_LABELS: dict[str, str] = {
    "exact-string": "Exact String Match",
    "near-exact-string": "Near Exact Match",
    "llm-judge": "LLM as Judge",
    "exact-number": "Exact Number",
    "date-exact": "Date Match",
    "boolean": "Boolean Match",
    "list-unordered": "List (Unordered)",
    "list-ordered": "List (Ordered)",
}

FieldType = Literal["string", "date", "number", "enum", "multiSelect"]

# Default compare types based on template field type
DEFAULT_COMPARE_TYPE_MAP: dict[str, CompareType] = {
    "string": "near-exact-string",
    "number": "exact-number",
    "date": "date-exact",
    "enum": "exact-string",
    "multiSelect": "list-unordered",
}


class FieldDefinition(BaseModel):
    """
    One extraction field, owned by the template configuration layer.

    Immutable once created.

    Attributes:
        key: Unique, stable identifier
        name: Human-readable display name
        type: Template field type
        options: Allowed option keys for enum / multiSelect fields
    """

    model_config = ConfigDict(frozen=True)

    key: str
    name: str
    type: FieldType = "string"
    options: tuple[str, ...] = ()

    @field_validator("key")
    @classmethod
    def validate_key(cls, v: str) -> str:
        """Validate key is non-empty."""
        if not v or v.isspace():
            raise ValueError("Field key cannot be empty")
        return v.strip()


class CompareParameters(BaseModel):
    """
    Optional parameters for compare types that need configuration.

    Attributes:
        separator: List delimiter for list-ordered / list-unordered
            (auto-detected when omitted)
        comparison_prompt: Custom criteria for llm-judge
    """

    model_config = ConfigDict(frozen=True)

    separator: str | None = None
    comparison_prompt: str | None = None

    @field_validator("separator")
    @classmethod
    def validate_separator(cls, v: str | None) -> str | None:
        """Reject empty separators; str.split cannot split on them."""
        if v is not None and v == "":
            raise ValueError("separator cannot be an empty string")
        return v


class FieldCompareConfig(BaseModel):
    """
    Comparison strategy configured for a single field.

    Attributes:
        field_key: Field identifier (matches FieldDefinition.key)
        field_name: Human-readable field name
        compare_type: The comparison strategy
        parameters: Type-specific parameters
    """

    model_config = ConfigDict(frozen=True)

    field_key: str
    field_name: str = ""
    compare_type: CompareType
    parameters: CompareParameters = Field(default_factory=CompareParameters)

    @field_validator("field_key")
    @classmethod
    def validate_field_key(cls, v: str) -> str:
        """Validate field_key is non-empty."""
        if not v or v.isspace():
            raise ValueError("field_key cannot be empty")
        return v.strip()


class FieldSettings(BaseModel):
    """
    Per-field settings that govern metric aggregation.

    Attributes:
        include_in_metrics: Whether the field counts toward overall scores and
            can have a winner (default: True)
    """

    model_config = ConfigDict(frozen=True)

    include_in_metrics: bool = True


class CompareTypeConfig(BaseModel):
    """
    Complete compare configuration for one extraction template.

    Attributes:
        version: Schema version (e.g., "1.0.0")
        template_key: Template this configuration applies to
        fields: Compare configuration per field
        field_settings: Optional per-field settings keyed by field key

    Example:
        >>> config = CompareTypeConfig(
        ...     template_key="contracts",
        ...     fields=[{"field_key": "counterparty", "compare_type": "near-exact-string"}],
        ... )
        >>> config.get_field_config("counterparty").compare_type
        'near-exact-string'
    """

    version: str = COMPARE_TYPE_CONFIG_VERSION
    template_key: str = ""
    fields: list[FieldCompareConfig] = Field(default_factory=list)
    field_settings: dict[str, FieldSettings] = Field(default_factory=dict)

    @model_validator(mode="after")
    def validate_unique_field_keys(self) -> "CompareTypeConfig":
        """Ensure each field is configured at most once."""
        seen: set[str] = set()
        duplicates: list[str] = []
        for field_config in self.fields:
            if field_config.field_key in seen:
                duplicates.append(field_config.field_key)
            seen.add(field_config.field_key)

        if duplicates:
            raise ValueError(
                f"Duplicate field_key entries in compare config: {', '.join(duplicates)}"
            )
        return self

    def get_field_config(self, field_key: str) -> FieldCompareConfig | None:
        """Get the compare configuration for a field, if configured."""
        for field_config in self.fields:
            if field_config.field_key == field_key:
                return field_config
        return None


def default_compare_config(field: FieldDefinition) -> FieldCompareConfig:
    """
    Build the default compare configuration for a field from its type.

    Args:
        field: Field definition

    Returns:
        FieldCompareConfig using DEFAULT_COMPARE_TYPE_MAP
    """
    return FieldCompareConfig(
        field_key=field.key,
        field_name=field.name,
        compare_type=DEFAULT_COMPARE_TYPE_MAP.get(field.type, "near-exact-string"),
    )


def resolve_compare_config(
    field: FieldDefinition, config: CompareTypeConfig | None = None
) -> FieldCompareConfig:
    """
    Return the configured compare strategy for a field, or its type default.

    Args:
        field: Field definition
        config: Optional template compare configuration

    Returns:
        FieldCompareConfig to use when comparing values of this field
    """
    if config is not None:
        configured = config.get_field_config(field.key)
        if configured is not None:
            return configured
    return default_compare_config(field)
