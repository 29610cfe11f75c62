"""
Configuration loader for Extraction Scorer.

This module loads compare configuration YAML files and validates them with
Pydantic models. The configuration UI persists one file per extraction
template; the scoring engine only ever sees the validated CompareTypeConfig.

Functions:
    load_compare_config: Load and validate a compare configuration file
    parse_compare_config: Validate an already-parsed configuration mapping
"""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from extraction_scorer.exceptions import ConfigFileNotFoundError, ConfigValidationError

from .schema import CompareTypeConfig

logger = logging.getLogger(__name__)


def _format_validation_error(e: ValidationError, source: str) -> str:
    """Format pydantic errors as one line per failing location."""
    error_messages = []
    for error in e.errors():
        loc = ".".join(str(x) for x in error["loc"])
        msg = error["msg"]
        error_messages.append(f"  - {loc}: {msg}")

    return f"Compare configuration validation failed in {source}:\n" + "\n".join(
        error_messages
    )


def parse_compare_config(
    raw_config: dict[str, Any], source: str = "<dict>"
) -> CompareTypeConfig:
    """
    Validate a configuration mapping into a CompareTypeConfig.

    Args:
        raw_config: Mapping as produced by yaml.safe_load or json.loads
        source: Label used in error messages (usually the file path)

    Returns:
        Validated CompareTypeConfig

    Raises:
        ConfigValidationError: If the mapping does not match the schema
    """
    if not isinstance(raw_config, dict):
        raise ConfigValidationError(
            f"Compare configuration in {source} must be a mapping, "
            f"got: {type(raw_config).__name__}"
        )

    try:
        return CompareTypeConfig.model_validate(raw_config)
    except ValidationError as e:
        raise ConfigValidationError(_format_validation_error(e, source)) from e


def load_compare_config(config_path: str | Path) -> CompareTypeConfig:
    """
    Load a compare configuration YAML file.

    This function:
    1. Loads YAML from the specified path
    2. Validates structure using the CompareTypeConfig Pydantic model
    3. Returns the validated configuration

    Args:
        config_path: Path to the YAML file (relative or absolute)

    Returns:
        CompareTypeConfig ready to hand to the comparator and ranking engine

    Raises:
        ConfigFileNotFoundError: If config file doesn't exist at the specified path
        ConfigValidationError: If YAML is invalid or config validation fails

    Example:
        >>> config = load_compare_config("examples/compare_config.yaml")
        >>> config.get_field_config("counterparty").compare_type
        'near-exact-string'

    Security:
        - Uses yaml.safe_load() to prevent code injection
    """
    config_path = Path(config_path)

    if not config_path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {config_path}")

    try:
        with config_path.open(encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigValidationError(f"Invalid YAML syntax in {config_path}: {e}") from e
    except OSError as e:
        raise ConfigValidationError(
            f"Failed to read configuration file {config_path}: {e}"
        ) from e

    if raw_config is None:
        raise ConfigValidationError(f"Configuration file is empty: {config_path}")

    config = parse_compare_config(raw_config, source=str(config_path))

    logger.info(
        f"Loaded compare configuration for template '{config.template_key}' "
        f"({len(config.fields)} fields)"
    )
    return config
