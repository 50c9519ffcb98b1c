from __future__ import annotations

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.field_schema import FIELD_KEYS, REQUIRED_FIELD_KEYS

"""Configuration loader.

Loads ``config/census.yml`` (or the path in ``CENSUS_CONFIG``), validates it
against the bundled JSON schema and applies defaults.
"""

__all__ = [
    "ConfigError",
    "CensusConfig",
    "ValidationSettings",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "resolve_config_path",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/census.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")
CONFIG_ENV_VAR = "CENSUS_CONFIG"


class ConfigError(Exception):
    pass


@dataclass(frozen=True)
class ValidationSettings:
    warn_missing_expected: bool = False
    child_age_limit: int = 25


@dataclass(frozen=True)
class CensusConfig:
    source_directory: str
    output_directory: str = "./formatted"
    sheet_name: str | None = None
    header_row: int = 1
    required_fields: tuple[str, ...] = tuple(k for k in FIELD_KEYS if k in REQUIRED_FIELD_KEYS)
    default_hours_worked: int = 40
    column_overrides: dict[str, str | None] = field(default_factory=dict)
    validation: ValidationSettings = field(default_factory=ValidationSettings)


def _validate_config_schema(data: Any) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or malformed, or the data violates it
    """
    if not SCHEMA_PATH.exists():
        raise ConfigError(f"config schema not found: {SCHEMA_PATH}")
    try:
        schema = json.loads(SCHEMA_PATH.read_text(encoding="utf-8"))
        jsonschema.validate(data, schema)
    except json.JSONDecodeError as e:
        raise ConfigError(f"invalid schema file: {e}") from e
    except ValidationError as e:
        raise ConfigError(f"config validation failed: {e.message}") from e


def _check_field_keys(keys: Any, what: str) -> None:
    unknown = sorted(set(keys) - set(FIELD_KEYS))
    if unknown:
        raise ConfigError(f"{what}: unknown census field(s): {', '.join(unknown)}")


def resolve_config_path(path: Path | None = None) -> Path:
    """Explicit path, else $CENSUS_CONFIG, else config/census.yml."""
    if path is not None:
        return path
    env = os.getenv(CONFIG_ENV_VAR)
    return Path(env) if env else DEFAULT_CONFIG_PATH


def load_config(path: Path | None = None) -> CensusConfig:
    path = resolve_config_path(path)
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    _validate_config_schema(data)

    overrides = data.get("column_overrides") or {}
    _check_field_keys(overrides, "column_overrides")
    defaults = CensusConfig(source_directory=data["source_directory"])
    required = data.get("required_fields")
    if required is not None:
        _check_field_keys(required, "required_fields")

    validation_raw = data.get("validation") or {}
    validation = ValidationSettings(
        warn_missing_expected=validation_raw.get("warn_missing_expected", False),
        child_age_limit=validation_raw.get("child_age_limit", 25),
    )
    return CensusConfig(
        source_directory=data["source_directory"],
        output_directory=data.get("output_directory", defaults.output_directory),
        sheet_name=data.get("sheet_name"),
        header_row=data.get("header_row", 1),
        required_fields=tuple(required) if required is not None else defaults.required_fields,
        default_hours_worked=data.get("default_hours_worked", 40),
        column_overrides={k: (v or None) for k, v in overrides.items()},
        validation=validation,
    )
