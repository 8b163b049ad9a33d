from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from formulation_intake.models.config_models import (
    DatabaseConfig,
    FormulationRules,
    IntakeConfig,
    UploadLimits,
)

"""Config loader.

Responsibilities:
- Load YAML config (default config/intake.yml)
- Validate against the bundled JSON schema (config_schema.json)
- Apply defaults for the optional upload / validation / database sections
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "SCHEMA_PATH",
    "load_config",
]

DEFAULT_CONFIG_PATH = Path("config/intake.yml")
SCHEMA_PATH = Path(__file__).with_name("config_schema.json")


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or invalid, or data fails validation
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


def _upload_limits(raw: dict[str, Any]) -> UploadLimits:
    defaults = UploadLimits()
    extensions = raw.get("allowed_extensions")
    return UploadLimits(
        allowed_extensions=(
            tuple(e.lower() for e in extensions) if extensions else defaults.allowed_extensions
        ),
        max_file_size_bytes=raw.get("max_file_size_bytes", defaults.max_file_size_bytes),
    )


def _formulation_rules(raw: dict[str, Any]) -> FormulationRules:
    # 未指定キーは FormulationRules の既定値 (0/100/95/105)
    try:
        return FormulationRules(**{k: float(v) for k, v in raw.items()})
    except ValueError as e:
        raise ConfigError(f"invalid validation section: {e}") from e


def load_config(path: Path = DEFAULT_CONFIG_PATH) -> IntakeConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError("config validation failed: top level must be a mapping")
    _validate_config_schema(data)

    db_raw = data.get("database") or {}
    db = DatabaseConfig(
        host=db_raw.get("host"),
        port=db_raw.get("port"),
        user=db_raw.get("user"),
        password=db_raw.get("password"),
        database=db_raw.get("database"),
        dsn=db_raw.get("dsn"),
    )
    return IntakeConfig(
        source_directory=data["source_directory"],
        upload=_upload_limits(data.get("upload") or {}),
        rules=_formulation_rules(data.get("validation") or {}),
        database=db,
    )
