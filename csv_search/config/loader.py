from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any

import jsonschema
import yaml
from jsonschema.exceptions import ValidationError

from ..models.config_models import (
    DEFAULT_BATCH_SIZE,
    DEFAULT_CHECKPOINT_INTERVAL,
    DEFAULT_CHUNK_SIZE,
    DEFAULT_FUZZY_THRESHOLD,
    DEFAULT_INDEX_FILE_NAME,
    DEFAULT_OFFSETS_FILE_NAME,
    DEFAULT_RESULT_BATCH_SIZE,
    EngineConfig,
)

"""Config loader.

Responsibilities:
- Load a YAML config file (default ``config/search.yml``)
- Validate it against config_schema.json shipped next to this module
- Apply defaults and the CSV_SEARCH_STORAGE_ROOT environment override
"""

__all__ = [
    "ConfigError",
    "DEFAULT_CONFIG_PATH",
    "STORAGE_ROOT_ENV",
    "load_config",
]

SCHEMA_PATH = Path(__file__).parent / "config_schema.json"
DEFAULT_CONFIG_PATH = Path("config/search.yml")
STORAGE_ROOT_ENV = "CSV_SEARCH_STORAGE_ROOT"


class ConfigError(Exception):
    pass


def _validate_config_schema(data: dict[str, Any]) -> None:
    """Validate config data against the JSON schema.

    Raises:
        ConfigError: schema file missing or unreadable, or the data violates it
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


def config_from_mapping(data: dict[str, Any]) -> EngineConfig:
    _validate_config_schema(data)
    storage_root = os.getenv(STORAGE_ROOT_ENV) or data["storage_root"]
    return EngineConfig(
        storage_root=Path(storage_root),
        chunk_size=data.get("chunk_size", DEFAULT_CHUNK_SIZE),
        batch_size=data.get("batch_size", DEFAULT_BATCH_SIZE),
        checkpoint_interval=data.get("checkpoint_interval", DEFAULT_CHECKPOINT_INTERVAL),
        result_batch_size=data.get("result_batch_size", DEFAULT_RESULT_BATCH_SIZE),
        row_cache_size=data.get("row_cache_size"),
        fuzzy_threshold=data.get("fuzzy_threshold", DEFAULT_FUZZY_THRESHOLD),
        index_file_name=data.get("index_file_name", DEFAULT_INDEX_FILE_NAME),
        offsets_file_name=data.get("offsets_file_name", DEFAULT_OFFSETS_FILE_NAME),
        show_progress=data.get("show_progress", True),
    )


def load_config(path: Path) -> EngineConfig:
    if not path.exists():
        raise ConfigError(f"config file not found: {path}")
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError(f"invalid yaml: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config root must be a mapping, got {type(data).__name__}")
    return config_from_mapping(data)
