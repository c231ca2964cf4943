from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import jsonschema
from jsonschema.exceptions import ValidationError

from ..models.config_models import DEFAULT_INDEX_FILE_NAME, DEFAULT_OFFSETS_FILE_NAME
from .inverted import InvertedIndex

"""Snapshot persistence for the inverted index and the row offset map.

Each structure is saved as one JSON document under the storage root given
at construction. A save rewrites the whole document; a load replaces the
in-memory structure wholesale and never merges. Neither raises: failures
are logged and reported as ``False``.

Document shapes:

- index:   {"<field>": {"<value>": [row_id, ...]}}
- offsets: {"<row_id>": byte_offset}   (JSON object keys are strings)
"""

__all__ = [
    "IndexStore",
    "INDEX_SCHEMA",
    "OFFSETS_SCHEMA",
]

logger = logging.getLogger(__name__)

UINT64_MAX = 2**64 - 1

INDEX_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": {
        "type": "object",
        "additionalProperties": {
            "type": "array",
            "items": {"type": "integer"},
        },
    },
}

OFFSETS_SCHEMA: dict[str, Any] = {
    "type": "object",
    "propertyNames": {"pattern": "^-?[0-9]+$"},
    "additionalProperties": {"type": "integer", "minimum": 0, "maximum": UINT64_MAX},
}


class IndexStore:
    """Saves and loads InvertedIndex snapshots below ``storage_root``."""

    def __init__(
        self,
        storage_root: Path | str,
        *,
        index_file_name: str = DEFAULT_INDEX_FILE_NAME,
        offsets_file_name: str = DEFAULT_OFFSETS_FILE_NAME,
    ) -> None:
        self.storage_root = Path(storage_root)
        self.index_path = self.storage_root / index_file_name
        self.offsets_path = self.storage_root / offsets_file_name

    # index -----------------------------------------------------------------
    def save_index(self, index: InvertedIndex) -> bool:
        ok = self._write(self.index_path, index.primary)
        if ok:
            logger.debug(f"index saved to {self.index_path}")
        return ok

    def load_index(self, index: InvertedIndex) -> bool:
        data = self._read(self.index_path, INDEX_SCHEMA)
        if data is None:
            return False
        index.replace_primary(data)
        logger.debug(f"index loaded from {self.index_path} fields={len(data)}")
        return True

    # offsets ---------------------------------------------------------------
    def save_offsets(self, index: InvertedIndex) -> bool:
        payload = {str(row_id): offset for row_id, offset in index.offsets.items()}
        ok = self._write(self.offsets_path, payload)
        if ok:
            logger.debug(f"row offsets saved to {self.offsets_path}")
        return ok

    def load_offsets(self, index: InvertedIndex) -> bool:
        data = self._read(self.offsets_path, OFFSETS_SCHEMA)
        if data is None:
            return False
        index.replace_offsets({int(row_id): offset for row_id, offset in data.items()})
        logger.debug(f"row offsets loaded from {self.offsets_path} rows={len(data)}")
        return True

    def save_all(self, index: InvertedIndex) -> bool:
        # both snapshots are attempted even if the first one fails
        saved_index = self.save_index(index)
        saved_offsets = self.save_offsets(index)
        return saved_index and saved_offsets

    # helpers ---------------------------------------------------------------
    def _write(self, path: Path, payload: Any) -> bool:
        tmp_name: str | None = None
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "w", encoding="utf-8", dir=path.parent, prefix=f".{path.name}.", suffix=".tmp", delete=False
            ) as f:
                tmp_name = f.name
                json.dump(payload, f, ensure_ascii=False)
            os.replace(tmp_name, path)
            return True
        except (OSError, TypeError, ValueError) as e:
            logger.error(f"failed to save {path}: {e}")
            if tmp_name is not None:
                try:
                    os.unlink(tmp_name)
                except OSError:
                    pass
            return False

    def _read(self, path: Path, schema: dict[str, Any]) -> Any | None:
        if not path.exists():
            logger.warning(f"snapshot not found: {path}")
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            jsonschema.validate(data, schema)
        except (OSError, UnicodeDecodeError, json.JSONDecodeError) as e:
            logger.warning(f"failed to read {path}: {e}")
            return None
        except ValidationError as e:
            logger.warning(f"invalid snapshot {path}: {e.message}")
            return None
        return data
