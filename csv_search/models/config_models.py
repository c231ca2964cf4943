from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

"""Engine configuration dataclass.

Separate from the YAML loader in csv_search/config/loader.py so that the
engine can be constructed programmatically (tests, embedding) without a
config file.
"""

DEFAULT_CHUNK_SIZE = 4096
DEFAULT_BATCH_SIZE = 500
DEFAULT_CHECKPOINT_INTERVAL = 500
DEFAULT_RESULT_BATCH_SIZE = 500
DEFAULT_FUZZY_THRESHOLD = 2
DEFAULT_INDEX_FILE_NAME = "csv_index.json"
DEFAULT_OFFSETS_FILE_NAME = "row_positions.json"


@dataclass(frozen=True)
class EngineConfig:
    """Runtime settings for a SearchEngine.

    ``storage_root`` is where index/offset snapshots and the skipped-record
    log are written. ``row_cache_size=None`` keeps every fetched row in memory.
    """
    storage_root: Path
    chunk_size: int = DEFAULT_CHUNK_SIZE  # bytes per read() call
    batch_size: int = DEFAULT_BATCH_SIZE  # rows per hand-off to analysis
    checkpoint_interval: int = DEFAULT_CHECKPOINT_INTERVAL  # rows between snapshots
    result_batch_size: int = DEFAULT_RESULT_BATCH_SIZE  # matched rows per result flush
    row_cache_size: int | None = None
    fuzzy_threshold: int = DEFAULT_FUZZY_THRESHOLD
    index_file_name: str = DEFAULT_INDEX_FILE_NAME
    offsets_file_name: str = DEFAULT_OFFSETS_FILE_NAME
    show_progress: bool = True

    @property
    def index_path(self) -> Path:
        return Path(self.storage_root) / self.index_file_name

    @property
    def offsets_path(self) -> Path:
        return Path(self.storage_root) / self.offsets_file_name

    @property
    def logs_dir(self) -> Path:
        return Path(self.storage_root) / "logs"
