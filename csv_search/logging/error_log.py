from __future__ import annotations

from datetime import UTC, datetime
from pathlib import Path

from ..models.error_record import ErrorRecord

"""Skipped-record log.

Records that fail the field-count check are skipped without stopping
ingestion. They are buffered here and written as JSON Lines to
``<logs_dir>/skipped-YYYYMMDD-HHMMSS.log`` (UTC) when flushed. Nothing is
created on disk if nothing was skipped.
"""

__all__ = [
    "ErrorRecord",
    "ErrorLogBuffer",
    "FIELD_COUNT_MISMATCH",
]

TIMESTAMP_FMT = "%Y%m%d-%H%M%S"
FIELD_COUNT_MISMATCH = "FIELD_COUNT_MISMATCH"


class ErrorLogBuffer:
    """In-memory buffer of ErrorRecords; flush() appends them as JSON Lines.

    The file path is fixed on first access. Serial use only.
    """

    def __init__(self, logs_dir: Path) -> None:
        self.logs_dir = Path(logs_dir)
        self._records: list[ErrorRecord] = []
        self._file_path: Path | None = None
        self.total = 0

    @property
    def file_path(self) -> Path:
        if self._file_path is None:
            stamp = datetime.now(UTC).strftime(TIMESTAMP_FMT)
            self._file_path = self.logs_dir / f"skipped-{stamp}.log"
        return self._file_path

    def append(self, record: ErrorRecord) -> None:
        self._records.append(record)
        self.total += 1

    def __len__(self) -> int:
        return len(self._records)

    def flush(self) -> Path | None:
        """Write buffered records. Returns the log path, or None if there was nothing to write."""
        if not self._records:
            return None
        fp = self.file_path
        fp.parent.mkdir(parents=True, exist_ok=True)
        with fp.open("a", encoding="utf-8") as f:
            for r in self._records:
                f.write(r.to_json_line() + "\n")
        self._records.clear()
        return fp
