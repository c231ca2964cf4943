from __future__ import annotations

import json
from dataclasses import asdict, dataclass
from datetime import UTC, datetime

"""ErrorRecord model for the skipped-record log.

One record per source line that could not be indexed. ``offset`` is the
byte position of the offending line, which stays meaningful even though
skipped lines never receive a row id.
"""

__all__ = [
    "ErrorRecord",
]


@dataclass(frozen=True)
class ErrorRecord:
    """Structured error record for JSON Lines logging.

    Attributes:
        timestamp: ISO8601 UTC timestamp with 'Z' suffix
        file: source file name
        offset: byte offset of the record start, -1 when unknown
        error_type: classification in UPPER_SNAKE_CASE
        message: human readable detail
    """
    timestamp: str
    file: str
    offset: int
    error_type: str
    message: str

    @staticmethod
    def create(file: str, offset: int, error_type: str, message: str) -> ErrorRecord:
        ts = datetime.now(UTC).isoformat().replace("+00:00", "Z")
        return ErrorRecord(
            timestamp=ts,
            file=file,
            offset=offset,
            error_type=error_type,
            message=message,
        )

    def to_json_line(self) -> str:
        return json.dumps(asdict(self), ensure_ascii=False)
