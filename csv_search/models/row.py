from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .values import TypedValue

"""Row model.

A Row is the decoded form of one data record: header name -> typed value,
in header order. ``row_id`` follows spreadsheet numbering (header line is
row 1, the first data record is row 2).
"""

__all__ = [
    "Row",
    "FIRST_ROW_ID",
]

FIRST_ROW_ID = 2


@dataclass
class Row:
    """Decoded data record.

    ``duplicate`` is owned by the downstream analysis step; nothing in the
    indexing or query code sets it.
    """
    row_id: int
    values: dict[str, TypedValue] = field(default_factory=dict)
    duplicate: bool = False

    def get(self, field_name: str) -> TypedValue | None:
        return self.values.get(field_name)

    def to_dict(self) -> dict[str, Any]:
        """Plain field -> python value mapping (EMPTY becomes ``""``)."""
        return {name: tv.value for name, tv in self.values.items()}
