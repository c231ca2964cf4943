from __future__ import annotations

from collections import OrderedDict

from ..models.row import Row

__all__ = [
    "RowCache",
]


class RowCache:
    """Row id -> decoded Row memo table.

    ``max_size=None`` never evicts: one entry per distinct row ever fetched
    stays in memory for the life of the process. With a positive
    ``max_size`` the least recently used entry is dropped on overflow.
    """

    def __init__(self, max_size: int | None = None) -> None:
        if max_size is not None and max_size <= 0:
            raise ValueError(f"max_size must be positive or None, got {max_size}")
        self.max_size = max_size
        self._rows: OrderedDict[int, Row] = OrderedDict()
        self.hits = 0
        self.misses = 0

    def get(self, row_id: int) -> Row | None:
        row = self._rows.get(row_id)
        if row is None:
            self.misses += 1
            return None
        self.hits += 1
        if self.max_size is not None:
            self._rows.move_to_end(row_id)
        return row

    def put(self, row_id: int, row: Row) -> None:
        self._rows[row_id] = row
        if self.max_size is not None:
            self._rows.move_to_end(row_id)
            while len(self._rows) > self.max_size:
                self._rows.popitem(last=False)

    def clear(self) -> None:
        self._rows.clear()
        self.hits = 0
        self.misses = 0

    def __contains__(self, row_id: object) -> bool:
        return row_id in self._rows

    def __len__(self) -> int:
        return len(self._rows)
