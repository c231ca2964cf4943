from __future__ import annotations

import logging
from collections.abc import Mapping

from ..models.query import QueryCondition, QueryOperator
from ..models.row import Row
from .cache import RowCache
from .fuzzy import fuzzy_row_ids

"""Inverted index and row store.

Three structures live here:

- the primary index, field -> value -> row ids (persisted),
- the row offset map, row id -> byte offset of the record (persisted),
- the in-memory row data assembled during ingestion and the row cache
  filled lazily by the query executor (never persisted).

Field and value keys are lowercase; an empty value is stored under the
``"null"`` sentinel. Comparison and range lookups compare the value keys as
strings, so they only approximate numeric or date order. The query executor
re-checks every candidate against its typed value.

Indexing the same file twice without calling ``reset()`` appends every row
id a second time; clearing between passes is the caller's job.
"""

__all__ = [
    "NULL_SENTINEL",
    "InvertedIndex",
]

logger = logging.getLogger(__name__)

NULL_SENTINEL = "null"


def normalize_field(field: str) -> str:
    return field.lower()


def normalize_value(value: str) -> str:
    value = value.lower()
    return value if value else NULL_SENTINEL


class InvertedIndex:
    """Field/value -> row id index with offset map and row cache."""

    def __init__(self, *, row_cache_size: int | None = None) -> None:
        self.primary: dict[str, dict[str, list[int]]] = {}
        self._offsets: dict[int, int] = {}
        self._row_data: dict[int, Row] = {}
        self._cache = RowCache(max_size=row_cache_size)

    # ------------------------------------------------------------------
    # ingestion
    # ------------------------------------------------------------------
    def index(self, field: str, value: str, row_id: int, row: Row) -> None:
        """Append ``row_id`` to the bucket of ``field``/``value`` and remember ``row``.

        ``row`` is stored under ``row_id`` on every call; when the fields of
        one record are indexed one by one the last call wins.
        """
        buckets = self.primary.setdefault(normalize_field(field), {})
        buckets.setdefault(normalize_value(value), []).append(row_id)
        self._row_data[row_id] = row

    def add_row_offset(self, row_id: int, offset: int) -> None:
        self._offsets[row_id] = offset

    def row_offset(self, row_id: int) -> int | None:
        return self._offsets.get(row_id)

    @property
    def offsets(self) -> dict[int, int]:
        return self._offsets

    def replace_primary(self, primary: Mapping[str, Mapping[str, list[int]]]) -> None:
        self.primary = {field: {value: list(ids) for value, ids in buckets.items()} for field, buckets in primary.items()}

    def replace_offsets(self, offsets: Mapping[int, int]) -> None:
        self._offsets = dict(offsets)

    def reset(self) -> None:
        """Drop index, offsets, ingestion row data and the row cache."""
        self.primary = {}
        self._offsets = {}
        self._row_data = {}
        self._cache.clear()

    # ------------------------------------------------------------------
    # lookups
    # ------------------------------------------------------------------
    def fields(self) -> list[str]:
        return list(self.primary)

    def has_field(self, field: str) -> bool:
        return normalize_field(field) in self.primary

    def __contains__(self, field: object) -> bool:
        return isinstance(field, str) and self.has_field(field)

    def _buckets(self, field: str) -> dict[str, list[int]] | None:
        return self.primary.get(normalize_field(field))

    def lookup_exact(self, field: str, value: str) -> list[int] | None:
        buckets = self._buckets(field)
        if buckets is None:
            return None
        ids = buckets.get(normalize_value(value))
        return list(ids) if ids is not None else None

    def lookup_comparison(self, field: str, op: QueryOperator, bound: str) -> list[int] | None:
        """Row ids whose value key is ``<`` or ``>`` ``bound`` as a string."""
        buckets = self._buckets(field)
        if buckets is None:
            return None
        bound = bound.lower()
        if op is QueryOperator.LESS_THAN:
            keys = [k for k in buckets if k < bound]
        elif op is QueryOperator.GREATER_THAN:
            keys = [k for k in buckets if k > bound]
        else:
            raise ValueError(f"not a comparison operator: {op}")
        return [row_id for k in keys for row_id in buckets[k]]

    def lookup_range(self, field: str, low: str, high: str) -> list[int] | None:
        """Row ids whose value key lies in ``[low, high]`` as strings."""
        buckets = self._buckets(field)
        if buckets is None:
            return None
        low, high = low.lower(), high.lower()
        return [row_id for k, ids in buckets.items() if low <= k <= high for row_id in ids]

    def lookup(self, condition: QueryCondition) -> list[int] | None:
        """Coarse candidate ids for one query condition. None if the field is unknown."""
        if not self.has_field(condition.field):
            return None
        op = condition.operator
        if op is QueryOperator.EQUALS:
            return self.lookup_exact(condition.field, condition.value) or []
        if op in (QueryOperator.LESS_THAN, QueryOperator.GREATER_THAN):
            return self.lookup_comparison(condition.field, op, condition.value)
        if condition.range is None:
            return None
        return self.lookup_range(condition.field, *condition.range)

    # ------------------------------------------------------------------
    # statistics
    # ------------------------------------------------------------------
    def duplicates(self, field: str) -> dict[str, list[int]]:
        """Every value of ``field`` that occurs in more than one row."""
        buckets = self._buckets(field) or {}
        return {value: list(ids) for value, ids in buckets.items() if len(ids) > 1}

    def missing_value_rows(self, field: str) -> list[int]:
        buckets = self._buckets(field) or {}
        return list(buckets.get(NULL_SENTINEL, []))

    def unique_values(self, field: str) -> set[str] | None:
        buckets = self._buckets(field)
        if buckets is None:
            return None
        return set(buckets)

    def count(self, field: str, value: str) -> int:
        buckets = self._buckets(field)
        if buckets is None:
            return 0
        return len(buckets.get(normalize_value(value), []))

    def sorted_row_ids(self, field: str, ascending: bool = True) -> list[int] | None:
        buckets = self._buckets(field)
        if buckets is None:
            return None
        return sorted((row_id for ids in buckets.values() for row_id in ids), reverse=not ascending)

    def field_with_most_duplicate_values(self) -> tuple[str, int] | None:
        """Field with the most distinct values shared by several rows.

        The count is of duplicated values, not duplicated rows. On a tie the
        field seen first wins. None when no field has any duplicate.
        """
        best: tuple[str, int] | None = None
        for field, buckets in self.primary.items():
            dup_values = sum(1 for ids in buckets.values() if len(ids) > 1)
            if dup_values > 0 and (best is None or dup_values > best[1]):
                best = (field, dup_values)
        return best

    def fuzzy_match(self, field: str, value: str, threshold: int = 2) -> list[int] | None:
        """Row ids of every value within ``threshold`` edits of ``value``."""
        buckets = self._buckets(field)
        if buckets is None:
            return None
        return fuzzy_row_ids(buckets, value.lower(), threshold)

    # ------------------------------------------------------------------
    # row store
    # ------------------------------------------------------------------
    def row_data(self, row_id: int) -> Row | None:
        """Row assembled during ingestion. In-memory only; gone after a reload."""
        return self._row_data.get(row_id)

    def all_row_ids(self) -> list[int]:
        return list(self._row_data)

    def get_row(self, row_id: int) -> Row | None:
        return self._cache.get(row_id)

    def cache_row(self, row_id: int, row: Row) -> None:
        self._cache.put(row_id, row)

    @property
    def cache(self) -> RowCache:
        return self._cache

    @property
    def row_count(self) -> int:
        return len(self._offsets)

    def debug_dump(self) -> str:
        lines: list[str] = []
        for field, buckets in self.primary.items():
            lines.append(f"Field: {field}")
            for value, ids in buckets.items():
                lines.append(f"  Value: {value} -> Rows: {ids}")
        text = "\n".join(lines)
        logger.debug(text)
        return text
