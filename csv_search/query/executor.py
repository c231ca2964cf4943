from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable

from ..index.inverted import NULL_SENTINEL, InvertedIndex
from ..index.persistence import IndexStore
from ..models.processing_result import SearchResult
from ..models.query import QueryCondition, QueryOperator
from ..models.row import Row
from ..models.values import TypedValue, ValueKind
from ..reader.types import parse_date, parse_number
from .errors import IndexUnavailableError, UnknownFieldError
from .parser import parse_query

"""Query execution.

A search runs in two stages. The coarse stage asks the index for the row
ids of every condition (string comparison on value keys) and intersects
them. The authoritative stage loads each surviving row and re-checks every
condition against its typed value: numbers compare numerically, dates by
calendar, text as strings. Only rows that pass the second stage are
returned.

Searches only ever run against the committed snapshot on disk: the index
is reloaded from the store before each query.
"""

__all__ = [
    "QueryExecutor",
    "check_condition",
    "RowLoader",
    "ResultSink",
]

logger = logging.getLogger(__name__)

RowLoader = Callable[[int], Awaitable[Row | None]]
ResultSink = Callable[[list[Row]], None]


def _cmp(a: object, b: object) -> int:
    return (a > b) - (a < b)  # type: ignore[operator]


def _compare(value: TypedValue, bound: str) -> int | None:
    """Sign of ``value - bound`` under the value's own type. None if incomparable."""
    kind = value.kind
    if kind is ValueKind.INTEGER or kind is ValueKind.FLOAT:
        number = parse_number(bound)
        return None if number is None else _cmp(value.value, number)
    if kind is ValueKind.DATE:
        day = parse_date(bound)
        return None if day is None else _cmp(value.value, day)
    if kind is ValueKind.TEXT:
        return _cmp(value.value, bound)
    return None  # EMPTY orders against nothing


def _equals(value: TypedValue, expected: str) -> bool:
    kind = value.kind
    if kind is ValueKind.EMPTY:
        return expected in ("", NULL_SENTINEL)
    if kind is ValueKind.TEXT:
        return value.value == expected
    return _compare(value, expected) == 0


def check_condition(value: TypedValue | None, condition: QueryCondition) -> bool:
    """Authoritative typed check of one row value against one condition."""
    if value is None:
        return False
    op = condition.operator
    if op is QueryOperator.EQUALS:
        return _equals(value, condition.value)
    if op is QueryOperator.LESS_THAN:
        c = _compare(value, condition.value)
        return c is not None and c < 0
    if op is QueryOperator.GREATER_THAN:
        c = _compare(value, condition.value)
        return c is not None and c > 0
    if condition.range is None:
        return False
    low, high = condition.range
    c_low = _compare(value, low)
    c_high = _compare(value, high)
    return c_low is not None and c_high is not None and c_low >= 0 and c_high <= 0


class QueryExecutor:
    """Runs text queries against a persisted index snapshot.

    Args:
        index: index instance that receives the loaded snapshot
        store: snapshot store to load from
        row_loader: coroutine returning the decoded row for a row id
        result_sink: receives matched rows in batches of ``result_batch_size``
        result_batch_size: rows per sink call
    """

    def __init__(
        self,
        index: InvertedIndex,
        store: IndexStore,
        row_loader: RowLoader,
        *,
        result_sink: ResultSink | None = None,
        result_batch_size: int = 500,
    ) -> None:
        if result_batch_size <= 0:
            raise ValueError(f"result_batch_size must be positive, got {result_batch_size}")
        self.index = index
        self.store = store
        self.row_loader = row_loader
        self.result_sink = result_sink
        self.result_batch_size = result_batch_size

    async def _load_snapshot(self) -> None:
        if not await asyncio.to_thread(self.store.load_index, self.index):
            raise IndexUnavailableError(f"index snapshot unavailable at {self.store.index_path}")
        if not await asyncio.to_thread(self.store.load_offsets, self.index) and self.index.row_count == 0:
            raise IndexUnavailableError(f"row offsets unavailable at {self.store.offsets_path}")

    def candidates(self, conditions: list[QueryCondition]) -> set[int]:
        """Coarse stage: intersection of the index lookups of every condition.

        Raises:
            UnknownFieldError: a condition's field is not in the index
        """
        matching: set[int] | None = None
        for condition in conditions:
            ids = self.index.lookup(condition)
            if ids is None:
                raise UnknownFieldError(condition.field)
            if matching is None:
                matching = set(ids)
            else:
                matching &= set(ids)
        return matching or set()

    async def _flush(self, batch: list[Row]) -> None:
        if self.result_sink is None or not batch:
            return
        await asyncio.to_thread(self.result_sink, list(batch))

    async def execute(self, query: str) -> SearchResult:
        """Parse, look up, re-validate.

        Raises:
            InvalidQueryError: the query has no valid condition
            IndexUnavailableError: no snapshot could be loaded
            UnknownFieldError: a condition names a field absent from the index
        """
        conditions = parse_query(query)
        await self._load_snapshot()
        matching = self.candidates(conditions)
        logger.debug(f"query={query!r} conditions={len(conditions)} candidates={len(matching)}")

        results: list[Row] = []
        batch: list[Row] = []
        for row_id in sorted(matching):
            row = await self.row_loader(row_id)
            if row is None:
                logger.warning(f"row {row_id} could not be loaded; skipped")
                continue
            if not all(check_condition(row.get(c.field), c) for c in conditions):
                continue
            results.append(row)
            batch.append(row)
            if len(batch) >= self.result_batch_size:
                await self._flush(batch)
                batch.clear()
        await self._flush(batch)

        logger.info(f"search {query!r}: {len(results)} of {len(matching)} candidates matched")
        return SearchResult(
            query=query,
            candidate_count=len(matching),
            row_ids=[r.row_id for r in results],
            rows=[r.to_dict() for r in results],
        )
