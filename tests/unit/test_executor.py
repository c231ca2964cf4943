from __future__ import annotations

import asyncio
from datetime import date

import pytest

from csv_search.index.inverted import InvertedIndex
from csv_search.index.persistence import IndexStore
from csv_search.models.query import QueryCondition, QueryOperator
from csv_search.models.row import Row
from csv_search.models.values import TypedValue
from csv_search.query.errors import IndexUnavailableError, UnknownFieldError
from csv_search.query.executor import QueryExecutor, check_condition
from csv_search.reader.types import detect_type


def _cond(op: QueryOperator, value: str = "", rng: tuple[str, str] | None = None) -> QueryCondition:
    return QueryCondition("f", op, value, rng)


class TestCheckCondition:
    def test_numbers_compare_numerically(self):
        nine = TypedValue.integer(9)
        assert check_condition(nine, _cond(QueryOperator.LESS_THAN, "10"))
        assert not check_condition(nine, _cond(QueryOperator.GREATER_THAN, "10"))
        assert check_condition(TypedValue.float_(2.5), _cond(QueryOperator.EQUALS, "2.50"))
        assert check_condition(nine, _cond(QueryOperator.EQUALS, "9.0"))

    def test_range_is_inclusive(self):
        for n in (20, 30, 40):
            assert check_condition(TypedValue.integer(n), _cond(QueryOperator.RANGE, rng=("20", "40")))
        assert not check_condition(TypedValue.integer(41), _cond(QueryOperator.RANGE, rng=("20", "40")))

    def test_dates_compare_by_calendar(self):
        day = TypedValue.date_(date(2020, 7, 4))
        assert check_condition(day, _cond(QueryOperator.GREATER_THAN, "2020-06-01"))
        assert check_condition(day, _cond(QueryOperator.LESS_THAN, "12/31/2020"))
        assert check_condition(day, _cond(QueryOperator.EQUALS, "2020/07/04"))

    def test_text_compares_as_string(self):
        bob = TypedValue.text("bob")
        assert check_condition(bob, _cond(QueryOperator.EQUALS, "bob"))
        assert check_condition(bob, _cond(QueryOperator.LESS_THAN, "dave"))
        assert check_condition(bob, _cond(QueryOperator.RANGE, rng=("a", "c")))

    def test_empty_matches_only_null_equality(self):
        empty = TypedValue.empty()
        assert check_condition(empty, _cond(QueryOperator.EQUALS, "null"))
        assert not check_condition(empty, _cond(QueryOperator.LESS_THAN, "5"))
        assert not check_condition(empty, _cond(QueryOperator.GREATER_THAN, "5"))

    def test_uncomparable_bound_fails(self):
        assert not check_condition(TypedValue.integer(5), _cond(QueryOperator.LESS_THAN, "abc"))
        assert not check_condition(TypedValue.date_(date(2020, 1, 1)), _cond(QueryOperator.GREATER_THAN, "soon"))

    def test_missing_value_fails(self):
        assert not check_condition(None, _cond(QueryOperator.EQUALS, "x"))


@pytest.fixture()
def snapshot(tmp_path) -> tuple[IndexStore, dict[int, Row]]:
    """Store holding ages 9, 10 and 100 for rows 2..4."""
    rows: dict[int, Row] = {}
    index = InvertedIndex()
    for row_id, age in enumerate(["9", "10", "100"], start=2):
        row = Row(row_id=row_id, values={"age": detect_type(age)})
        rows[row_id] = row
        index.index("age", age, row_id, row)
        index.add_row_offset(row_id, row_id)
    store = IndexStore(tmp_path)
    store.save_all(index)
    return store, rows


def _executor(store: IndexStore, rows: dict[int, Row], **kwargs) -> QueryExecutor:
    async def load(row_id: int) -> Row | None:
        return rows.get(row_id)
    return QueryExecutor(InvertedIndex(), store, load, **kwargs)


def test_typed_recheck_removes_coarse_false_positives(snapshot):
    store, rows = snapshot
    result = asyncio.run(_executor(store, rows).execute("age<5"))
    # "10" and "100" sort before "5" as strings
    assert result.candidate_count == 2
    assert result.row_ids == []
    assert result.rows == []


def test_results_are_in_row_id_order(snapshot):
    store, rows = snapshot
    result = asyncio.run(_executor(store, rows).execute("age>0"))
    assert result.row_ids == [2, 3, 4]
    assert [r["age"] for r in result.rows] == [9, 10, 100]
    assert len(result) == 3


def test_result_sink_receives_batches(snapshot):
    store, rows = snapshot
    batches: list[list[int]] = []
    executor = _executor(
        store, rows,
        result_sink=lambda batch: batches.append([r.row_id for r in batch]),
        result_batch_size=2,
    )
    result = asyncio.run(executor.execute("age>0"))
    assert result.row_ids == [2, 3, 4]
    assert batches == [[2, 3], [4]]


def test_conditions_are_intersected(snapshot):
    store, rows = snapshot
    result = asyncio.run(_executor(store, rows).execute("age=9 and age>5"))
    assert result.row_ids == [2]


def test_unknown_field_raises(snapshot):
    store, rows = snapshot
    with pytest.raises(UnknownFieldError) as exc:
        asyncio.run(_executor(store, rows).execute("height>3"))
    assert exc.value.field == "height"


def test_missing_snapshot_raises(tmp_path):
    executor = _executor(IndexStore(tmp_path / "empty"), {})
    with pytest.raises(IndexUnavailableError):
        asyncio.run(executor.execute("age=1"))


def test_unloadable_row_is_skipped(snapshot):
    store, rows = snapshot
    del rows[2]
    result = asyncio.run(_executor(store, rows).execute("age=9"))
    assert result.candidate_count == 1
    assert result.row_ids == []


def test_invalid_batch_size(snapshot):
    store, rows = snapshot
    with pytest.raises(ValueError):
        _executor(store, rows, result_batch_size=0)
