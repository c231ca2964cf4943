from __future__ import annotations

from datetime import date

import pytest

from csv_search.models.values import TypedValue, ValueKind
from csv_search.reader.types import detect_type, parse_date, parse_number


@pytest.mark.parametrize(
    "raw, kind, value",
    [
        ("", ValueKind.EMPTY, ""),
        ("42", ValueKind.INTEGER, 42),
        ("-7", ValueKind.INTEGER, -7),
        ("+3", ValueKind.INTEGER, 3),
        ("20240131", ValueKind.INTEGER, 20240131),
        ("3.14", ValueKind.FLOAT, 3.14),
        ("1e3", ValueKind.FLOAT, 1000.0),
        (".5", ValueKind.FLOAT, 0.5),
        ("2024-01-31", ValueKind.DATE, date(2024, 1, 31)),
        ("01/31/2024", ValueKind.DATE, date(2024, 1, 31)),
        ("2024/01/31", ValueKind.DATE, date(2024, 1, 31)),
        ("dave", ValueKind.TEXT, "dave"),
        ("13/01/2024", ValueKind.TEXT, "13/01/2024"),
        ("1_000", ValueKind.TEXT, "1_000"),
        (" 5", ValueKind.TEXT, " 5"),
    ],
)
def test_detect_type(raw, kind, value):
    """Detection order is empty, integer, float, date, text."""
    detected = detect_type(raw)
    assert detected.kind is kind
    assert detected.value == value


def test_detect_type_accepts_nan_and_inf_as_float():
    assert detect_type("inf").kind is ValueKind.FLOAT
    nan = detect_type("nan")
    assert nan.kind is ValueKind.FLOAT
    assert nan.value != nan.value


def test_empty_value_is_empty_typed_value():
    assert detect_type("") == TypedValue.empty()
    assert detect_type("").is_numeric is False


def test_parse_number_prefers_int():
    assert parse_number("10") == 10
    assert isinstance(parse_number("10"), int)
    assert parse_number("10.0") == 10.0
    assert parse_number("ten") is None


def test_parse_date_rejects_impossible_dates():
    assert parse_date("2023-02-30") is None
    assert parse_date("2024-02-29") == date(2024, 2, 29)
