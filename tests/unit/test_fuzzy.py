from __future__ import annotations

import pytest

from csv_search.index.fuzzy import edit_distance, fuzzy_row_ids, similar_values


@pytest.mark.parametrize(
    "a, b, expected",
    [
        ("dave", "dave", 0),
        ("dave", "dav", 1),
        ("dave", "davo", 1),
        ("kitten", "sitting", 3),
        ("ab", "ba", 2),
        ("", "abc", 3),
    ],
)
def test_edit_distance(a, b, expected):
    assert edit_distance(a, b) == expected


def test_similar_values_keeps_input_order():
    assert similar_values(["davo", "bob", "dave", "dav"], "dave", 1) == ["davo", "dave", "dav"]


def test_similar_values_rejects_negative_threshold():
    with pytest.raises(ValueError):
        similar_values(["a"], "a", -1)


def test_fuzzy_row_ids_unions_buckets():
    buckets = {"dave": [2, 3], "dav": [4], "bob": [5]}
    assert sorted(fuzzy_row_ids(buckets, "dave", 1)) == [2, 3, 4]
    assert fuzzy_row_ids(buckets, "zzzzzz", 1) == []
