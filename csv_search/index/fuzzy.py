from __future__ import annotations

from collections.abc import Iterable, Mapping

import Levenshtein

"""Approximate value matching over one field's index buckets.

Edit distance is plain Levenshtein with unit cost for insertion, deletion
and substitution (no transpositions).
"""

__all__ = [
    "edit_distance",
    "similar_values",
    "fuzzy_row_ids",
]


def edit_distance(a: str, b: str) -> int:
    return Levenshtein.distance(a, b)


def similar_values(values: Iterable[str], target: str, threshold: int) -> list[str]:
    """Values within ``threshold`` edits of ``target``, in input order."""
    if threshold < 0:
        raise ValueError(f"threshold must be >= 0, got {threshold}")
    # score_cutoff lets the library stop early once the distance exceeds threshold
    return [v for v in values if Levenshtein.distance(v, target, score_cutoff=threshold) <= threshold]


def fuzzy_row_ids(buckets: Mapping[str, list[int]], target: str, threshold: int) -> list[int]:
    """Union of the row ids of every bucket whose key is close to ``target``.

    No ordering is promised.
    """
    matched: list[int] = []
    for value in similar_values(buckets.keys(), target, threshold):
        matched.extend(buckets[value])
    return matched
