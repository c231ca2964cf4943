from __future__ import annotations

import re

from ..models.query import QueryCondition, QueryOperator
from .errors import InvalidQueryError

"""Query language parser.

Grammar::

    query  := clause ("and" clause)*
    clause := field "<" value | field ">" value | field "=" value
            | field ".." low ".." high

The query is split on the substring ``and`` wherever it occurs, ignoring
case. A field name or value that contains ``and`` is cut in two and usually
produces a dropped clause. Each clause is classified by the first of
``<``, ``>``, ``=``, ``..`` that it contains, in that order. Clauses that do
not split into the expected number of non-empty parts are dropped.
"""

__all__ = [
    "InvalidQueryError",
    "parse_query",
    "parse_clause",
]

_AND_RE = re.compile("and", re.IGNORECASE)

_BINARY_OPERATORS = (
    QueryOperator.LESS_THAN,
    QueryOperator.GREATER_THAN,
    QueryOperator.EQUALS,
)


def _split(clause: str, token: str, expected: int) -> list[str] | None:
    parts = [p.strip() for p in clause.split(token)]
    if len(parts) != expected or not all(parts):
        return None
    return parts


def parse_clause(clause: str) -> QueryCondition | None:
    """Parse one ``field<op>value`` clause; None when malformed."""
    clause = clause.strip().lower()
    for op in _BINARY_OPERATORS:
        if op.value in clause:
            parts = _split(clause, op.value, 2)
            if parts is None:
                return None
            return QueryCondition(field=parts[0], operator=op, value=parts[1])
    if QueryOperator.RANGE.value in clause:
        parts = _split(clause, QueryOperator.RANGE.value, 3)
        if parts is None:
            return None
        return QueryCondition(field=parts[0], operator=QueryOperator.RANGE, range=(parts[1], parts[2]))
    return None


def parse_query(query: str) -> list[QueryCondition]:
    """Parse a full query into its AND-ed conditions, in query order.

    Raises:
        InvalidQueryError: no clause of ``query`` is valid
    """
    conditions = [c for c in (parse_clause(part) for part in _AND_RE.split(query) if part.strip()) if c is not None]
    if not conditions:
        raise InvalidQueryError(f"no valid condition in query: {query!r}")
    return conditions
