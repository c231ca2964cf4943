from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

__all__ = [
    "QueryOperator",
    "QueryCondition",
]


class QueryOperator(Enum):
    EQUALS = "="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    RANGE = ".."


@dataclass(frozen=True)
class QueryCondition:
    """One ``field <op> value`` clause of a search query.

    For RANGE conditions ``value`` is empty and ``range`` carries the
    inclusive ``(low, high)`` pair; for every other operator ``range`` is None.
    """
    field: str
    operator: QueryOperator
    value: str = ""
    range: tuple[str, str] | None = None

    def __str__(self) -> str:
        if self.operator is QueryOperator.RANGE and self.range is not None:
            return f"{self.field}..{self.range[0]}..{self.range[1]}"
        return f"{self.field}{self.operator.value}{self.value}"
