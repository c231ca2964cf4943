from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from enum import Enum

"""Typed cell values.

A decoded cell is one of a closed set of kinds. Every comparison in the
query executor switches on ``TypedValue.kind`` instead of probing Python
types at runtime.
"""

__all__ = [
    "ValueKind",
    "TypedValue",
    "EMPTY",
]


class ValueKind(Enum):
    EMPTY = "empty"
    INTEGER = "integer"
    FLOAT = "float"
    DATE = "date"
    TEXT = "text"


@dataclass(frozen=True)
class TypedValue:
    """A single cell after type detection.

    ``value`` holds ``""`` for EMPTY, ``int`` for INTEGER, ``float`` for FLOAT,
    ``datetime.date`` for DATE and the lowercase string for TEXT.
    """
    kind: ValueKind
    value: int | float | date | str

    @property
    def is_numeric(self) -> bool:
        return self.kind in (ValueKind.INTEGER, ValueKind.FLOAT)

    @classmethod
    def empty(cls) -> TypedValue:
        return cls(ValueKind.EMPTY, "")

    @classmethod
    def integer(cls, value: int) -> TypedValue:
        return cls(ValueKind.INTEGER, value)

    @classmethod
    def float_(cls, value: float) -> TypedValue:
        return cls(ValueKind.FLOAT, value)

    @classmethod
    def date_(cls, value: date) -> TypedValue:
        return cls(ValueKind.DATE, value)

    @classmethod
    def text(cls, value: str) -> TypedValue:
        return cls(ValueKind.TEXT, value)


EMPTY = TypedValue.empty()
