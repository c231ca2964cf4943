from __future__ import annotations

import re
from datetime import date, datetime

from ..models.values import TypedValue

"""Type detection for tokenized cell strings.

Detection order is fixed: empty, integer, float, date, text. Integer runs
before date so a token that satisfies both is an integer.
"""

__all__ = [
    "DATE_FORMATS",
    "detect_type",
    "parse_date",
    "parse_number",
]

# yyyy-MM-dd, MM/dd/yyyy, yyyy/MM/dd; first match wins
DATE_FORMATS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d")

_INT_RE = re.compile(r"[+-]?\d+")
# float() also accepts surrounding whitespace and digit underscores; neither is a number here
_FLOAT_RE = re.compile(
    r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:e[+-]?\d+)?|inf(?:inity)?|nan)",
    re.IGNORECASE,
)


def parse_date(value: str) -> date | None:
    for fmt in DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def parse_number(value: str) -> int | float | None:
    """Parse ``value`` as int, then float. None if it is neither."""
    if _INT_RE.fullmatch(value):
        return int(value)
    if _FLOAT_RE.fullmatch(value):
        return float(value)
    return None


def detect_type(value: str) -> TypedValue:
    """Classify one tokenized field.

    Args:
        value: lowercase field text as produced by the tokenizer

    Returns:
        TypedValue tagged EMPTY, INTEGER, FLOAT, DATE or TEXT
    """
    if value == "":
        return TypedValue.empty()
    if _INT_RE.fullmatch(value):
        return TypedValue.integer(int(value))
    if _FLOAT_RE.fullmatch(value):
        return TypedValue.float_(float(value))
    parsed = parse_date(value)
    if parsed is not None:
        return TypedValue.date_(parsed)
    return TypedValue.text(value)
