from __future__ import annotations

from ..models.row import Row
from .types import detect_type

"""Quote-aware line tokenizer.

Comma separated, double quotes group a field, and a doubled quote inside a
quoted field is a literal quote. A lone quote anywhere else just toggles
quoted mode and is dropped. Output is lowercased.
"""

__all__ = [
    "HeaderError",
    "tokenize_line",
    "parse_header_line",
    "decode_record",
    "MIN_HEADER_COLUMNS",
]

DELIMITER = ","
QUOTE = '"'
MIN_HEADER_COLUMNS = 2


class HeaderError(Exception):
    """Raised when the header line is missing or has fewer than two columns."""


def tokenize_line(line: str) -> list[str]:
    """Split one record into lowercase field strings."""
    fields: list[str] = []
    current: list[str] = []
    in_quotes = False
    i = 0
    n = len(line)
    while i < n:
        ch = line[i]
        if ch == QUOTE:
            if in_quotes and i + 1 < n and line[i + 1] == QUOTE:
                current.append(QUOTE)
                i += 2
                continue
            in_quotes = not in_quotes
        elif ch == DELIMITER and not in_quotes:
            fields.append("".join(current).lower())
            current = []
        else:
            current.append(ch)
        i += 1
    fields.append("".join(current).lower())
    return fields


def parse_header_line(line: str) -> list[str]:
    """Tokenize a header line into trimmed lowercase names.

    Raises:
        HeaderError: fewer than two columns
    """
    names = [name.strip() for name in tokenize_line(line.lstrip("\ufeff"))]
    if len(names) < MIN_HEADER_COLUMNS:
        raise HeaderError(f"header needs at least {MIN_HEADER_COLUMNS} columns, got {len(names)}: {line!r}")
    return names


def decode_record(line: str, headers: list[str], row_id: int) -> Row | None:
    """Tokenize and type one record. None when the field count does not match."""
    values = tokenize_line(line)
    if len(values) != len(headers):
        return None
    return Row(row_id=row_id, values={name: detect_type(raw) for name, raw in zip(headers, values)})
