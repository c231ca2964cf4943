"""Inverted-index search over large delimited text files."""

from .services.engine import SearchEngine

__all__ = [
    "SearchEngine",
]

__version__ = "0.1.0"
