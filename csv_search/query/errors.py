from __future__ import annotations

__all__ = [
    "SearchError",
    "InvalidQueryError",
    "IndexUnavailableError",
    "UnknownFieldError",
]


class SearchError(Exception):
    """Base class for every way a search can fail (as opposed to matching nothing)."""


class InvalidQueryError(SearchError, ValueError):
    """The query text yielded no valid condition."""


class IndexUnavailableError(SearchError):
    """No committed index snapshot could be loaded."""


class UnknownFieldError(SearchError):
    """A condition names a field that the index does not contain."""

    def __init__(self, field: str) -> None:
        super().__init__(f"unknown field: {field!r}")
        self.field = field
