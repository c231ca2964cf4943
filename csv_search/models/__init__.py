"""Domain models for the CSV search engine.

This package contains the value, row, query and configuration types shared
by the reader, index, query and service layers.
"""

from .config_models import EngineConfig
from .error_record import ErrorRecord
from .processing_result import BatchStatsAccumulator, IngestResult, SearchResult
from .query import QueryCondition, QueryOperator
from .row import FIRST_ROW_ID, Row
from .values import EMPTY, TypedValue, ValueKind

__all__ = [
    # Configuration models
    "EngineConfig",
    # Value models
    "EMPTY",
    "TypedValue",
    "ValueKind",
    "Row",
    "FIRST_ROW_ID",
    # Query models
    "QueryCondition",
    "QueryOperator",
    # Result models
    "BatchStatsAccumulator",
    "ErrorRecord",
    "IngestResult",
    "SearchResult",
]
