from __future__ import annotations

import statistics
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

"""Result models for ingestion and search runs."""


@dataclass(frozen=True)
class IngestResult:
    """Aggregated outcome of one ``process_rows`` run.

    Feeds the SUMMARY line rendered by csv_search.services.summary.
    """
    indexed_rows: int  # rows that received a row id
    skipped_records: int  # field-count mismatches
    batches: int  # batches handed to the analysis collaborator
    checkpoints: int  # full index/offset snapshots written
    start_time: datetime
    end_time: datetime
    elapsed_seconds: float
    throughput_rows_per_sec: float
    avg_batch_seconds: float = 0.0
    p95_batch_seconds: float = 0.0


@dataclass(frozen=True)
class SearchResult:
    """Rows that survived typed re-validation for one query."""
    query: str
    candidate_count: int  # row ids left after index-stage intersection
    row_ids: list[int] = field(default_factory=list)
    rows: list[dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.rows)


class BatchStatsAccumulator:
    """Collects per-batch hand-off timings and summarises them."""

    def __init__(self) -> None:
        self.batch_times: list[float] = []

    def add_batch_time(self, elapsed_seconds: float) -> None:
        self.batch_times.append(elapsed_seconds)

    def get_stats(self) -> tuple[int, float, float]:
        """Calculate batch statistics.

        Returns:
            tuple: (total_batches, avg_batch_seconds, p95_batch_seconds)
        """
        if not self.batch_times:
            return (0, 0.0, 0.0)

        total_batches = len(self.batch_times)
        avg_batch_seconds = statistics.mean(self.batch_times)

        if total_batches == 1:
            p95_batch_seconds = self.batch_times[0]
        else:
            p95_batch_seconds = statistics.quantiles(
                self.batch_times, n=20, method='inclusive'
            )[18]  # 19th of 20 cut points

        return (total_batches, avg_batch_seconds, p95_batch_seconds)
