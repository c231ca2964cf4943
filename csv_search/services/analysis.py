from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pandas as pd

from ..models.row import Row

"""Downstream collaborators fed by the engine.

``BatchAnalyzer`` receives ingestion batches: it loads each batch into a
DataFrame, marks rows identical to an earlier row (across all batches seen
so far) as duplicates and counts empty cells per field.

``ResultCollector`` receives search result batches and keeps their sizes.
"""

__all__ = [
    "BatchReport",
    "BatchAnalyzer",
    "ResultCollector",
    "rows_to_frame",
]

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BatchReport:
    batch_number: int
    rows: int
    duplicates: int
    empty_values: dict[str, int] = field(default_factory=dict)


def rows_to_frame(rows: list[Row]) -> pd.DataFrame:
    """DataFrame of row values indexed by row id, columns in header order."""
    return pd.DataFrame.from_records(
        [r.to_dict() for r in rows],
        index=pd.Index([r.row_id for r in rows], name="row_id"),
    )


class BatchAnalyzer:
    """Flags duplicate rows and tallies empty cells, one batch at a time."""

    def __init__(self) -> None:
        self._seen: set[int] = set()
        self.reports: list[BatchReport] = []

    def __call__(self, rows: list[Row]) -> BatchReport:
        number = len(self.reports) + 1
        if not rows:
            report = BatchReport(batch_number=number, rows=0, duplicates=0)
            self.reports.append(report)
            return report

        frame = rows_to_frame(rows)
        hashes = pd.util.hash_pandas_object(frame.astype(str), index=False)
        duplicates = 0
        for row, digest in zip(rows, hashes.tolist()):
            if digest in self._seen:
                row.duplicate = True
                duplicates += 1
            else:
                self._seen.add(digest)

        empty = frame.eq("").sum()
        report = BatchReport(
            batch_number=number,
            rows=len(rows),
            duplicates=duplicates,
            empty_values={str(k): int(v) for k, v in empty.items() if v},
        )
        self.reports.append(report)
        logger.info(
            f"batch {number}: rows={report.rows} duplicates={report.duplicates} "
            f"first_row={rows[0].row_id} last_row={rows[-1].row_id}"
        )
        if report.empty_values:
            logger.debug(f"batch {number}: empty values {report.empty_values}")
        return report

    @property
    def duplicate_count(self) -> int:
        return sum(r.duplicates for r in self.reports)


class ResultCollector:
    """Search result sink: records how many matched rows each flush carried."""

    def __init__(self) -> None:
        self.batch_sizes: list[int] = []

    def __call__(self, rows: list[Row]) -> None:
        self.batch_sizes.append(len(rows))
        logger.debug(f"result batch {len(self.batch_sizes)}: {len(rows)} rows")

    @property
    def total(self) -> int:
        return sum(self.batch_sizes)
