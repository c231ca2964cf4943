from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from ..index.inverted import InvertedIndex
from ..index.persistence import IndexStore
from ..logging.error_log import FIELD_COUNT_MISMATCH, ErrorLogBuffer
from ..models.config_models import EngineConfig
from ..models.error_record import ErrorRecord
from ..models.processing_result import BatchStatsAccumulator, IngestResult, SearchResult
from ..models.row import FIRST_ROW_ID, Row
from ..query.errors import SearchError
from ..query.executor import QueryExecutor, ResultSink
from ..reader.stream import Record, StreamingReader
from ..reader.tokenizer import HeaderError, decode_record, parse_header_line, tokenize_line
from ..reader.types import detect_type
from .analysis import BatchAnalyzer, ResultCollector
from .progress import IngestProgress

"""Search engine service.

Ties the reader, index, persistence and query executor together behind the
public operations:

- ``parse_headers()``: read and validate the header line
- ``process_rows()``: stream the file once, index every record, checkpoint,
  hand decoded batches to the analysis collaborator
- ``search(query)``: answer a text query from the committed snapshot

One engine runs one operation at a time. The operations are coroutines;
disk I/O is their only suspension point.
"""

__all__ = [
    "BatchConsumer",
    "SearchEngine",
]

logger = logging.getLogger(__name__)

BatchConsumer = Callable[[list[Row]], Any]


class SearchEngine:
    """Inverted-index search over one delimited text file.

    Args:
        file_path: source file
        config: engine settings (storage root, batch sizes, cache bound)
        analyzer: receives ingestion batches; defaults to BatchAnalyzer
        result_sink: receives search result batches; defaults to ResultCollector
    """

    def __init__(
        self,
        file_path: Path | str,
        config: EngineConfig,
        *,
        analyzer: BatchConsumer | None = None,
        result_sink: ResultSink | None = None,
    ) -> None:
        self.file_path = Path(file_path)
        self.config = config
        self.headers: list[str] = []
        self.index = InvertedIndex(row_cache_size=config.row_cache_size)
        self.store = IndexStore(
            config.storage_root,
            index_file_name=config.index_file_name,
            offsets_file_name=config.offsets_file_name,
        )
        self.reader = StreamingReader(self.file_path, chunk_size=config.chunk_size)
        self.analyzer: BatchConsumer = analyzer if analyzer is not None else BatchAnalyzer()
        self.result_sink: ResultSink = result_sink if result_sink is not None else ResultCollector()
        self.executor = QueryExecutor(
            self.index,
            self.store,
            self.get_row_by_id,
            result_sink=self.result_sink,
            result_batch_size=config.result_batch_size,
        )
        self._next_row_id = FIRST_ROW_ID

    def close(self) -> None:
        self.reader.close()

    def __enter__(self) -> SearchEngine:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def reset_parsing(self) -> None:
        """Rewind to the start of the file and restart row numbering."""
        self.reader.seek(0)
        self._next_row_id = FIRST_ROW_ID

    # ------------------------------------------------------------------
    # ingestion
    # ------------------------------------------------------------------
    async def parse_headers(self) -> list[str]:
        """Read the first line as the header list.

        Leaves the reader positioned at the first data record.

        Raises:
            ReaderError: the file cannot be opened or read
            HeaderError: the file is empty or the header has fewer than two columns
        """
        self.reader.open()
        self.reset_parsing()
        record = await self.reader.next_record()
        if record is None:
            raise HeaderError(f"no header line in {self.file_path}")
        try:
            self.headers = parse_header_line(record.text)
        except HeaderError:
            logger.warning(f"skipping invalid header line: {record.text!r}")
            raise
        logger.info(f"headers parsed: {self.headers}")
        return self.headers

    def _ingest(self, record: Record) -> Row | None:
        values = tokenize_line(record.text)
        if len(values) != len(self.headers):
            return None
        row_id = self._next_row_id
        row = Row(row_id=row_id)
        for name, raw in zip(self.headers, values):
            row.values[name] = detect_type(raw)
            self.index.index(name, raw, row_id, row)
        self.index.add_row_offset(row_id, record.offset)
        self._next_row_id += 1
        return row

    async def _checkpoint(self) -> bool:
        saved = await asyncio.to_thread(self.store.save_all, self.index)
        if not saved:
            logger.warning("checkpoint failed; continuing with in-memory index")
        return saved

    async def _hand_off(self, batch: list[Row], stats: BatchStatsAccumulator) -> None:
        start = time.perf_counter()
        await asyncio.to_thread(self.analyzer, batch)
        stats.add_batch_time(time.perf_counter() - start)

    async def process_rows(self, batch_size: int | None = None) -> IngestResult:
        """Stream the remaining records, index them and hand them off in batches.

        Parses the header first if that has not happened yet. Records whose
        field count differs from the header are skipped and written to the
        skipped-record log. The index and offsets are saved every
        ``checkpoint_interval`` rows and once more at the end.

        Raises:
            ReaderError: the file cannot be opened or read
            HeaderError: see parse_headers()
        """
        batch_size = batch_size or self.config.batch_size
        if batch_size <= 0:
            raise ValueError(f"batch_size must be positive, got {batch_size}")
        if not self.headers:
            await self.parse_headers()

        start_time = datetime.now(UTC)
        error_log = ErrorLogBuffer(self.config.logs_dir)
        stats = BatchStatsAccumulator()
        batch: list[Row] = []
        indexed = 0
        checkpoints = 0

        with IngestProgress(self.file_path, self.reader.size, enabled=self.config.show_progress) as progress:
            while True:
                record = await self.reader.next_record()
                if record is None:
                    break
                row = self._ingest(record)
                progress.advance(record.next_offset - record.offset, indexed=row is not None)
                if row is None:
                    logger.debug(f"skipped malformed record at offset {record.offset}")
                    error_log.append(ErrorRecord.create(
                        file=self.file_path.name,
                        offset=record.offset,
                        error_type=FIELD_COUNT_MISMATCH,
                        message=f"expected {len(self.headers)} fields, got {len(tokenize_line(record.text))}",
                    ))
                    continue

                indexed += 1
                batch.append(row)
                if indexed % self.config.checkpoint_interval == 0:
                    await self._checkpoint()
                    checkpoints += 1
                    progress.set_postfix(rows=indexed, skipped=error_log.total)
                if len(batch) >= batch_size:
                    await self._hand_off(batch, stats)
                    batch = []

        if batch:
            await self._hand_off(batch, stats)
        await self._checkpoint()
        checkpoints += 1

        log_path = await asyncio.to_thread(error_log.flush)
        if log_path is not None:
            logger.warning(f"{error_log.total} malformed records skipped; see {log_path}")

        end_time = datetime.now(UTC)
        elapsed = (end_time - start_time).total_seconds()
        total_batches, avg_batch, p95_batch = stats.get_stats()
        return IngestResult(
            indexed_rows=indexed,
            skipped_records=error_log.total,
            batches=total_batches,
            checkpoints=checkpoints,
            start_time=start_time,
            end_time=end_time,
            elapsed_seconds=elapsed,
            throughput_rows_per_sec=indexed / elapsed if elapsed > 0 else 0.0,
            avg_batch_seconds=avg_batch,
            p95_batch_seconds=p95_batch,
        )

    # ------------------------------------------------------------------
    # random access
    # ------------------------------------------------------------------
    async def read_row_at(self, offset: int, row_id: int = -1) -> Row | None:
        """Decode the record starting at byte ``offset``; None if unreadable or malformed."""
        if not self.headers:
            return None
        self.reader.open()
        record = await self.reader.record_at(offset)
        if record is None:
            logger.warning(f"no record at offset {offset}")
            return None
        row = decode_record(record.text, self.headers, row_id)
        if row is None:
            logger.warning(f"record at offset {offset} has the wrong number of fields")
        return row

    async def get_row_by_id(self, row_id: int) -> Row | None:
        """Cached row, or re-read it from the file via the offset map and cache it."""
        cached = self.index.get_row(row_id)
        if cached is not None:
            return cached
        offset = self.index.row_offset(row_id)
        if offset is None:
            logger.warning(f"no stored offset for row {row_id}")
            return None
        row = await self.read_row_at(offset, row_id)
        if row is not None:
            self.index.cache_row(row_id, row)
        return row

    async def rows_for_value(self, value: str) -> list[Row]:
        """Every row holding ``value`` in any field, re-read from the file."""
        row_ids: set[int] = set()
        for field in self.index.fields():
            row_ids.update(self.index.lookup_exact(field, value) or [])
        rows: list[Row] = []
        for row_id in sorted(row_ids):
            row = await self.get_row_by_id(row_id)
            if row is not None:
                rows.append(row)
        return rows

    # ------------------------------------------------------------------
    # search
    # ------------------------------------------------------------------
    async def search_result(self, query: str) -> SearchResult:
        """Run ``query`` and return the full SearchResult.

        Raises:
            InvalidQueryError, IndexUnavailableError, UnknownFieldError
            ReaderError, HeaderError: when the header has to be read first
        """
        if not self.headers:
            await self.parse_headers()
        try:
            return await self.executor.execute(query)
        except SearchError as e:
            logger.warning(f"search {query!r} failed: {e}")
            raise

    async def search(self, query: str) -> list[dict[str, Any]]:
        """Matching rows as plain dicts; an empty list when nothing matches."""
        result = await self.search_result(query)
        return result.rows

    def fuzzy_match(self, field: str, value: str, threshold: int | None = None) -> list[int] | None:
        if threshold is None:
            threshold = self.config.fuzzy_threshold
        return self.index.fuzzy_match(field, value, threshold)
