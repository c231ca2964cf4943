from __future__ import annotations

from ..models.processing_result import IngestResult

"""SUMMARY line rendering for ingestion runs."""


def _format_number(value: float) -> str:
    if value == 0:
        return "0"
    if value == int(value):
        return str(int(value))
    if value < 0.01:
        # avoid scientific notation
        return f"{value:.6f}".rstrip('0').rstrip('.')
    return f"{value:.3f}".rstrip('0').rstrip('.')


def render_summary_line(result: IngestResult) -> str:
    """Render the SUMMARY line for one ingestion run.

    Format::

        SUMMARY rows={indexed} skipped={skipped} batches={batches} checkpoints={checkpoints} elapsed_sec={elapsed} throughput_rps={throughput}

    Examples:
        >>> from datetime import datetime, timezone
        >>> start = datetime(2024, 1, 1, 10, 0, 0, tzinfo=timezone.utc)
        >>> end = datetime(2024, 1, 1, 10, 0, 2, tzinfo=timezone.utc)
        >>> result = IngestResult(
        ...     indexed_rows=1000, skipped_records=3, batches=2, checkpoints=3,
        ...     start_time=start, end_time=end,
        ...     elapsed_seconds=2.0, throughput_rows_per_sec=500.0,
        ... )
        >>> render_summary_line(result)
        'SUMMARY rows=1000 skipped=3 batches=2 checkpoints=3 elapsed_sec=2 throughput_rps=500'
    """
    return (
        f"SUMMARY rows={result.indexed_rows} "
        f"skipped={result.skipped_records} "
        f"batches={result.batches} "
        f"checkpoints={result.checkpoints} "
        f"elapsed_sec={_format_number(result.elapsed_seconds)} "
        f"throughput_rps={_format_number(result.throughput_rows_per_sec)}"
    )
