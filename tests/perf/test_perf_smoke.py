from __future__ import annotations

import asyncio
import time
from dataclasses import replace

import pandas as pd

from csv_search import SearchEngine
from scripts.gen_perf_dataset import write_dataset

"""Performance smoke test: index a generated file and answer queries.

Kept small so CI stays fast; the generator script builds larger files for
manual runs.
"""

ROWS = 5_000


def test_index_and_search_generated_dataset(temp_workdir, engine_config):
    path = temp_workdir / "data" / "perf.csv"
    write_dataset(path, ROWS, seed=7)
    frame = pd.read_csv(path, dtype=str, keep_default_na=False)

    config = replace(engine_config, batch_size=1000, checkpoint_interval=2000)
    with SearchEngine(path, config) as engine:
        start = time.perf_counter()
        result = asyncio.run(engine.process_rows())
        elapsed = time.perf_counter() - start

        assert result.indexed_rows == ROWS
        assert result.skipped_records == 0
        assert result.batches == 5
        # extremely lenient: catches accidental quadratic behaviour only
        assert elapsed < 30, f"indexing too slow: {elapsed:.2f}s"

        # ages are two-digit, so string and numeric order agree
        expected_old = sum(1 for a in frame["age"] if a and int(a) > 50)
        assert len(asyncio.run(engine.search("age>50"))) == expected_old

        expected_oslo = int((frame["city"].str.lower() == "oslo").sum())
        assert len(asyncio.run(engine.search("city=oslo"))) == expected_oslo
