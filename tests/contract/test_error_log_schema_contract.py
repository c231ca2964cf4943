from __future__ import annotations

import asyncio
import json
import re

from csv_search import SearchEngine

"""Skipped-record log contract: JSON Lines under <storage_root>/logs."""

LOG_NAME = re.compile(r"^skipped-\d{8}-\d{6}\.log$")
TIMESTAMP = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}(\.\d+)?Z$")


def test_skipped_record_log_lines(write_csv, engine_config):
    path = write_csv("a,b\n1\n2,3\n4,5,6\n")
    with SearchEngine(path, engine_config) as engine:
        result = asyncio.run(engine.process_rows())

    assert result.indexed_rows == 1
    assert result.skipped_records == 2
    logs = list(engine_config.logs_dir.iterdir())
    assert len(logs) == 1
    assert LOG_NAME.match(logs[0].name)

    entries = [json.loads(line) for line in logs[0].read_text(encoding="utf-8").splitlines()]
    assert [e["offset"] for e in entries] == [4, 10]
    for entry in entries:
        assert set(entry) == {"timestamp", "file", "offset", "error_type", "message"}
        assert TIMESTAMP.match(entry["timestamp"])
        assert entry["error_type"] == "FIELD_COUNT_MISMATCH"
        assert entry["file"] == "data.csv"
    assert entries[0]["message"] == "expected 2 fields, got 1"
