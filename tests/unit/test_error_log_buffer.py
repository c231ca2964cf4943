from __future__ import annotations

import json
from pathlib import Path

from csv_search.logging.error_log import FIELD_COUNT_MISMATCH, ErrorLogBuffer
from csv_search.models.error_record import ErrorRecord

RECORD_KEYS = {"timestamp", "file", "offset", "error_type", "message"}


def test_error_record_creation_and_json_line():
    rec = ErrorRecord.create(
        file="people.csv",
        offset=42,
        error_type=FIELD_COUNT_MISMATCH,
        message="expected 3 fields, got 4",
    )
    data = json.loads(rec.to_json_line())
    assert data["file"] == "people.csv"
    assert data["offset"] == 42
    assert data["error_type"] == "FIELD_COUNT_MISMATCH"
    assert data["timestamp"].endswith("Z")
    assert set(data.keys()) == RECORD_KEYS


def test_error_log_buffer_flush(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "storage" / "logs")
    buf.append(ErrorRecord.create("f.csv", 8, FIELD_COUNT_MISMATCH, "a"))
    buf.append(ErrorRecord.create("f.csv", 20, FIELD_COUNT_MISMATCH, "b"))
    path = buf.flush()

    assert path is not None and path.exists()
    assert path.parent == temp_workdir / "storage" / "logs"
    assert path.name.startswith("skipped-") and path.name.endswith(".log")
    lines = path.read_text(encoding="utf-8").strip().splitlines()
    assert [json.loads(raw)["offset"] for raw in lines] == [8, 20]
    assert len(buf) == 0
    assert buf.total == 2


def test_flush_appends_to_same_file(temp_workdir: Path):
    buf = ErrorLogBuffer(temp_workdir / "logs")
    buf.append(ErrorRecord.create("f.csv", 1, FIELD_COUNT_MISMATCH, "a"))
    first = buf.flush()
    buf.append(ErrorRecord.create("f.csv", 2, FIELD_COUNT_MISMATCH, "b"))
    second = buf.flush()

    assert first == second
    assert len(second.read_text(encoding="utf-8").splitlines()) == 2


def test_empty_buffer_writes_nothing(temp_workdir: Path):
    logs_dir = temp_workdir / "logs"
    buf = ErrorLogBuffer(logs_dir)
    assert buf.flush() is None
    assert not logs_dir.exists()
