from __future__ import annotations

import asyncio
import json
from pathlib import Path

import jsonschema

from csv_search import SearchEngine
from csv_search.index.persistence import INDEX_SCHEMA, OFFSETS_SCHEMA

"""On-disk snapshot contract.

index:   {"<field>": {"<value>": [row_id, ...]}}, keys lowercase, "" stored as "null"
offsets: {"<row_id>": byte_offset}, offset of the first byte of the record
"""


def test_snapshot_documents(write_csv, engine_config):
    path = write_csv("ID,Name\n1,Dave\n2,\n")
    with SearchEngine(path, engine_config) as engine:
        asyncio.run(engine.process_rows())

    index_doc = json.loads(engine_config.index_path.read_text(encoding="utf-8"))
    offsets_doc = json.loads(engine_config.offsets_path.read_text(encoding="utf-8"))
    jsonschema.validate(index_doc, INDEX_SCHEMA)
    jsonschema.validate(offsets_doc, OFFSETS_SCHEMA)

    assert index_doc == {"id": {"1": [2], "2": [3]}, "name": {"dave": [2], "null": [3]}}
    assert offsets_doc == {"2": 8, "3": 15}


def test_offsets_point_at_record_start(write_csv, engine_config):
    text = "a,b\nfirst,1\nsecond,2\n"
    path = write_csv(text)
    with SearchEngine(path, engine_config) as engine:
        asyncio.run(engine.process_rows())

    raw = Path(path).read_bytes()
    offsets = json.loads(engine_config.offsets_path.read_text(encoding="utf-8"))
    assert raw[offsets["2"]:].startswith(b"first,1\n")
    assert raw[offsets["3"]:].startswith(b"second,2\n")
