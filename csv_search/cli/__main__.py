from __future__ import annotations

import argparse
import asyncio
import json
import os
import sys
from dataclasses import replace
from pathlib import Path

from dotenv import load_dotenv

from ..config.loader import DEFAULT_CONFIG_PATH, STORAGE_ROOT_ENV, ConfigError, load_config
from ..logging.init import log_summary, set_debug, setup_logging
from ..models.config_models import EngineConfig
from ..query.errors import IndexUnavailableError, InvalidQueryError, UnknownFieldError
from ..reader.stream import ReaderError, StreamingReader
from ..reader.tokenizer import HeaderError, decode_record, parse_header_line
from ..services.engine import SearchEngine
from ..services.summary import render_summary_line

"""CLI entrypoint.

Subcommands:
- index FILE          build the index and offset snapshots for FILE
- search FILE QUERY   answer QUERY from the snapshots, one JSON object per line
- inspect FILE        print the header and the first few decoded rows

Configuration comes from --config (YAML), with --storage-root or the
CSV_SEARCH_STORAGE_ROOT environment variable (a .env file in the working
directory is honoured) as override or stand-alone alternative.
"""

EXIT_SUCCESS = 0
EXIT_FATAL = 1
EXIT_QUERY_ERROR = 2


def _load_env_file(path: Path, override: bool = False) -> None:
    if path.exists():
        load_dotenv(dotenv_path=path, override=override)


def _parse_args(argv: list[str]) -> argparse.Namespace:
    p = argparse.ArgumentParser(prog="csv-search", description="Inverted-index search over large CSV files")
    p.add_argument("--config", type=Path, default=None, help=f"YAML config (default: {DEFAULT_CONFIG_PATH})")
    p.add_argument("--storage-root", type=Path, default=None, help="Directory for index snapshots")
    p.add_argument("--debug", action="store_true", help="Enable debug logging")
    sub = p.add_subparsers(dest="command", required=True)

    idx = sub.add_parser("index", help="Index a CSV file")
    idx.add_argument("file", type=Path)
    idx.add_argument("--batch-size", type=int, default=None)

    srch = sub.add_parser("search", help="Search an indexed CSV file")
    srch.add_argument("file", type=Path)
    srch.add_argument("query")

    insp = sub.add_parser("inspect", help="Print headers and first rows")
    insp.add_argument("file", type=Path)
    insp.add_argument("--rows", type=int, default=3)
    return p.parse_args(argv)


def _resolve_config(args: argparse.Namespace) -> EngineConfig:
    config_path = args.config or DEFAULT_CONFIG_PATH
    if args.config is not None or config_path.exists():
        cfg = load_config(config_path)
        if args.storage_root is not None:
            cfg = replace(cfg, storage_root=args.storage_root)
        return cfg
    storage_root = args.storage_root or os.getenv(STORAGE_ROOT_ENV)
    if not storage_root:
        raise ConfigError(
            f"no config file at {config_path} and no storage root (--storage-root or {STORAGE_ROOT_ENV})"
        )
    return EngineConfig(storage_root=Path(storage_root))


async def _run_index(engine: SearchEngine, batch_size: int | None) -> int:
    result = await engine.process_rows(batch_size)
    summary_line = render_summary_line(result)
    log_summary(summary_line[len("SUMMARY "):])
    return EXIT_SUCCESS


async def _run_search(engine: SearchEngine, query: str) -> int:
    rows = await engine.search(query)
    for row in rows:
        # dates are not JSON native
        print(json.dumps(row, default=str, ensure_ascii=False))
    return EXIT_SUCCESS


def _inspect(path: Path, rows: int, chunk_size: int) -> int:
    with StreamingReader(path, chunk_size=chunk_size) as reader:
        header = reader.read_record()
        if header is None:
            print(f"inspect: {path} is empty")
            return EXIT_FATAL
        headers = parse_header_line(header.text)
        print(f"FILE: {path.name} cols={headers}")
        shown = 0
        while shown < rows:
            record = reader.read_record()
            if record is None:
                break
            row = decode_record(record.text, headers, row_id=-1)
            if row is None:
                print(f"  offset={record.offset} malformed")
                continue
            shown += 1
            print(f"  offset={record.offset} " + json.dumps(row.to_dict(), default=str, ensure_ascii=False))
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    logger = setup_logging()

    # None only: an explicit [] must not pull in sys.argv (pytest flags)
    if argv is None:
        argv = sys.argv[1:]
    args = _parse_args(argv)
    _load_env_file(Path(".env"))

    if args.debug:
        set_debug(logger)
        logger.debug("debug mode enabled")

    try:
        cfg = _resolve_config(args)
    except ConfigError as e:
        logger.error(f"config: {e}")
        return EXIT_FATAL

    try:
        if args.command == "inspect":
            return _inspect(args.file, args.rows, cfg.chunk_size)
        with SearchEngine(args.file, cfg) as engine:
            if args.command == "index":
                return asyncio.run(_run_index(engine, args.batch_size))
            return asyncio.run(_run_search(engine, args.query))
    except (ReaderError, HeaderError) as e:
        logger.error(f"input: {e}")
        return EXIT_FATAL
    except IndexUnavailableError as e:
        logger.error(f"index: {e}")
        return EXIT_FATAL
    except (InvalidQueryError, UnknownFieldError) as e:
        logger.error(f"query: {e}")
        return EXIT_QUERY_ERROR


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())
