#!/usr/bin/env python3
"""Synthetic CSV generator for indexing and search benchmarks.

The generated file exercises every path of the tokenizer and type detector:
- integer, float, date (all three accepted layouts) and text columns
- text values containing commas and doubled quotes (quoted on output)
- a share of empty cells
- a share of exact duplicate rows
"""
from __future__ import annotations

import argparse
import csv
import sys
from pathlib import Path

import numpy as np
import pandas as pd

DATE_LAYOUTS = ("%Y-%m-%d", "%m/%d/%Y", "%Y/%m/%d")
CITIES = ["Oslo", "Lisbon", "Kyoto", "Austin", "Lagos", "Perth", "Quito", "Riga"]


def generate_synthetic_data(rows: int, seed: int = 42, empty_ratio: float = 0.02, dup_ratio: float = 0.01) -> pd.DataFrame:
    """Build a DataFrame of ``rows`` records with mixed column types."""
    rng = np.random.default_rng(seed)

    dates = pd.date_range("2020-01-01", "2024-12-31", periods=365)
    picked = rng.choice(len(dates), rows)
    layouts = rng.choice(len(DATE_LAYOUTS), rows)

    frame = pd.DataFrame({
        "id": np.arange(1, rows + 1),
        "name": [f"user_{n}" for n in rng.integers(0, max(rows // 3, 1), rows)],
        "city": rng.choice(CITIES, rows),
        "age": rng.integers(18, 90, rows),
        "score": np.round(rng.uniform(0, 100, rows), 2),
        "joined": [dates[i].strftime(DATE_LAYOUTS[k]) for i, k in zip(picked, layouts)],
        "note": [f'likes "{c}", mostly' if rng.random() < 0.1 else "" for c in rng.choice(CITIES, rows)],
    })

    blank = rng.random((rows, len(frame.columns))) < empty_ratio
    blank[:, 0] = False  # keep id populated
    frame = frame.astype(object).mask(blank, "")

    dup_count = int(rows * dup_ratio)
    if dup_count:
        sources = rng.choice(rows, dup_count, replace=False)
        targets = rng.choice(rows, dup_count, replace=False)
        frame.iloc[targets] = frame.iloc[sources].to_numpy()
    return frame


def write_dataset(output_path: Path, rows: int, seed: int = 42) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    frame = generate_synthetic_data(rows, seed)
    frame.to_csv(output_path, index=False, quoting=csv.QUOTE_MINIMAL, lineterminator="\n")
    print(f"Created CSV file: {output_path}")
    print(f"  Rows: {rows:,} (+ 1 header row)")
    print(f"  Columns: {len(frame.columns)}")
    print(f"  Size: {output_path.stat().st_size:,} bytes")


def main() -> int:
    parser = argparse.ArgumentParser(
        description="Generate synthetic CSV datasets for indexing benchmarks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s data/sample.csv
  %(prog)s data/large.csv --rows 2000000 --seed 7
        """,
    )
    parser.add_argument("output", type=Path, help="Output CSV path")
    parser.add_argument("--rows", type=int, default=100_000, help="Number of data rows (default: 100,000)")
    parser.add_argument("--seed", type=int, default=42, help="Random seed (default: 42)")
    parser.add_argument("--dry-run", action="store_true", help="Only print the plan")
    args = parser.parse_args()

    if args.rows <= 0:
        print("Error: --rows must be positive", file=sys.stderr)
        return 1

    print("Dataset generation plan:")
    print(f"  Output file: {args.output}")
    print(f"  Rows: {args.rows:,}")
    print(f"  Random seed: {args.seed}")
    if args.dry_run:
        print("\n[DRY RUN] Nothing written.")
        return 0

    try:
        write_dataset(args.output, args.rows, args.seed)
    except OSError as e:
        print(f"\nError writing dataset: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
