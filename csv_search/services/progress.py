from __future__ import annotations

import sys
from pathlib import Path
from typing import Any

from tqdm import tqdm
from tqdm.std import tqdm as TqdmType

"""Ingestion progress display with tqdm (TTY only).

The bar counts bytes of the source file, so it advances smoothly even when
record lengths vary wildly. In non-TTY environments (CI, pipes) no bar is
created to avoid ANSI control sequence spam.
"""

__all__ = [
    "IngestProgress",
    "is_tty_enabled",
]


def is_tty_enabled() -> bool:
    return sys.stdout.isatty()


class IngestProgress:
    """Byte-based progress bar for one ingestion pass."""

    def __init__(self, source: Path, total_bytes: int, *, enabled: bool = True) -> None:
        """
        Args:
            source: file being indexed (shown in the description)
            total_bytes: size of the file
            enabled: False forces the bar off even on a TTY
        """
        self.source = source
        self.total_bytes = total_bytes
        self.rows = 0
        self.enabled = enabled and is_tty_enabled()
        self.pbar: TqdmType[Any] | None
        if self.enabled:
            self.pbar = tqdm(
                total=total_bytes,
                desc=f"Indexing {source.name}",
                unit="B",
                unit_scale=True,
                disable=False,
                leave=True,
                position=0,
                ncols=80,
                ascii=True,
            )
        else:
            self.pbar = None

    def advance(self, consumed_bytes: int, *, indexed: bool) -> None:
        if indexed:
            self.rows += 1
        if self.enabled and self.pbar is not None:
            self.pbar.update(consumed_bytes)

    def set_postfix(self, **kwargs: Any) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.set_postfix(**kwargs)

    def close(self) -> None:
        if self.enabled and self.pbar is not None:
            self.pbar.close()
            self.pbar = None

    def __enter__(self) -> IngestProgress:
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()
