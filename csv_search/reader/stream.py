from __future__ import annotations

import asyncio
import logging
import os
from pathlib import Path
from typing import IO, Any, NamedTuple

"""Chunked streaming line reader.

Reads fixed-size chunks and keeps accumulating until a newline (or EOF)
is found, so a record may be any length. Every chunk read seeks to the
reader's own cursor first; nothing else may move the handle between reads.
"""

__all__ = [
    "Record",
    "ReaderError",
    "StreamingReader",
]

logger = logging.getLogger(__name__)

NEWLINE = b"\n"
CARRIAGE_RETURN = b"\r"


class ReaderError(Exception):
    """Source file could not be opened or read."""


class Record(NamedTuple):
    text: str
    offset: int  # first byte of the record
    next_offset: int  # first byte after its newline


class StreamingReader:
    """Sequential record reader over a single binary file handle.

    Usage::

        with StreamingReader(path) as reader:
            record = reader.read_record()
            while record is not None:
                ...
                record = reader.read_record()
    """

    def __init__(self, path: Path | str, *, chunk_size: int = 4096) -> None:
        if chunk_size <= 0:
            raise ValueError(f"chunk_size must be positive, got {chunk_size}")
        self.path = Path(path)
        self.chunk_size = chunk_size
        self._handle: IO[bytes] | None = None
        self._buffer = bytearray()
        self._buffer_start = 0  # file offset of self._buffer[0]
        self._scanned = 0  # buffer prefix already known to hold no newline
        self._newline = -1
        self._eof = False

    def open(self) -> StreamingReader:
        if self._handle is None:
            try:
                self._handle = self.path.open("rb")
            except OSError as e:
                raise ReaderError(f"cannot open {self.path}: {e}") from e
            logger.debug(f"opened {self.path} chunk_size={self.chunk_size}")
        return self

    def close(self) -> None:
        if self._handle is not None:
            self._handle.close()
            self._handle = None

    @property
    def closed(self) -> bool:
        return self._handle is None

    def __enter__(self) -> StreamingReader:
        return self.open()

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @property
    def cursor(self) -> int:
        """Offset of the next record that read_record() will return."""
        return self._buffer_start

    @property
    def size(self) -> int:
        try:
            return os.path.getsize(self.path)
        except OSError as e:
            raise ReaderError(f"cannot stat {self.path}: {e}") from e

    def seek(self, offset: int) -> None:
        if offset < 0:
            raise ValueError(f"offset must be >= 0, got {offset}")
        self._buffer.clear()
        self._buffer_start = offset
        self._scanned = 0
        self._newline = -1
        self._eof = False

    def read_record(self) -> Record | None:
        """Return the record at the cursor and advance past it, or None at EOF."""
        while not self._has_record():
            if not self._fill():
                break
        return self._pop_record()

    async def next_record(self) -> Record | None:
        """Async variant of read_record(); chunk reads run in a worker thread."""
        while not self._has_record():
            if not await asyncio.to_thread(self._fill):
                break
        return self._pop_record()

    def read_record_at(self, offset: int) -> Record | None:
        """Random-access read of the record starting at ``offset``.

        The sequential cursor is restored afterwards.
        """
        position = self.cursor
        try:
            self.seek(offset)
            return self.read_record()
        finally:
            self.seek(position)

    async def record_at(self, offset: int) -> Record | None:
        return await asyncio.to_thread(self.read_record_at, offset)

    def _has_record(self) -> bool:
        if self._newline >= 0:
            return True
        idx = self._buffer.find(NEWLINE, self._scanned)
        if idx < 0:
            self._scanned = len(self._buffer)
            return False
        self._newline = idx
        return True

    def _fill(self) -> bool:
        """Append one chunk to the buffer. False once EOF is reached."""
        if self._eof:
            return False
        if self._handle is None:
            raise ReaderError(f"reader for {self.path} is not open")
        try:
            self._handle.seek(self._buffer_start + len(self._buffer))
            chunk = self._handle.read(self.chunk_size)
        except OSError as e:
            raise ReaderError(f"read failed on {self.path}: {e}") from e
        if not chunk:
            self._eof = True
            return False
        self._buffer.extend(chunk)
        return True

    def _pop_record(self) -> Record | None:
        if self._newline >= 0:
            end = self._newline
            consumed = end + 1
        elif self._buffer:
            # no trailing newline before EOF: the rest is a final partial record
            end = consumed = len(self._buffer)
        else:
            return None

        raw = bytes(self._buffer[:end])
        if raw.endswith(CARRIAGE_RETURN):
            raw = raw[:-1]
        del self._buffer[:consumed]
        offset = self._buffer_start
        self._buffer_start += consumed
        self._scanned = 0
        self._newline = -1
        return Record(
            text=raw.decode("utf-8", errors="replace"),
            offset=offset,
            next_offset=self._buffer_start,
        )
