"""Pixel Place - File-backed board and diff log.

The board is one byte per cell and is only ever mutated with positional
single-byte writes. The diff log is append-only; each accepted placement adds
exactly one 16-byte record.
"""
from __future__ import annotations

import os
from pathlib import Path

from place_core.errors import IndexOutOfBounds, StorageError
from place_core.pixels import Pixel, encode
from place_core.protocol import DIFF_REC_LEN
from place_core.records import DiffRecord


def _sync(fd: int) -> None:
    os.fdatasync(fd) if hasattr(os, "fdatasync") else os.fsync(fd)


class BoardStore:
    def __init__(self, path: Path):
        self.path = Path(path)

    def read(self) -> bytes:
        """Return the board up to the first line terminator, creating the file if absent."""
        try:
            with open(self.path, "a+b") as f:
                f.seek(0)
                line = f.readline()
        except OSError as e:
            raise StorageError(f"Unable to read board {self.path}: {e}") from e
        # No first line at all, e.g. a board that was never provisioned
        if not line:
            raise StorageError("Not found")
        if line.endswith(b"\n"):
            line = line[:-1]
            if line.endswith(b"\r"):
                line = line[:-1]
        return line

    def length(self) -> int:
        try:
            return self.path.stat().st_size
        except FileNotFoundError:
            return 0
        except OSError as e:
            raise StorageError(f"Unable to stat board {self.path}: {e}") from e

    def write_at(self, offset: int, code: int) -> None:
        """Overwrite the byte at ``offset``. The file is never truncated or resized."""
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_CREAT, 0o644)
        except OSError as e:
            raise StorageError(f"Unable to open board {self.path}: {e}") from e
        try:
            # Length is read on every write so external provisioning is picked up live
            length = os.fstat(fd).st_size
            if offset < 0 or offset >= length:
                raise IndexOutOfBounds(length)
            written = os.pwrite(fd, bytes((code,)), offset)
            if written != 1:
                raise StorageError(f"Short write to board {self.path} at offset {offset}")
        except OSError as e:
            raise StorageError(f"Unable to write board {self.path}: {e}") from e
        finally:
            os.close(fd)

    def provision(self, size: int, fill: Pixel = Pixel.WHITE) -> int:
        """Grow the board to ``size`` cells of ``fill``. Never shrinks. Returns the new length."""
        current = self.length()
        if size <= current:
            return current
        try:
            with open(self.path, "ab") as f:
                f.write(bytes((encode(fill),)) * (size - current))
        except OSError as e:
            raise StorageError(f"Unable to provision board {self.path}: {e}") from e
        return size


class DiffLog:
    def __init__(self, path: Path, durable: bool = False):
        self.path = Path(path)
        self.durable = durable

    def append(self, record: DiffRecord) -> None:
        blob = record.pack()
        try:
            fd = os.open(self.path, os.O_WRONLY | os.O_APPEND | os.O_CREAT, 0o644)
        except OSError as e:
            raise StorageError(f"Unable to open diff log {self.path}: {e}") from e
        try:
            written = os.write(fd, blob)
            if written != DIFF_REC_LEN:
                raise StorageError(
                    f"Short write to diff log {self.path}: {written} of {DIFF_REC_LEN} bytes"
                )
            if self.durable:
                _sync(fd)
        except OSError as e:
            raise StorageError(f"Unable to append to diff log {self.path}: {e}") from e
        finally:
            os.close(fd)
