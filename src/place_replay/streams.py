from __future__ import annotations

from pathlib import Path
from typing import Iterator
from warnings import warn

import pandas as pd
import pyarrow as pa
import pyarrow.parquet as pq

from place_core.pixels import Pixel, encode
from place_core.protocol import DIFF_REC_LEN
from place_core.records import DiffRecord


class DiffReader:
    """Sequential reader for the diff log.

    Records are fixed-size, so a malformed record is skipped without losing
    alignment. A partial record can only be the tail of an interrupted append
    and ends the scan.
    """

    def __init__(self, diff_path: Path):
        self.diff_path = Path(diff_path)
        self.scan_stats = {
            "records": 0,
            "corrupt_records": 0,
            "torn_bytes": 0,
            "timestamp_regressions": 0,
        }

    def get_scan_stats(self) -> dict:
        return dict(self.scan_stats)

    def __iter__(self) -> Iterator[DiffRecord]:
        last_ts = None
        with open(self.diff_path, "rb") as f:
            while True:
                start_off = f.tell()
                blob = f.read(DIFF_REC_LEN)

                # Clean EOF
                if len(blob) == 0:
                    break

                if len(blob) < DIFF_REC_LEN:
                    self.scan_stats["torn_bytes"] += len(blob)
                    warn(f"Torn diff record at offset {start_off} ({len(blob)} bytes). Stopping scan.")
                    break

                try:
                    rec = DiffRecord.unpack(blob)
                except ValueError as e:
                    self.scan_stats["corrupt_records"] += 1
                    warn(f"Corrupt diff record at offset {start_off}: {e}. Skipping.")
                    continue

                # Appends land in arrival order, so concurrent requests may log slightly out of time order
                if last_ts is not None and rec.timestamp_ms < last_ts:
                    self.scan_stats["timestamp_regressions"] += 1
                last_ts = rec.timestamp_ms

                self.scan_stats["records"] += 1
                yield rec


def replay_board(diff_path: Path, size: int, fill: Pixel = Pixel.WHITE) -> bytes:
    """Rebuild a board of ``size`` cells from the diff log. Last write wins per offset."""
    board = bytearray(bytes((encode(fill),)) * size)
    for rec in DiffReader(diff_path):
        if rec.offset < size:
            board[rec.offset] = rec.code
    return bytes(board)


def last_writes(reader: DiffReader) -> dict[int, DiffRecord]:
    latest: dict[int, DiffRecord] = {}
    for rec in reader:
        latest[rec.offset] = rec
    return latest


def export_diffs(diff_path: Path, out_path: Path) -> int:
    """Write the diff log as ``diffs.parquet`` under ``out_path``. Returns the row count."""
    rows = [
        {
            "seq": seq,
            "timestamp_ms": rec.timestamp_ms,
            "offset": rec.offset,
            "code": rec.code,
            "pixel": rec.pixel.value,
        }
        for seq, rec in enumerate(DiffReader(diff_path))
    ]

    Path(out_path).mkdir(parents=True, exist_ok=True)

    schema = pa.schema(
        [
            ("seq", pa.int64()),
            ("timestamp_ms", pa.int64()),
            ("offset", pa.int64()),
            ("code", pa.uint8()),
            ("pixel", pa.string()),
        ]
    )

    if rows:
        df = pd.DataFrame(rows)
        table = pa.Table.from_pandas(df, schema=schema, preserve_index=False)
    else:
        table = schema.empty_table()
    pq.write_table(table, Path(out_path) / "diffs.parquet")
    return len(rows)
