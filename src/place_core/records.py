"""Pixel Place - Diff record packing."""
from __future__ import annotations

import struct
from dataclasses import dataclass

from place_core.pixels import Pixel, decode, encode
from place_core.protocol import DIFF_REC_FMT, DIFF_REC_LEN

_RESERVED_SLICE = slice(12, 15)


@dataclass(frozen=True)
class DiffRecord:
    """One accepted placement, as stored in the diff log."""

    timestamp_ms: int
    offset: int
    code: int

    @classmethod
    def for_pixel(cls, timestamp_ms: int, offset: int, pixel: Pixel) -> "DiffRecord":
        return cls(timestamp_ms, offset, encode(pixel))

    @property
    def pixel(self) -> Pixel:
        return decode(self.code)

    def pack(self) -> bytes:
        return struct.pack(DIFF_REC_FMT, self.timestamp_ms, self.offset, self.code)

    @classmethod
    def unpack(cls, blob: bytes) -> "DiffRecord":
        """Parse 16 bytes. Raises ValueError on a malformed record."""
        if len(blob) != DIFF_REC_LEN:
            raise ValueError(f"Diff record must be {DIFF_REC_LEN} bytes, got {len(blob)}")
        if blob[_RESERVED_SLICE] != b"\x00\x00\x00":
            raise ValueError(f"Non-zero reserved bytes {blob[_RESERVED_SLICE].hex()}")
        ts, offset, code = struct.unpack(DIFF_REC_FMT, blob)
        # Validates the color byte
        decode(code)
        return cls(int(ts), int(offset), int(code))
