"""Pixel Place - Color codec.

Board bytes are the printable range '0'..'?' (0x30..0x3F), one per color,
in declaration order.
"""
from __future__ import annotations

from enum import Enum


class Pixel(Enum):
    WHITE = "White"
    LIGHT_GRAY = "LightGray"
    DARK_GRAY = "DarkGray"
    BLACK = "Black"
    PINK = "Pink"
    RED = "Red"
    ORANGE = "Orange"
    BROWN = "Brown"
    YELLOW = "Yellow"
    LIME = "Lime"
    GREEN = "Green"
    CYAN = "Cyan"
    TEAL = "Teal"
    BLUE = "Blue"
    MAGENTA = "Magenta"
    PURPLE = "Purple"

    @classmethod
    def from_name(cls, name: str) -> "Pixel":
        """Look up a color by its wire name, e.g. ``"LightGray"``."""
        return cls(name)

    def to_byte(self) -> int:
        return encode(self)

    def to_char(self) -> str:
        return chr(encode(self))

    def __str__(self) -> str:
        return self.to_char()


FIRST_CODE = ord("0")
_ORDER = tuple(Pixel)
LAST_CODE = FIRST_CODE + len(_ORDER) - 1

_CODES = {p: FIRST_CODE + i for i, p in enumerate(_ORDER)}


def encode(pixel: Pixel) -> int:
    """Map a color to its board byte."""
    return _CODES[pixel]


def decode(code: int) -> Pixel:
    """Map a board byte back to its color."""
    if not FIRST_CODE <= code <= LAST_CODE:
        raise ValueError(f"Byte {code:#04x} is not a pixel code")
    return _ORDER[code - FIRST_CODE]

