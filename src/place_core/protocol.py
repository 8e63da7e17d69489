"""Pixel Place protocol constants.

Single source of truth for on-disk artifact names and the diff record layout.
Keep this file stable. The server and the replay tooling must remain synchronized.
"""

# Default artifact names (relative to the working directory)
BOARD_FILE = "board.txt"
DIFF_FILE = "diffs.bin"

# Diff record: [TimestampMs(8) | Offset(4) | Reserved(3) | Color(1)] = 16 bytes, big-endian
DIFF_REC_FMT = ">QI3xB"
DIFF_REC_LEN = 16

# Placement index is a u32 on the wire
MAX_INDEX = 2**32 - 1

# Cooldown between two accepted placements from one identity bucket
DEFAULT_COOLDOWN_SECS = 5 * 60

# Global IPv6 addresses are bucketed by their top 64 bits
IPV6_BUCKET_PREFIX = 64

DEFAULT_BIND_ADDR = "[::1]:8080"
