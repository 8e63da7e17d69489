import sys
from pathlib import Path

def main():
    if len(sys.argv) != 2:
        print("Usage: corrupt_one_byte.py <diffs.bin>")
        raise SystemExit(2)

    p = Path(sys.argv[1])
    b = bytearray(p.read_bytes())
    if len(b) < 16:
        print("Diff log holds no complete record.")
        raise SystemExit(2)

    # Record layout: ts(8) | offset(4) | reserved(3) | color(1).
    # Flip a bit in the first record's color byte so it no longer matches the board.
    idx = 15
    b[idx] ^= 0x01
    p.write_bytes(bytes(b))
    print(f"Corrupted 1 byte at offset {idx} in {p}")

if __name__ == "__main__":
    main()
