import warnings
from pathlib import Path

from .const import ERRORS
from .streams import DiffReader, last_writes


def _fail(errors: list, stats: dict) -> dict:
    return {"status": "FAIL", "error_count": len(errors), "errors": errors, "stats": stats}


def verify_board(board_path: Path, diff_path: Path) -> dict:
    """Check that every offset in the diff log holds its last logged color on the board.

    Cells never written through the log are not checked; they hold whatever
    the board was provisioned with.
    """
    errors = []
    stats = {}
    board_path = Path(board_path)
    diff_path = Path(diff_path)

    for p in [board_path, diff_path]:
        if not p.exists():
            errors.append({"code": "E_LAYOUT_MISSING", "message": ERRORS["E_LAYOUT_MISSING"], "path": str(p)})
            return _fail(errors, stats)

    reader = DiffReader(diff_path)
    # Scan anomalies are reported as structured errors below
    with warnings.catch_warnings():
        warnings.simplefilter("ignore")
        latest = last_writes(reader)
    stats = reader.get_scan_stats()

    if stats["torn_bytes"]:
        errors.append({"code": "E_TORN_RECORD", "message": ERRORS["E_TORN_RECORD"], "bytes": stats["torn_bytes"]})
        return _fail(errors, stats)
    if stats["corrupt_records"]:
        errors.append({"code": "E_CORRUPT_RECORD", "message": ERRORS["E_CORRUPT_RECORD"], "count": stats["corrupt_records"]})
        return _fail(errors, stats)

    board = board_path.read_bytes()
    out_of_range = sorted(off for off in latest if off >= len(board))
    if out_of_range:
        errors.append({
            "code": "E_OFFSET_RANGE",
            "message": ERRORS["E_OFFSET_RANGE"],
            "board_length": len(board),
            "offsets": out_of_range,
        })
        return _fail(errors, stats)

    diverged = [
        {"offset": off, "expected": rec.pixel.value, "found": chr(board[off])}
        for off, rec in sorted(latest.items())
        if board[off] != rec.code
    ]
    if diverged:
        errors.append({"code": "E_BOARD_DIVERGENCE", "message": ERRORS["E_BOARD_DIVERGENCE"], "cells": diverged})
        return _fail(errors, stats)

    return {"status": "PASS", "error_count": 0, "errors": [], "stats": stats}
