from __future__ import annotations

import json
from pathlib import Path

import click

from place_core.pixels import Pixel
from place_core.protocol import BOARD_FILE, DIFF_FILE
from .logic import verify_board
from .streams import export_diffs, replay_board

_DIFFS = click.Path(exists=True, dir_okay=False, path_type=Path)


@click.group()
def main():
    pass


@main.command("verify")
@click.option("--board", "board_path", type=click.Path(path_type=Path), default=BOARD_FILE, show_default=True)
@click.option("--diffs", "diff_path", type=click.Path(path_type=Path), default=DIFF_FILE, show_default=True)
def verify_cmd(board_path: Path, diff_path: Path):
    """Check the board against the diff log."""
    result = verify_board(board_path, diff_path)
    click.echo(json.dumps(result, sort_keys=True, separators=(",", ":"), ensure_ascii=False))
    if result["status"] != "PASS":
        raise SystemExit(1)


@main.command("board")
@click.argument("size", type=click.IntRange(min=0))
@click.option("--diffs", "diff_path", type=_DIFFS, default=DIFF_FILE, show_default=True)
@click.option("--fill", type=click.Choice([p.value for p in Pixel]), default=Pixel.WHITE.value, show_default=True)
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), help="Write the board here instead of stdout")
def board_cmd(size: int, diff_path: Path, fill: str, out: Path | None):
    """Rebuild a SIZE-cell board from the diff log."""
    board = replay_board(diff_path, size, Pixel.from_name(fill))
    if out is None:
        click.echo(board.decode("ascii"))
    else:
        out.write_bytes(board)
        click.echo(f"PASS: Board of {size} cells written to {out}")


@main.command("export")
@click.argument("out", type=click.Path(file_okay=False, path_type=Path))
@click.option("--diffs", "diff_path", type=_DIFFS, default=DIFF_FILE, show_default=True)
def export_cmd(out: Path, diff_path: Path):
    """Export the diff log to OUT/diffs.parquet."""
    try:
        n = export_diffs(diff_path, out)
    except Exception as e:
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)
    click.echo(f"PASS: {n} records exported to {out / 'diffs.parquet'}")


if __name__ == "__main__":
    main()
