"""Pixel Place - Server and board provisioning."""
from __future__ import annotations

import logging
from pathlib import Path

import click
import uvicorn

from place_core.pixels import Pixel
from place_core.protocol import BOARD_FILE, DEFAULT_BIND_ADDR, DEFAULT_COOLDOWN_SECS, DIFF_FILE
from place_server.app import create_app
from place_server.config import ServerConfig, split_bind_addr
from place_server.storage import BoardStore

LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR"]


@click.group()
@click.option("--log-level", type=click.Choice(LOG_LEVELS, case_sensitive=False), default="INFO", show_default=True)
def main(log_level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@main.command("serve")
@click.option("--bind", envvar="BIND_ADDR", default=DEFAULT_BIND_ADDR, show_default=True, help="host:port, IPv6 hosts bracketed")
@click.option("--board", "board_path", envvar="PLACE_BOARD", type=click.Path(dir_okay=False, path_type=Path), default=BOARD_FILE, show_default=True)
@click.option("--diffs", "diff_path", envvar="PLACE_DIFFS", type=click.Path(dir_okay=False, path_type=Path), default=DIFF_FILE, show_default=True)
@click.option("--cooldown", envvar="PLACE_COOLDOWN", type=click.FloatRange(min=0), default=DEFAULT_COOLDOWN_SECS, show_default=True, help="Seconds between placements per identity")
@click.option("--fsync", "durable", is_flag=True, help="Sync the diff log after every append")
def serve_cmd(bind: str, board_path: Path, diff_path: Path, cooldown: float, durable: bool) -> None:
    """Serve the board over HTTP."""
    try:
        host, port = split_bind_addr(bind)
    except ValueError as e:
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)

    config = ServerConfig(
        board_path=board_path,
        diff_path=diff_path,
        cooldown=cooldown,
        durable=durable,
    )
    click.echo(f"Serving {board_path} on {bind} (cooldown {cooldown:g}s)")
    uvicorn.run(create_app(config), host=host, port=port, log_level="info")


@main.command("init-board")
@click.argument("size", type=click.IntRange(min=1))
@click.option("--board", "board_path", envvar="PLACE_BOARD", type=click.Path(dir_okay=False, path_type=Path), default=BOARD_FILE, show_default=True)
@click.option("--fill", type=click.Choice([p.value for p in Pixel]), default=Pixel.WHITE.value, show_default=True)
def init_board_cmd(size: int, board_path: Path, fill: str) -> None:
    """Create or grow the board file to SIZE cells. Existing cells are kept."""
    store = BoardStore(board_path)
    try:
        before = store.length()
        after = store.provision(size, Pixel.from_name(fill))
    except Exception as e:
        # Fail closed with a single-line reason
        click.echo(f"FATAL: {e}")
        raise SystemExit(1)

    if after == before:
        click.echo(f"Board {board_path} already has {before} cells")
    else:
        click.echo(f"PASS: Board {board_path} grown from {before} to {after} cells")


if __name__ == "__main__":
    main()
