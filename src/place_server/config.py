"""Server configuration resolved from CLI options and environment."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from place_core.protocol import BOARD_FILE, DEFAULT_COOLDOWN_SECS, DIFF_FILE


@dataclass(frozen=True)
class ServerConfig:
    board_path: Path = Path(BOARD_FILE)
    diff_path: Path = Path(DIFF_FILE)
    cooldown: float = DEFAULT_COOLDOWN_SECS
    durable: bool = False


def split_bind_addr(bind: str) -> tuple[str, int]:
    """Split ``host:port`` or ``[v6host]:port`` into its parts."""
    host, sep, port = bind.rpartition(":")
    if not sep or not host or not port.isdigit():
        raise ValueError(f"Invalid bind address {bind!r}, expected host:port")
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        raise ValueError(f"IPv6 bind address must be bracketed: {bind!r}")
    return host, int(port)
