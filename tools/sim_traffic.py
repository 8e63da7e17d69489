"""Simulate a burst of placements against a fresh board.

Usage:
    python tools/sim_traffic.py OUT_DIR [--size N] [--clients N] [--rounds N] [--seed N]

Runs the placement pipeline in-process with a simulated clock, so cooldowns
are exercised without waiting. Writes board.txt and diffs.bin into OUT_DIR.
"""
import ipaddress
import random
import sys
from pathlib import Path

from place_core.pixels import Pixel
from place_core.protocol import BOARD_FILE, DIFF_FILE
from place_server.limiter import RateLimiter
from place_server.service import PlacementService
from place_server.storage import BoardStore, DiffLog

# --- CONFIGURATION ---
COOLDOWN = 300
START_TIME = 1_700_000_000.0
ROUND_SECONDS = 120  # Shorter than the cooldown, so some attempts are rejected


class SimClock:
    def __init__(self, start: float):
        self.now = start

    def __call__(self) -> float:
        return self.now


def client_addresses(n, rng):
    """Mix of IPv4, global IPv6 (several per /64) and link-local IPv6 callers."""
    addrs = []
    for i in range(n):
        kind = i % 3
        if kind == 0:
            addrs.append(str(ipaddress.IPv4Address(0x0A000000 + rng.randint(1, 2**24 - 2))))
        elif kind == 1:
            # Few prefixes, many hosts: rotating inside one /64 shares a bucket
            prefix = 0x2A01_04F8_0000_0000 + rng.randint(0, 3)
            host = rng.getrandbits(64)
            addrs.append(str(ipaddress.IPv6Address((prefix << 64) | host)))
        else:
            addrs.append(str(ipaddress.IPv6Address((0xFE80 << 112) | rng.getrandbits(64))))
    return addrs


def generate_session(out_dir, size=64, clients=12, rounds=5, seed=None):
    rng = random.Random(seed)
    out = Path(out_dir)
    out.mkdir(parents=True, exist_ok=True)

    board = BoardStore(out / BOARD_FILE)
    board.provision(size)
    clock = SimClock(START_TIME)
    service = PlacementService(board, DiffLog(out / DIFF_FILE), RateLimiter(COOLDOWN), clock=clock)

    addrs = client_addresses(clients, rng)
    tally = {}
    for _ in range(rounds):
        for addr in addrs:
            # Occasionally aim past the end of the board
            index = rng.randrange(size + 2)
            outcome = service.submit(rng.choice(list(Pixel)), index, addr)
            tally[int(outcome.status)] = tally.get(int(outcome.status), 0) + 1
            clock.now += rng.uniform(0.0, 0.5)
        clock.now += ROUND_SECONDS

    print(f"GENERATED: {out}")
    for status, count in sorted(tally.items()):
        print(f"  {status}: {count}")
    return out


if __name__ == "__main__":
    args = [a for a in sys.argv[1:] if a]

    def pop_option(arg_list, flag, default):
        """Remove an integer option from an argv-style list."""
        if flag not in arg_list:
            return default, arg_list
        i = arg_list.index(flag)
        if i + 1 >= len(arg_list):
            raise SystemExit(f"{flag} requires a value")
        return int(arg_list[i + 1]), arg_list[:i] + arg_list[i + 2:]

    size, args = pop_option(args, "--size", 64)
    clients, args = pop_option(args, "--clients", 12)
    rounds, args = pop_option(args, "--rounds", 5)
    seed, args = pop_option(args, "--seed", None)

    out = args[0] if args else "sim_board"
    generate_session(out, size=size, clients=clients, rounds=rounds, seed=seed)
