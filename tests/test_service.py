import threading
from http import HTTPStatus

import pytest

from place_core.pixels import Pixel, encode
from place_core.records import DiffRecord
from place_server.limiter import RateLimiter
from place_server.service import PlacementService
from place_server.storage import BoardStore, DiffLog


class FakeClock:
    def __init__(self, now: float):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def env(tmp_path):
    board_path = tmp_path / "board.txt"
    diff_path = tmp_path / "diffs.bin"
    board_path.write_bytes(b"0000")
    clock = FakeClock(1000.0)
    service = PlacementService(BoardStore(board_path), DiffLog(diff_path), RateLimiter(300), clock=clock)
    return service, clock, board_path, diff_path


def _records(diff_path):
    if not diff_path.exists():
        return []
    data = diff_path.read_bytes()
    return [DiffRecord.unpack(data[i:i + 16]) for i in range(0, len(data), 16)]


def test_place_cooldown_and_reaccept(env):
    service, clock, board_path, diff_path = env
    caller = "203.0.113.9"

    out = service.submit(Pixel.RED, 2, caller)
    assert out.status == HTTPStatus.OK
    assert out.message == "OK"
    assert board_path.read_bytes()[2] == encode(Pixel.RED)
    assert _records(diff_path) == [DiffRecord(1_000_000, 2, encode(Pixel.RED))]

    clock.now = 1001.0
    out = service.submit(Pixel.BLUE, 0, caller)
    assert out.status == HTTPStatus.TOO_MANY_REQUESTS
    assert out.message == "Please wait 299 seconds before placing again"
    assert board_path.read_bytes() == b"0050"
    assert len(_records(diff_path)) == 1

    clock.now = 1301.0
    out = service.submit(Pixel.BLUE, 0, caller)
    assert out.ok
    assert board_path.read_bytes() == b"=050"
    assert _records(diff_path)[-1] == DiffRecord(1_301_000, 0, encode(Pixel.BLUE))


def test_out_of_bounds_leaves_board_and_log(env):
    service, _, board_path, diff_path = env
    out = service.submit(Pixel.WHITE, 4, "203.0.113.9")
    assert out.status == HTTPStatus.BAD_REQUEST
    assert out.message == "Index must be less than 4"
    assert board_path.read_bytes() == b"0000"
    assert _records(diff_path) == []


def test_out_of_bounds_still_spends_cooldown(env):
    service, clock, _, _ = env
    assert service.submit(Pixel.WHITE, 9, "203.0.113.9").status == HTTPStatus.BAD_REQUEST
    clock.now = 1010.0
    out = service.submit(Pixel.WHITE, 0, "203.0.113.9")
    assert out.status == HTTPStatus.TOO_MANY_REQUESTS
    assert "290 seconds" in out.message


def test_out_of_bounds_when_rate_limit_would_pass_for_other_caller(env):
    service, _, board_path, _ = env
    assert service.submit(Pixel.RED, 0, "203.0.113.9").ok
    out = service.submit(Pixel.RED, 4, "198.51.100.1")
    assert out.status == HTTPStatus.BAD_REQUEST


def test_global_v6_rotation_shares_cooldown(env):
    service, _, _, _ = env
    assert service.submit(Pixel.RED, 0, "2a01:4f8:1:2::1").ok
    out = service.submit(Pixel.RED, 1, "2a01:4f8:1:2:aaaa::9")
    assert out.status == HTTPStatus.TOO_MANY_REQUESTS


def test_link_local_neighbours_do_not_share_cooldown(env):
    service, _, _, _ = env
    assert service.submit(Pixel.RED, 0, "fe80::1").ok
    assert service.submit(Pixel.RED, 1, "fe80::2").ok


def test_clock_before_epoch_is_internal_error(env):
    service, clock, board_path, _ = env
    clock.now = -5.0
    out = service.submit(Pixel.RED, 0, "203.0.113.9")
    assert out.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert "before the Unix epoch" in out.message
    assert "Internal server error at service.py:" in out.message
    assert board_path.read_bytes() == b"0000"


def test_diff_failure_keeps_board_write(tmp_path):
    board_path = tmp_path / "board.txt"
    board_path.write_bytes(b"0000")
    service = PlacementService(
        BoardStore(board_path),
        DiffLog(tmp_path / "missing" / "diffs.bin"),
        RateLimiter(300),
        clock=FakeClock(1000.0),
    )
    out = service.submit(Pixel.RED, 1, "203.0.113.9")
    assert out.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert "Internal server error at storage.py:" in out.message
    assert board_path.read_bytes() == b"0500"


def test_read_board(env):
    service, _, board_path, _ = env
    board_path.write_bytes(b"0123\n")
    out = service.read_board()
    assert out.ok
    assert out.message == "0123"


def test_read_board_failure(tmp_path):
    service = PlacementService(BoardStore(tmp_path / "missing" / "board.txt"), DiffLog(tmp_path / "d.bin"))
    out = service.read_board()
    assert out.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert "Internal server error at" in out.message


def test_read_board_never_provisioned_is_not_found(tmp_path):
    board_path = tmp_path / "board.txt"
    service = PlacementService(BoardStore(board_path), DiffLog(tmp_path / "diffs.bin"))
    out = service.read_board()
    assert out.status == HTTPStatus.INTERNAL_SERVER_ERROR
    assert out.message.startswith("Not found\nInternal server error at storage.py:")
    assert board_path.exists()


def _submit_concurrently(service, calls):
    barrier = threading.Barrier(len(calls))
    outcomes = [None] * len(calls)

    def attempt(i, pixel, offset, caller):
        barrier.wait()
        outcomes[i] = service.submit(pixel, offset, caller)

    threads = [threading.Thread(target=attempt, args=(i, *call)) for i, call in enumerate(calls)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    return outcomes


def test_concurrent_distinct_callers_all_land(tmp_path):
    n = 16
    board_path = tmp_path / "board.txt"
    diff_path = tmp_path / "diffs.bin"
    board_path.write_bytes(b"0" * n)
    service = PlacementService(BoardStore(board_path), DiffLog(diff_path), RateLimiter(300), clock=FakeClock(1000.0))
    colors = list(Pixel)

    outcomes = _submit_concurrently(service, [(colors[i], i, f"198.51.100.{i + 1}") for i in range(n)])

    assert all(o.ok for o in outcomes)
    assert board_path.read_bytes() == bytes(encode(colors[i]) for i in range(n))
    assert diff_path.stat().st_size == n * 16
    assert sorted(r.offset for r in _records(diff_path)) == list(range(n))


def test_concurrent_same_slash64_single_acceptance(env):
    service, _, board_path, diff_path = env
    callers = [f"2a01:4f8:1:2::{i + 1:x}" for i in range(8)]

    outcomes = _submit_concurrently(service, [(Pixel.RED, i % 4, c) for i, c in enumerate(callers)])

    assert sum(o.ok for o in outcomes) == 1
    assert sum(o.status == HTTPStatus.TOO_MANY_REQUESTS for o in outcomes) == len(callers) - 1
    assert len(_records(diff_path)) == 1
    assert diff_path.stat().st_size == 16
