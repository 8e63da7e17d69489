"""Pixel Place - Placement pipeline.

A submission moves through: identity resolved -> rate checked -> bounds
checked and written -> logged -> accepted. Each step can end the request
early. Effects are not rolled back: a request that passes the rate check
spends the caller's cooldown even if a later step fails, and a board byte
written before a failed log append stays written.
"""
from __future__ import annotations

import logging
import os
import time
import traceback
from dataclasses import dataclass
from http import HTTPStatus
from typing import Callable

from place_core.errors import ClockError, IndexOutOfBounds, PlacementError, RateLimited
from place_core.identity import IPAddress, resolve_identity
from place_core.pixels import Pixel, encode
from place_core.records import DiffRecord
from place_server.limiter import RateLimiter
from place_server.storage import BoardStore, DiffLog

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Outcome:
    status: HTTPStatus
    message: str

    @property
    def ok(self) -> bool:
        return self.status == HTTPStatus.OK


ACCEPTED = Outcome(HTTPStatus.OK, "OK")


def internal_error(error: BaseException) -> Outcome:
    """Report an unexpected failure with the source location that raised it."""
    frames = traceback.extract_tb(error.__traceback__)
    if frames:
        where = f"{os.path.basename(frames[-1].filename)}:{frames[-1].lineno}"
    else:
        where = "unknown"
    logger.error("Internal error at %s: %s", where, error)
    return Outcome(HTTPStatus.INTERNAL_SERVER_ERROR, f"{error}\nInternal server error at {where}")


class PlacementService:
    def __init__(
        self,
        board: BoardStore,
        diffs: DiffLog,
        limiter: RateLimiter | None = None,
        clock: Callable[[], float] = time.time,
    ):
        self.board = board
        self.diffs = diffs
        self.limiter = limiter if limiter is not None else RateLimiter()
        self.clock = clock

    def _now(self) -> float:
        now = self.clock()
        if now < 0:
            raise ClockError(f"System time {now} is before the Unix epoch")
        return now

    def read_board(self) -> Outcome:
        try:
            line = self.board.read()
        except PlacementError as e:
            return internal_error(e)
        return Outcome(HTTPStatus.OK, line.decode("ascii", errors="replace"))

    def submit(self, pixel: Pixel, offset: int, caller: IPAddress | str) -> Outcome:
        try:
            now = self._now()
        except ClockError as e:
            return internal_error(e)

        key = resolve_identity(caller)

        try:
            self.limiter.check_and_record(key, now)
        except RateLimited as e:
            logger.debug("Rate limited %s for %ss", key, e.retry_after)
            return Outcome(HTTPStatus.TOO_MANY_REQUESTS, str(e))

        code = encode(pixel)
        try:
            self.board.write_at(offset, code)
        except IndexOutOfBounds as e:
            logger.debug("Rejected index %s from %s: %s", offset, key, e)
            return Outcome(HTTPStatus.BAD_REQUEST, str(e))
        except PlacementError as e:
            return internal_error(e)

        record = DiffRecord(int(now * 1000), offset, code)
        try:
            self.diffs.append(record)
        except PlacementError as e:
            return internal_error(e)

        logger.info("Placed %s at %s for %s", pixel.value, offset, key)
        return ACCEPTED
