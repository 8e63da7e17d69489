"""Placement failure taxonomy."""
from __future__ import annotations


class PlacementError(Exception):
    """Base class for every failure the placement pipeline reports."""


class IndexOutOfBounds(PlacementError):
    def __init__(self, length: int):
        super().__init__(f"Index must be less than {length}")
        self.length = length


class RateLimited(PlacementError):
    def __init__(self, retry_after: int):
        super().__init__(f"Please wait {retry_after} seconds before placing again")
        self.retry_after = retry_after


class StorageError(PlacementError):
    """Board or diff artifact could not be opened, read or written."""


class ClockError(PlacementError):
    """System clock is before the Unix epoch."""
