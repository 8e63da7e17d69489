"""Pixel Place Core - Shared color codec, identity buckets and record layout."""
from .pixels import Pixel, encode, decode
from .identity import resolve_identity, is_global_v6
from .records import DiffRecord

__all__ = ["Pixel", "encode", "decode", "resolve_identity", "is_global_v6", "DiffRecord"]
