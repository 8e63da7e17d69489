"""Pixel Place Replay - Offline diff log reading, board rebuild and verification."""
