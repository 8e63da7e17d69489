"""Pixel Place Server - Rate-limited placement pipeline and its HTTP surface."""
