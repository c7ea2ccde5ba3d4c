"""Backlist: pick the next task worth doing and pay yourself a bounty for it."""

__version__ = "0.3.0"
