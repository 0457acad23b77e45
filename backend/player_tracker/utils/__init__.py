"""
Utility functions shared across the player tracker backend.
"""

from .time import DAY_MS, now_ms

__all__ = ["DAY_MS", "now_ms"]
