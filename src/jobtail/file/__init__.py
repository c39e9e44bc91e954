"""File-backed components."""

from .follower import INITIAL_TAIL_BYTES, LogFollower

__all__ = ["INITIAL_TAIL_BYTES", "LogFollower"]
