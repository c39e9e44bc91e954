"""Exceptions raised by jobtail."""

from pathlib import Path
from typing import Optional

from .stream import StreamChunk


class JobtailError(Exception):
    """Base class for all jobtail errors."""


class FollowError(JobtailError):
    """
    Raised when a followed log file exists but cannot be read.

    Missing files and truncation are not errors; this covers permission
    problems and stat/open/seek/read failures. The follower's state is left
    untouched so the next poll simply tries again.

    Attributes:
        path: The file that could not be read
        cause: The underlying OSError
        chunk: An empty chunk for the stream being polled, so callers can
            keep feeding consumers
        message: Human-readable description
    """

    def __init__(self, path: Path, cause: OSError, chunk: StreamChunk, message: Optional[str] = None):
        self.path = path
        self.cause = cause
        self.chunk = chunk
        self.message = message or f"Failed to read {path}: {cause}"
        super().__init__(self.message)
