"""Incremental follower for a single growing log file."""

import logging
import os
from pathlib import Path
from typing import Union

from ..errors import FollowError
from ..renderer import RENDER_LINE_LIMIT, TailRenderer
from ..stream import StreamChunk, StreamLabel

logger = logging.getLogger(__name__)

# Configuration
INITIAL_TAIL_BYTES = 1024 * 1024  # Bytes read from the end of a file on first poll


class LogFollower:
    """
    Follows one log file and renders it through an owned TailRenderer.

    Each poll stats the file and feeds only the bytes appended since the
    previous poll. The first read of a file is capped at ``initial_tail_bytes``
    from the end so that attaching to a huge log stays cheap. A file that
    shrinks is treated as rotated and rendered again from scratch.
    """

    def __init__(
        self,
        path: Union[Path, str],
        limit: int = RENDER_LINE_LIMIT,
        initial_tail_bytes: int = INITIAL_TAIL_BYTES,
    ):
        """
        Initialize a follower for a file.

        Args:
            path: Log file to follow; it does not need to exist yet
            limit: Maximum logical lines retained by the renderer
            initial_tail_bytes: Bytes read from the end of the file on the
                first poll
        """
        if initial_tail_bytes <= 0:
            raise ValueError("Initial tail bytes must be positive")
        self.path = Path(path)
        self.initial_tail_bytes = initial_tail_bytes
        self.renderer = TailRenderer(limit)
        self.offset = 0
        self.initialized = False
        self.missing = False

    def reset(self, path: Union[Path, str]) -> None:
        """
        Point the follower at a different file and forget all state.

        Only call this between polls.
        """
        logger.debug(f"Following {path} (was {self.path})")
        self.path = Path(path)
        self.offset = 0
        self.initialized = False
        self.missing = False
        self.renderer.reset()

    def poll(self, label: StreamLabel) -> StreamChunk:
        """
        Read whatever was appended since the last poll.

        Args:
            label: Stream label stamped on the returned chunk

        Returns:
            StreamChunk with the newly finalized lines and current line. A
            missing file yields a chunk with ``missing`` set.

        Raises:
            FollowError: If the file exists but cannot be stat'ed or read
        """
        try:
            size = os.stat(self.path).st_size
        except FileNotFoundError:
            if not self.missing:
                logger.debug(f"{self.path} does not exist yet")
            self.missing = True
            return StreamChunk(label=label, missing=True)
        except OSError as e:
            raise FollowError(self.path, e, StreamChunk(label=label)) from e

        if size < self.offset:
            logger.info(f"File truncated/rotated - re-reading {self.path} (size: {size:,}, offset: {self.offset:,})")
            self.offset = 0
            self.initialized = False
            self.renderer.reset()

        if not self.initialized:
            return self._bootstrap(label, size)

        if size == self.offset:
            return StreamChunk(label=label, current_line=self.renderer.current_line())

        data = self._read(label, self.offset, size)
        logger.debug(f"Read {len(data):,} new bytes from {self.path}")
        chunk = self._ingest(label, data)
        self.offset = size
        self.missing = False
        return chunk

    def _bootstrap(self, label: StreamLabel, size: int) -> StreamChunk:
        """First read of a file: only the tail, starting on a line boundary."""
        start = max(0, size - self.initial_tail_bytes)
        data = self._read(label, start, size)

        if start > 0:
            # The first line is almost certainly cut off; skip it
            newline = data.find(b"\n")
            if newline >= 0:
                data = data[newline + 1 :]

        logger.info(f"Loaded {len(data):,} bytes from {self.path} (skipped first {start:,})")
        chunk = self._ingest(label, data)
        self.offset = size
        self.initialized = True
        self.missing = False
        return chunk

    def _read(self, label: StreamLabel, start: int, stop: int) -> bytes:
        """Read ``[start, stop)`` from the file."""
        try:
            with open(self.path, "rb") as f:
                f.seek(start)
                return f.read(stop - start)
        except OSError as e:
            raise FollowError(self.path, e, StreamChunk(label=label)) from e

    def _ingest(self, label: StreamLabel, data: bytes) -> StreamChunk:
        new_lines, changed = self.renderer.ingest(data)
        return StreamChunk(
            label=label,
            new_lines=new_lines,
            current_line=self.renderer.current_line(),
            current_changed=changed,
        )

    def content(self, width: int = 0) -> str:
        """Rendered file content, wrapped to ``width`` when positive."""
        return self.renderer.content_wrapped(width)

    def current_line(self) -> str:
        """The line the renderer's cursor is on."""
        return self.renderer.current_line()
