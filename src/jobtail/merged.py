"""Chronological interleaving of the stdout and stderr streams."""

from collections import deque
from typing import Dict, List

from .renderer import RENDER_LINE_LIMIT
from .stream import StreamChunk, StreamLabel


class MergedBuffer:
    """
    Merges finalized lines from both streams in the order they were polled.

    Each stream's unterminated line is kept in its own slot and shown at the
    bottom until a line feed finalizes it.
    """

    def __init__(self, limit: int = RENDER_LINE_LIMIT):
        """
        Initialize an empty merged buffer.

        Args:
            limit: Maximum number of finalized lines kept
        """
        if limit <= 0:
            raise ValueError("Limit must be positive")
        self.limit = limit
        self._lines = deque(maxlen=limit)
        self._current: Dict[StreamLabel, str] = {label: "" for label in StreamLabel}

    def reset(self) -> None:
        """Drop all lines and in-progress slots."""
        self._lines.clear()
        for label in self._current:
            self._current[label] = ""

    def apply_chunk(self, chunk: StreamChunk) -> None:
        """Add a polled chunk's finalized lines and current line."""
        for line in chunk.new_lines:
            self._lines.append(chunk.label.prefix(line))
        if chunk.current_changed:
            self._current[chunk.label] = chunk.current_line

    def current(self, label: StreamLabel) -> str:
        """The in-progress line held for a stream."""
        return self._current[label]

    def lines(self) -> List[str]:
        """Finalized lines followed by each stream's non-empty current line."""
        out = list(self._lines)
        for label in StreamLabel:
            if self._current[label]:
                out.append(label.prefix(self._current[label]))
        return out

    def content(self) -> str:
        return "\n".join(self.lines())

    def __len__(self) -> int:
        return len(self._lines)
