"""Stream labels and the per-poll chunk handed from followers to consumers."""

from dataclasses import dataclass, field
from enum import Enum
from typing import List


class StreamLabel(Enum):
    """The two output streams of a job; the value is the display prefix."""

    OUT = "OUT"
    ERR = "ERR"

    def prefix(self, text: str) -> str:
        """Format a line as ``[LABEL] text``."""
        return f"[{self.value}] {text}"


@dataclass
class StreamChunk:
    """
    What changed in one stream since the previous poll.

    Attributes:
        label: Which stream the chunk belongs to
        new_lines: Lines finalized (terminated by a line feed) during the poll
        current_line: Text of the line the cursor is on, possibly unterminated
        current_changed: Whether the visible current line changed
        missing: Whether the underlying file did not exist
    """

    label: StreamLabel
    new_lines: List[str] = field(default_factory=list)
    current_line: str = ""
    current_changed: bool = False
    missing: bool = False
