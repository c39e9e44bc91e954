"""Display width and wrapping helpers for rendered log lines."""

from functools import lru_cache
from typing import Iterable, List
from wcwidth import wcwidth


@lru_cache(maxsize=4096)
def char_width(ch: str) -> int:
    """
    Terminal column width of a single character.

    Control characters report -1 from wcwidth; they are treated as zero width
    so the cursor never moves backwards.
    """
    # Fast path for printable ASCII
    if " " <= ch <= "~":
        return 1
    return max(0, wcwidth(ch))


def cell_width(ch: str) -> int:
    """Number of cells a character occupies once stored in a row."""
    width = char_width(ch)
    return width if width > 0 else 1


def line_width(text: str) -> int:
    """Visual width of a line, counting zero-width characters as one cell."""
    # Every ASCII character occupies exactly one cell
    if text.isascii():
        return len(text)
    return sum(cell_width(ch) for ch in text)


def wrap_line(line: str, width: int) -> List[str]:
    """
    Split a logical line into display rows no wider than ``width``.

    Args:
        line: Logical line to wrap
        width: Maximum visual width of a row; 0 or less disables wrapping

    Returns:
        List of rows, at least one (an empty line yields a single empty row)
    """
    if width <= 0 or not line:
        return [line]

    rows = []
    current = []
    used = 0
    for ch in line:
        w = cell_width(ch)
        # A character that would overflow starts a new row
        if used + w > width and current:
            rows.append("".join(current))
            current = []
            used = 0
        current.append(ch)
        used += w
        if used >= width:
            rows.append("".join(current))
            current = []
            used = 0

    if current or not rows:
        rows.append("".join(current))
    return rows


def wrap_lines(lines: Iterable[str], width: int) -> List[str]:
    """Wrap every line and flatten the result into display rows."""
    rows = []
    for line in lines:
        rows.extend(wrap_line(line, width))
    return rows
