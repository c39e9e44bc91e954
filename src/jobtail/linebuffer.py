"""Single visual row addressed by terminal column."""

from typing import List

from .width import cell_width, line_width


class LineBuffer:
    """
    One row of text that supports column-indexed overwrite.

    Characters are stored individually so wide characters (two cells) and
    zero-width characters (stored as one cell) can be addressed by the column
    a terminal would place them in.
    """

    __slots__ = ("_chars", "_width")

    def __init__(self, text: str = ""):
        self._chars: List[str] = list(text)
        self._width = line_width(text)

    def write_at(self, column: int, ch: str) -> None:
        """
        Write a character at a visual column.

        Columns past the end of the row are padded with spaces first. A column
        that lands inside a wide character overwrites that whole character.

        Args:
            column: Target column (negative values are treated as 0)
            ch: Single character to write
        """
        if column < 0:
            column = 0

        # Appending is by far the most common case
        if column >= self._width:
            padding = column - self._width
            if padding:
                self._chars.extend(" " * padding)
            self._chars.append(ch)
            self._width += padding + cell_width(ch)
            return

        pos = self._index_for_column(column)
        self._width += cell_width(ch) - cell_width(self._chars[pos])
        self._chars[pos] = ch

    def _index_for_column(self, column: int) -> int:
        """Index of the character whose cell covers ``column``."""
        if column <= 0:
            return 0
        used = 0
        for i, ch in enumerate(self._chars):
            w = cell_width(ch)
            if used + w > column:
                return i
            used += w
        return len(self._chars)

    def visual_width(self) -> int:
        """Sum of the cell widths of all characters."""
        return self._width

    @property
    def text(self) -> str:
        """The row's characters as a string."""
        return "".join(self._chars)

    def clear(self) -> None:
        """Remove all characters, keeping the underlying list."""
        self._chars.clear()
        self._width = 0

    def __len__(self) -> int:
        return len(self._chars)

    def __str__(self) -> str:
        return self.text

    def __repr__(self) -> str:
        return f"LineBuffer({self.text!r})"
