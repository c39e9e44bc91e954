"""Streaming interpreter that turns raw process output into terminal lines."""

import logging
import re
from collections import deque
from enum import Enum
from typing import List, Tuple

from .linebuffer import LineBuffer
from .width import char_width, wrap_lines

logger = logging.getLogger(__name__)

# Configuration
RENDER_LINE_LIMIT = 20000  # Maximum logical lines kept (history + active)
ACTIVE_WINDOW = 256  # Rows still open to cursor-relative overwrite

ESC = 0x1B
CSI_OPEN = 0x5B  # "["
CR = 0x0D
LF = 0x0A

# Bytes that need no state machine attention
_PLAIN_RUN = re.compile(rb"[^\x1b\r\n]+")


class ParserState(Enum):
    """States of the byte-level control sequence parser."""

    NORMAL = "normal"
    ESCAPE_PENDING = "escape_pending"
    CONTROL_SEQUENCE = "control_sequence"


def _utf8_length(lead: int) -> int:
    """Sequence length announced by a UTF-8 lead byte (1 for invalid leads)."""
    if lead < 0xC2:
        return 1
    if lead < 0xE0:
        return 2
    if lead < 0xF0:
        return 3
    if lead < 0xF5:
        return 4
    return 1


def _utf8_can_continue(pending: bytearray) -> bool:
    """True while ``pending`` may still grow into a valid UTF-8 character."""
    lead = pending[0]
    for i, b in enumerate(pending[1:], 1):
        lo, hi = 0x80, 0xBF
        if i == 1:
            # These leads allow a narrower second byte
            if lead == 0xE0:
                lo = 0xA0
            elif lead == 0xED:
                hi = 0x9F
            elif lead == 0xF0:
                lo = 0x90
            elif lead == 0xF4:
                hi = 0x8F
        if not lo <= b <= hi:
            return False
    return True


class TailRenderer:
    """
    Reconstructs what a terminal would display from a stream of raw bytes.

    Rows that may still be overwritten (by a carriage return or a cursor-up
    sequence) live in a small active window of LineBuffers. Rows that scroll
    out of that window are frozen into a capped history, so memory stays
    bounded no matter how much output is ingested.

    Only ``ESC [ n A`` (cursor up) is interpreted. Every other control
    sequence is consumed and dropped, so colour codes never leak into the text.
    """

    def __init__(self, limit: int = RENDER_LINE_LIMIT, active_window: int = ACTIVE_WINDOW):
        """
        Initialize an empty renderer.

        Args:
            limit: Maximum logical lines retained; 0 or less keeps everything
            active_window: Rows kept editable before moving into history
        """
        if active_window <= 0:
            raise ValueError("Active window must be positive")
        self.limit = limit
        self.active_window = active_window

        self._history = deque()
        self._active: List[LineBuffer] = [LineBuffer()]
        self.cursor_line = 0
        self.cursor_col = 0

        self._state = ParserState.NORMAL
        self._pending_text = bytearray()
        self._pending_control = bytearray()

    @property
    def state(self) -> ParserState:
        """Current control sequence parser state."""
        return self._state

    def reset(self) -> None:
        """Return to the empty initial state, keeping the first row object."""
        self._history.clear()
        first = self._active[0]
        first.clear()
        self._active = [first]
        self.cursor_line = 0
        self.cursor_col = 0
        self._state = ParserState.NORMAL
        self._pending_text.clear()
        self._pending_control.clear()

    def ingest(self, data: bytes) -> Tuple[List[str], bool]:
        """
        Feed raw bytes into the renderer.

        Input may be split anywhere, including inside a multi-byte character
        or a control sequence; incomplete parts are carried to the next call.

        Args:
            data: Raw bytes as written by the process

        Returns:
            Tuple of (lines finalized by a line feed, whether the current line
            changed)
        """
        new_lines = []
        changed = False
        i = 0
        end = len(data)

        while i < end:
            if self._state is ParserState.NORMAL and not self._pending_text:
                match = _PLAIN_RUN.match(data, i)
                if match:
                    self._write_run(match.group())
                    changed = True
                    i = match.end()
                    continue

            b = data[i]
            i += 1

            if self._state is ParserState.CONTROL_SEQUENCE:
                self._pending_control.append(b)
                if 0x40 <= b <= 0x7E:
                    if self._apply_control(bytes(self._pending_control)):
                        changed = True
                    self._pending_control.clear()
                    self._state = ParserState.NORMAL
                continue

            if self._state is ParserState.ESCAPE_PENDING:
                if b == CSI_OPEN:
                    self._pending_control.append(b)
                    self._state = ParserState.CONTROL_SEQUENCE
                    continue
                # Not a control sequence: drop the introducer, keep the byte
                self._pending_control.clear()
                self._state = ParserState.NORMAL

            if b == ESC:
                changed |= self._flush_text()
                self._pending_control.append(b)
                self._state = ParserState.ESCAPE_PENDING
            elif b == CR:
                self._flush_text()
                self.cursor_col = 0
                changed = True
            elif b == LF:
                self._flush_text()
                new_lines.append(self._active[self.cursor_line].text)
                self._advance_line()
                changed = True
            else:
                self._pending_text.append(b)
                changed |= self._flush_text()

        return new_lines, changed

    def _write_run(self, run: bytes) -> None:
        """Write a run of text bytes, falling back to byte-wise decoding."""
        try:
            text = run.decode("utf-8")
        except UnicodeDecodeError:
            # Invalid or truncated UTF-8 somewhere in the run
            for b in run:
                self._pending_text.append(b)
                self._flush_text()
            return
        for ch in text:
            self._write_char(ch)

    def _flush_text(self) -> bool:
        """Decode and write every complete character in the pending bytes."""
        pending = self._pending_text
        wrote = False
        while pending:
            size = _utf8_length(pending[0])
            if len(pending) < size:
                # Wait for more bytes unless one already breaks the sequence
                if _utf8_can_continue(pending):
                    break
            try:
                ch = bytes(pending[:size]).decode("utf-8")
            except UnicodeDecodeError:
                ch = chr(pending[0])
                size = 1
            self._write_char(ch)
            del pending[:size]
            wrote = True
        return wrote

    def _write_char(self, ch: str) -> None:
        self._active[self.cursor_line].write_at(self.cursor_col, ch)
        self.cursor_col = max(0, self.cursor_col + char_width(ch))

    def _advance_line(self) -> None:
        if self.cursor_line == len(self._active) - 1:
            self._active.append(LineBuffer())
        self.cursor_line += 1
        self.cursor_col = 0
        self._compact()

    def _move_cursor_up(self, rows: int) -> None:
        if rows <= 0:
            rows = 1
        self.cursor_line = max(0, self.cursor_line - rows)

    def _apply_control(self, seq: bytes) -> bool:
        """Act on a complete ``ESC [ ... final`` sequence; True if it did anything."""
        if len(seq) < 3 or seq[-1] != ord("A"):
            return False
        rows = 1
        params = seq[2:-1]
        if params:
            field = params.split(b";")[0]
            # Plain decimal only; signs and whitespace fall back to one row
            if field.isdigit() and int(field) > 0:
                rows = int(field)
        self._move_cursor_up(rows)
        return True

    def _compact(self) -> None:
        """Move rows that left the active window into history."""
        excess = len(self._active) - self.active_window
        if excess <= 0:
            return
        # Never evict the row the cursor is on
        excess = min(excess, self.cursor_line)
        if excess <= 0:
            return

        for row in self._active[:excess]:
            self._history.append(row.text)
        del self._active[:excess]
        self.cursor_line -= excess

        if self.limit > 0:
            max_history = max(0, self.limit - len(self._active))
            while len(self._history) > max_history:
                self._history.popleft()

    @property
    def history(self) -> List[str]:
        """Finalized lines that scrolled out of the active window."""
        return list(self._history)

    @property
    def active_rows(self) -> int:
        """Number of rows currently in the active window."""
        return len(self._active)

    def renderable_lines(self) -> List[str]:
        """
        Lines as a terminal would show them, oldest first.

        Trailing empty rows of the active window are omitted so the row the
        cursor moved onto after a final line feed does not show as a blank.
        """
        lines = list(self._history)
        active_len = len(self._active)
        while active_len > 0 and not self._active[active_len - 1]:
            active_len -= 1
        lines.extend(row.text for row in self._active[:active_len])
        if self.limit > 0 and len(lines) > self.limit:
            lines = lines[-self.limit :]
        return lines

    def content(self) -> str:
        """Rendered text joined with newlines."""
        return "\n".join(self.renderable_lines())

    def content_wrapped(self, width: int) -> str:
        """Rendered text with each line wrapped to ``width`` columns."""
        lines = self.renderable_lines()
        if width <= 0:
            return "\n".join(lines)
        return "\n".join(wrap_lines(lines, width))

    def current_line(self) -> str:
        """Text of the row the cursor is on."""
        return self._active[self.cursor_line].text
