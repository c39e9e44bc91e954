"""Tests for LineBuffer column addressing."""

from jobtail.linebuffer import LineBuffer


def test_sequential_writes():
    """Test appending characters column by column."""
    line = LineBuffer()
    for col, ch in enumerate("hello"):
        line.write_at(col, ch)
    assert line.text == "hello"
    assert str(line) == "hello"
    assert line.visual_width() == 5
    assert len(line) == 5


def test_write_past_end_pads_with_spaces():
    """Test that a gap before the target column is filled with spaces."""
    line = LineBuffer()
    line.write_at(3, "x")
    assert line.text == "   x"
    assert line.visual_width() == 4

    line.write_at(6, "y")
    assert line.text == "   x  y"


def test_overwrite_in_place():
    """Test overwriting an existing narrow character."""
    line = LineBuffer("abcdef")
    line.write_at(0, "x")
    line.write_at(1, "y")
    assert line.text == "xycdef"
    assert line.visual_width() == 6


def test_negative_column_is_clamped():
    """Test that negative columns write at column 0."""
    line = LineBuffer("abc")
    line.write_at(-4, "z")
    assert line.text == "zbc"


def test_write_inside_wide_character_replaces_it():
    """A column landing on either cell of a wide character replaces that character."""
    line = LineBuffer("中b")
    assert line.visual_width() == 3

    line.write_at(1, "x")
    assert line.text == "xb"
    assert line.visual_width() == 2

    line = LineBuffer("中b")
    line.write_at(0, "x")
    assert line.text == "xb"


def test_write_after_wide_character():
    """Test addressing the column right after a wide character."""
    line = LineBuffer("中b")
    line.write_at(2, "x")
    assert line.text == "中x"

    line.write_at(3, "!")
    assert line.text == "中x!"
    assert line.visual_width() == 4


def test_wide_character_over_narrow_ones():
    """Writing a wide character over a narrow one keeps the rest of the row."""
    line = LineBuffer("abc")
    line.write_at(0, "中")
    assert line.text == "中bc"
    assert line.visual_width() == 4


def test_zero_width_characters_take_a_cell():
    """Zero-width characters count as one cell inside the buffer."""
    line = LineBuffer("a\u0301")
    assert line.visual_width() == 2
    line.write_at(1, "b")
    assert line.text == "ab"


def test_clear():
    """Test clearing the buffer."""
    line = LineBuffer("content")
    line.clear()
    assert line.text == ""
    assert line.visual_width() == 0
    assert not line
    line.write_at(2, "x")
    assert line.text == "  x"
