"""Tests for MergedBuffer and stream types."""

import pytest

from jobtail.merged import MergedBuffer
from jobtail.stream import StreamChunk, StreamLabel


def out(new_lines=(), current="", changed=False):
    return StreamChunk(StreamLabel.OUT, list(new_lines), current, changed)


def err(new_lines=(), current="", changed=False):
    return StreamChunk(StreamLabel.ERR, list(new_lines), current, changed)


def test_stream_labels():
    """There are exactly two labels and they format as prefixes."""
    assert [label.value for label in StreamLabel] == ["OUT", "ERR"]
    assert StreamLabel.ERR.prefix("boom") == "[ERR] boom"


def test_chunk_defaults():
    """Test the defaults of an empty chunk."""
    chunk = StreamChunk(StreamLabel.OUT)
    assert chunk.new_lines == []
    assert chunk.current_line == ""
    assert chunk.current_changed is False
    assert chunk.missing is False


def test_interleaves_in_apply_order():
    """Finalized lines keep the order chunks were applied in."""
    merged = MergedBuffer(limit=10)
    merged.apply_chunk(out(["first out"]))
    merged.apply_chunk(err(["first err", "second err"]))
    merged.apply_chunk(out(["second out"]))

    assert merged.content() == "[OUT] first out\n[ERR] first err\n[ERR] second err\n[OUT] second out"
    assert len(merged) == 4


def test_current_lines_shown_last():
    """In-progress lines follow the finalized ones, stdout before stderr."""
    merged = MergedBuffer(limit=10)
    merged.apply_chunk(err(["done"], current="err 50%", changed=True))
    merged.apply_chunk(out(current="out 10%", changed=True))

    assert merged.content() == "[ERR] done\n[OUT] out 10%\n[ERR] err 50%"
    assert merged.current(StreamLabel.OUT) == "out 10%"


def test_unchanged_current_line_is_ignored():
    """A chunk whose current line did not change leaves the slot alone."""
    merged = MergedBuffer(limit=10)
    merged.apply_chunk(out(current="working", changed=True))
    merged.apply_chunk(out(current="stale", changed=False))
    assert merged.content() == "[OUT] working"


def test_finalized_line_clears_slot():
    """Once a line is terminated the empty current line hides the slot."""
    merged = MergedBuffer(limit=10)
    merged.apply_chunk(out(current="50%", changed=True))
    merged.apply_chunk(out(["100%"], current="", changed=True))
    assert merged.content() == "[OUT] 100%"


def test_limit_trims_oldest():
    """Only the most recent lines are kept."""
    merged = MergedBuffer(limit=3)
    merged.apply_chunk(out([f"line {i}" for i in range(5)]))
    merged.apply_chunk(err(["late"]))

    assert merged.lines() == ["[OUT] line 3", "[OUT] line 4", "[ERR] late"]


def test_reset():
    """Reset drops finalized lines and both slots."""
    merged = MergedBuffer(limit=3)
    merged.apply_chunk(out(["x"], current="y", changed=True))
    merged.apply_chunk(err(current="z", changed=True))
    merged.reset()

    assert merged.content() == ""
    assert len(merged) == 0
    assert merged.current(StreamLabel.ERR) == ""


def test_invalid_limit():
    """Test that the limit must be positive."""
    with pytest.raises(ValueError):
        MergedBuffer(limit=0)
