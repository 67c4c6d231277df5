"""
Tests for SRT export.
"""

from transync.models import Segment
from transync.srt_utils import format_timestamp, wrap_lines, write_srt


def test_format_timestamp():
    assert format_timestamp(0) == "00:00:00,000"
    assert format_timestamp(3661.5) == "01:01:01,500"
    assert format_timestamp(59.9996) == "00:01:00,000"


def test_write_srt_with_translation(tmp_path):
    """Bilingual segments get the English line under the original; empty ones are skipped."""
    segments = [
        Segment(start_time=0.0, end_time=2.5, text="你好世界", translation="Hello world"),
        Segment(start_time=2.5, end_time=3.0, text="  "),
        Segment(start_time=3.0, end_time=5.0, text="Goodbye!"),
    ]
    srt_path = tmp_path / "subs.srt"

    write_srt(segments, str(srt_path))

    content = srt_path.read_text(encoding="utf-8")
    assert content == (
        "1\n00:00:00,000 --> 00:00:02,500\n你好世界\nHello world\n\n"
        "2\n00:00:03,000 --> 00:00:05,000\nGoodbye!\n\n"
    )


def test_write_srt_without_translation(tmp_path):
    segments = [Segment(start_time=0.0, end_time=1.0, text="你好", translation="Hello")]
    srt_path = tmp_path / "subs.srt"

    write_srt(segments, str(srt_path), include_translation=False)

    assert "Hello" not in srt_path.read_text(encoding="utf-8")


def test_wrap_lines():
    """Test text wrapping functionality."""
    text = "This is a very long line that should be wrapped into multiple lines"
    wrapped = wrap_lines(text, max_chars=20)
    lines = wrapped.split("\n")

    assert len(lines) > 1
    for line in lines:
        assert len(line) <= 20


def test_wrap_lines_keeps_every_word():
    """Long transcript text is wrapped, never truncated."""
    text = "one two three four five six seven eight nine ten eleven twelve"

    assert wrap_lines(text, max_chars=10).split() == text.split()
