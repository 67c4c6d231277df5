"""
Tests for the ffmpeg/ffprobe wrappers.
"""

import pytest

from transync import io_ffmpeg
from transync.errors import ProbeError, ToolError
from transync.io_ffmpeg import extract_segment, probe_duration, run
from transync.segmenter import plan_chunks


def test_probe_parses_duration(monkeypatch):
    monkeypatch.setattr(io_ffmpeg, "run", lambda cmd: "700.123456\n")

    assert probe_duration("talk.mp3") == pytest.approx(700.123456)


@pytest.mark.parametrize("output", ["N/A\n", "", "0.000000\n", "nan\n"])
def test_probe_rejects_unusable_output(monkeypatch, output):
    monkeypatch.setattr(io_ffmpeg, "run", lambda cmd: output)

    with pytest.raises(ProbeError):
        probe_duration("talk.mp3")


def test_probe_wraps_tool_failure(monkeypatch):
    def failing(cmd):
        raise ToolError("ffprobe failed with code 1", output="talk.mp3: Invalid data")

    monkeypatch.setattr(io_ffmpeg, "run", failing)

    with pytest.raises(ProbeError, match="Could not read duration"):
        probe_duration("talk.mp3")


def test_run_reports_missing_binary():
    with pytest.raises(ToolError):
        run(["transync-no-such-tool", "--version"])


def test_extract_segment_command(monkeypatch, tmp_path):
    """Mono, 16 kHz, 64k MP3 without video, cut at the requested window."""
    seen = []
    monkeypatch.setattr(io_ffmpeg, "run", lambda cmd: seen.append(cmd) or "")
    out = str(tmp_path / "chunks" / "chunk_1.mp3")

    extract_segment("in.mp4", out, 300.0, 100.0)

    cmd = seen[0]
    assert cmd[0] == "ffmpeg"
    assert cmd[cmd.index("-ss") + 1] == "300.000000"
    assert cmd[cmd.index("-t") + 1] == "100.000000"
    assert "-vn" in cmd
    assert cmd[cmd.index("-acodec") + 1] == "libmp3lame"
    assert cmd[cmd.index("-ar") + 1] == "16000"
    assert cmd[cmd.index("-ac") + 1] == "1"
    assert cmd[cmd.index("-b:a") + 1] == "64k"
    assert out in cmd
    assert (tmp_path / "chunks").is_dir()


def test_sub_millisecond_tail_is_not_rounded_away(monkeypatch, tmp_path):
    """ffprobe reports microseconds; a 0.2 ms tail chunk must still be cut with a nonzero length."""
    seen = []
    monkeypatch.setattr(io_ffmpeg, "run", lambda cmd: seen.append(cmd) or "")
    index, start, length = plan_chunks(600.0002, 300.0)[-1]

    extract_segment("in.mp4", str(tmp_path / f"chunk_{index}.mp3"), start, length)

    cmd = seen[0]
    assert cmd[cmd.index("-ss") + 1] == "600.000000"
    assert cmd[cmd.index("-t") + 1] == "0.000200"
