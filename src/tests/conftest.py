"""
Shared fixtures: fake ffmpeg tooling and a scripted speech-to-text service.
"""

import httpx
import openai
import pytest

from transync import media, segmenter
from transync.models import RawSegment, RawTranscriptionResult, RawTranslationResult


def drain(gen):
    """Run a generator to completion, returning (yielded events, return value)."""
    events = []
    try:
        while True:
            events.append(next(gen))
    except StopIteration as stop:
        return events, stop.value


def connection_error() -> openai.APIConnectionError:
    request = httpx.Request("POST", "https://api.openai.com/v1/audio/transcriptions")
    return openai.APIConnectionError(request=request)


class FakeWhisperService:
    """Two segments per call, split at the middle of the chunk."""

    def __init__(self, language="english", fail_on_chunk=None):
        self.language = language
        self.fail_on_chunk = fail_on_chunk
        self.transcribed = []
        self.translated = []

    def transcribe(self, audio_path, language=None, word_timestamps=True, duration=None):
        self.transcribed.append(audio_path)
        if self.fail_on_chunk is not None and f"chunk_{self.fail_on_chunk}" in audio_path:
            raise connection_error()
        half = duration / 2
        return RawTranscriptionResult(
            language=self.language,
            text="first part second part",
            segments=[
                RawSegment(start=0.0, end=half, text=" first part"),
                RawSegment(start=half, end=duration, text=" second part"),
            ],
            duration=duration,
        )

    def translate(self, audio_path, duration=None):
        self.translated.append(audio_path)
        half = duration / 2
        return RawTranslationResult(
            text="one two",
            segments=[
                RawSegment(start=0.0, end=half, text=" one"),
                RawSegment(start=half, end=duration, text=" two"),
            ],
        )


@pytest.fixture
def fake_ffmpeg(monkeypatch):
    """Replace ffmpeg/ffprobe with in-process fakes; returns the recorded extract calls."""
    calls = []

    def fake_extract(input_path, out_path, start, duration, **kwargs):
        calls.append((start, duration))
        with open(out_path, "wb") as f:
            f.write(b"ID3 fake mp3 payload")
        return out_path

    monkeypatch.setattr(segmenter, "extract_segment", fake_extract)
    monkeypatch.setattr(segmenter, "decoded_length_ms", lambda path: 1000)
    return calls


@pytest.fixture
def probe(monkeypatch):
    """Set the duration reported for any probed file."""

    def set_duration(seconds):
        monkeypatch.setattr(media, "probe_duration", lambda path: seconds)

    return set_duration
