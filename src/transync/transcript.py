"""
Reading and browsing a finished transcript.

These are the lookups a playback view needs: which segment and word are
active at the current playback time, and which segments match a search.
"""

import json
import logging
from typing import Optional

from .models import Segment, Word

logger = logging.getLogger("transync")


def save_transcript(segments: list[Segment], path: str) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump([s.to_dict() for s in segments], f, ensure_ascii=False, indent=2)
    logger.info(f"Saved transcript -> {path} ({len(segments)} segments)")


def load_transcript(path: str) -> list[Segment]:
    """Load a transcript saved by ``save_transcript`` (or a final event's segments)."""
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if isinstance(data, dict):
        data = data.get("segments") or data.get("transcription") or []
    return [Segment.from_dict(d) for d in data]


def segment_at(segments: list[Segment], t: float) -> Optional[Segment]:
    """The segment playing at time ``t`` (start inclusive, end exclusive)."""
    for s in segments:
        if s.start_time <= t < s.end_time:
            return s
    return None


def word_at(segment: Segment, t: float) -> Optional[Word]:
    for w in segment.words:
        if w.start <= t < w.end:
            return w
    return None


def search_segments(segments: list[Segment], term: str) -> list[Segment]:
    """Case-insensitive substring search over segment text; empty term matches all."""
    if not term:
        return list(segments)
    needle = term.lower()
    return [s for s in segments if needle in s.text.lower()]
