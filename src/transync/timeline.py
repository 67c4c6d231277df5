"""
Merging per-chunk transcripts into one time-ordered transcript.
"""

import logging
from dataclasses import replace

from .errors import MergeError
from .models import Segment, Word

logger = logging.getLogger("transync")


def shift_segments(segments: list[Segment], offset: float) -> list[Segment]:
    """Return copies of ``segments`` with every segment and word time moved by ``offset``."""
    return [
        replace(
            s,
            start_time=s.start_time + offset,
            end_time=s.end_time + offset,
            words=[Word(text=w.text, start=w.start + offset, end=w.end + offset) for w in s.words],
        )
        for s in segments
    ]


def merge_chunk_transcripts(chunk_segments: list[list[Segment]], offsets: list[float]) -> list[Segment]:
    """Offset-correct each chunk, concatenate in chunk order, then stable-sort by start time."""
    if len(chunk_segments) != len(offsets):
        raise MergeError(
            f"Got {len(chunk_segments)} chunk transcripts but {len(offsets)} chunk offsets"
        )
    merged: list[Segment] = []
    for segments, offset in zip(chunk_segments, offsets):
        if offset < 0:
            raise MergeError(f"Negative chunk offset {offset}")
        merged.extend(shift_segments(segments, offset))
    merged.sort(key=lambda s: s.start_time)
    logger.info(f"Merged {len(chunk_segments)} chunk(s) into {len(merged)} segments")
    return merged
