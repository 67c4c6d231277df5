"""
Word alignment: one timed Word per whitespace-delimited word of segment text.

Whisper's word tokens do not line up one-to-one with the words of the
segment text (sub-word pieces, merged tokens, punctuation). Timings are
reconciled with a cascade, first strategy producing words wins:

1. match the segment's own raw tokens against the text,
2. take the global word list entries that start inside the segment,
3. split the segment span evenly across its words.

All times here are chunk-local; offsets are applied by the timeline merger.
"""

import logging

from .errors import AlignmentError
from .models import RawSegment, RawTranscriptionResult, RawWord, Segment, Word

logger = logging.getLogger("transync")


def canonical_words(text: str) -> list[str]:
    return text.split()


def match_raw_tokens(text: str, tokens: list[RawWord]) -> list[Word]:
    """Greedily concatenate raw tokens until they spell the next word of ``text``.

    A word whose tokens never add up is still emitted, spanning to the last
    token, and the cursor stays put. Once the tokens are used up the
    remaining words get no timing.
    """
    words = canonical_words(text)
    if not words:
        raise AlignmentError("segment has no text to align")

    out: list[Word] = []
    cursor = 0
    for actual in words:
        if cursor >= len(tokens):
            break
        combined = Word(text=actual, start=tokens[cursor].start, end=tokens[cursor].end)
        spelled = ""
        i = cursor
        while i < len(tokens):
            spelled += tokens[i].text
            combined.end = tokens[i].end
            if spelled.lower() == actual.lower():
                cursor = i + 1
                break
            i += 1
        out.append(combined)
    return out


def words_in_window(tokens: list[RawWord], start: float, end: float) -> list[Word]:
    """Global tokens whose start falls within [start, end)."""
    return [Word(text=t.text, start=t.start, end=t.end) for t in tokens if start <= t.start < end]


def split_evenly(text: str, start: float, end: float) -> list[Word]:
    """Spread the words of ``text`` evenly over [start, end]."""
    words = canonical_words(text)
    if not words:
        raise AlignmentError("segment has no text to split")
    step = (end - start) / len(words)
    return [
        Word(text=w, start=start + i * step, end=start + (i + 1) * step) for i, w in enumerate(words)
    ]


def reconcile_words(segment: RawSegment, global_words: list[RawWord]) -> list[Word]:
    """Run the fallback cascade for one segment."""
    text = segment.text.strip()
    if segment.words:
        try:
            words = match_raw_tokens(text, segment.words)
        except AlignmentError as e:
            logger.debug(f"Token matching skipped for segment at {segment.start:.2f}s: {e}")
            words = []
        if words:
            return words
    if global_words:
        words = words_in_window(global_words, segment.start, segment.end)
        if words:
            return words
    logger.debug(f"No word timings for segment at {segment.start:.2f}s; splitting evenly")
    try:
        return split_evenly(text, segment.start, segment.end)
    except AlignmentError as e:
        logger.warning(f"Segment at {segment.start:.2f}-{segment.end:.2f}s left without words: {e}")
        return []


def reconcile_result(result: RawTranscriptionResult) -> list[Segment]:
    """Build chunk-local Segments from a raw chunk result."""
    translation = result.translation
    bilingual = translation is not None
    segments: list[Segment] = []
    for index, raw in enumerate(result.segments):
        translated = None
        if bilingual and index < len(translation.segments):
            translated = translation.segments[index].text.strip() or None
        segments.append(
            Segment(
                start_time=raw.start,
                end_time=raw.end,
                text=raw.text.strip(),
                words=reconcile_words(raw, result.words),
                is_non_native_audio=bilingual,
                translation=translated,
            )
        )
    return segments
