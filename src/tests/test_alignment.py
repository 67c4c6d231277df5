"""
Tests for word alignment and chunk result reconciliation.
"""

import pytest

from transync.alignment import (
    match_raw_tokens,
    reconcile_result,
    reconcile_words,
    split_evenly,
    words_in_window,
)
from transync.errors import AlignmentError
from transync.models import RawSegment, RawTranscriptionResult, RawTranslationResult, RawWord


def _words(ws):
    return [(w.text, w.start, w.end) for w in ws]


def test_sub_word_tokens_are_joined():
    """'hel' + 'lo' spell 'hello'; the word spans both tokens."""
    tokens = [RawWord("hel", 0.0, 0.2), RawWord("lo", 0.2, 0.4), RawWord("world", 0.4, 0.9)]

    words = match_raw_tokens("hello world", tokens)

    assert _words(words) == [("hello", 0.0, 0.4), ("world", 0.4, 0.9)]


def test_token_matching_ignores_case():
    tokens = [RawWord("HEL", 1.0, 1.1), RawWord("lo", 1.1, 1.3)]

    assert _words(match_raw_tokens("Hello", tokens)) == [("Hello", 1.0, 1.3)]


def test_exhausted_tokens_stop_matching():
    """Words after the last token get no timing and there is no fall-through."""
    segment = RawSegment(
        start=0.0,
        end=3.0,
        text="one two three",
        words=[RawWord("one", 0.0, 0.5), RawWord("two", 0.5, 1.0)],
    )

    words = reconcile_words(segment, global_words=[])

    assert _words(words) == [("one", 0.0, 0.5), ("two", 0.5, 1.0)]


def test_unmatched_word_spans_remaining_tokens_without_advancing():
    """A word the tokens never spell still gets emitted, ending at the last token."""
    tokens = [RawWord("hullo", 0.0, 0.3), RawWord("world", 0.3, 0.8)]

    words = match_raw_tokens("hello world", tokens)

    # cursor never advanced, so both words start at the first token
    assert _words(words) == [("hello", 0.0, 0.8), ("world", 0.0, 0.8)]


def test_global_words_inside_segment_window():
    """Start inclusive, end exclusive."""
    tokens = [
        RawWord("a", 0.5, 0.9),
        RawWord("b", 1.0, 1.4),
        RawWord("c", 1.5, 1.9),
        RawWord("d", 2.0, 2.4),
    ]

    assert _words(words_in_window(tokens, 1.0, 2.0)) == [("b", 1.0, 1.4), ("c", 1.5, 1.9)]


def test_global_words_used_when_segment_has_none():
    segment = RawSegment(start=1.0, end=2.0, text="b c")
    tokens = [RawWord("b", 1.0, 1.4), RawWord("c", 1.5, 1.9), RawWord("d", 2.0, 2.4)]

    assert _words(reconcile_words(segment, tokens)) == [("b", 1.0, 1.4), ("c", 1.5, 1.9)]


def test_even_split_without_any_timing():
    """Four words over two seconds -> half a second each."""
    segment = RawSegment(start=10.0, end=12.0, text="a b c d")

    words = reconcile_words(segment, global_words=[])

    assert len(words) == 4
    assert (words[0].start, words[0].end) == (10.0, 10.5)
    assert (words[-1].start, words[-1].end) == (11.5, 12.0)
    assert [w.text for w in words] == ["a", "b", "c", "d"]


def test_even_split_when_global_words_miss_the_segment():
    segment = RawSegment(start=10.0, end=11.0, text="x y")
    tokens = [RawWord("z", 3.0, 3.5)]

    assert _words(reconcile_words(segment, tokens)) == [("x", 10.0, 10.5), ("y", 10.5, 11.0)]


def test_empty_text_raises_alignment_error_in_strategies():
    with pytest.raises(AlignmentError):
        split_evenly("   ", 0.0, 1.0)
    with pytest.raises(AlignmentError):
        match_raw_tokens("", [RawWord("a", 0.0, 1.0)])


def test_empty_text_falls_back_to_no_words():
    """Degenerate text never aborts reconciliation."""
    segment = RawSegment(start=0.0, end=1.0, text="  ", words=[RawWord("uh", 0.0, 0.2)])

    assert reconcile_words(segment, global_words=[]) == []


def test_reconcile_result_pairs_translation_by_index():
    """Translated chunks are flagged and carry the same-index English text."""
    result = RawTranscriptionResult(
        language="chinese",
        text="你好 世界",
        segments=[
            RawSegment(start=0.0, end=1.0, text=" 你好"),
            RawSegment(start=1.0, end=2.0, text=" 世界"),
        ],
        translation=RawTranslationResult(
            text="Hello",
            segments=[RawSegment(start=0.0, end=1.0, text=" Hello ")],
        ),
    )

    segments = reconcile_result(result)

    assert [s.text for s in segments] == ["你好", "世界"]
    assert all(s.is_non_native_audio for s in segments)
    assert segments[0].translation == "Hello"
    assert segments[1].translation is None
    assert _words(segments[0].words) == [("你好", 0.0, 1.0)]


def test_reconcile_result_without_translation():
    result = RawTranscriptionResult(
        language="english",
        text="hi there",
        segments=[RawSegment(start=0.0, end=1.0, text=" hi there")],
        words=[RawWord("hi", 0.1, 0.3), RawWord("there", 0.4, 0.9)],
    )

    (segment,) = reconcile_result(result)

    assert segment.is_non_native_audio is False
    assert segment.translation is None
    assert _words(segment.words) == [("hi", 0.1, 0.3), ("there", 0.4, 0.9)]
    assert "translation" not in segment.to_dict()
