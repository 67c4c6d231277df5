"""
SRT export of a finished transcript.
"""

import logging

from .models import Segment

logger = logging.getLogger("transync")


def format_timestamp(t: float) -> str:
    """Seconds -> HH:MM:SS,mmm."""
    total_ms = int(round(max(0.0, t) * 1000))
    h, rem = divmod(total_ms, 3_600_000)
    m, rem = divmod(rem, 60_000)
    s, ms = divmod(rem, 1000)
    return f"{h:02}:{m:02}:{s:02},{ms:03}"


def wrap_lines(text: str, max_chars: int = 42) -> str:
    """Wrap text at word boundaries to lines of at most max_chars (longer single words stay whole)."""
    words = text.split()
    lines: list[str] = []
    cur: list[str] = []
    for w in words:
        if sum(len(x) for x in cur) + len(cur) + len(w) > max_chars and cur:
            lines.append(" ".join(cur))
            cur = []
        cur.append(w)
    if cur:
        lines.append(" ".join(cur))
    return "\n".join(lines)


def cue_text(segment: Segment, include_translation: bool = True, wrap_chars: int = 42) -> str:
    """Cue body: the original text, followed by the translation for bilingual segments."""
    body = wrap_lines(segment.text, max_chars=wrap_chars)
    if include_translation and segment.translation:
        body += "\n" + wrap_lines(segment.translation, max_chars=wrap_chars)
    return body


def write_srt(
    segments: list[Segment],
    path: str,
    include_translation: bool = True,
    wrap_chars: int = 42,
) -> None:
    """Write transcript segments to an SRT file, skipping empty ones."""
    n = 0
    with open(path, "w", encoding="utf-8") as f:
        for s in segments:
            if not s.text.strip():
                continue
            n += 1
            f.write(
                f"{n}\n{format_timestamp(s.start_time)} --> {format_timestamp(s.end_time)}\n"
                f"{cue_text(s, include_translation, wrap_chars)}\n\n"
            )
    logger.info(f"Saved SRT -> {path} ({n} cues)")
