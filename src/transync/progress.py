"""
Progress events and the terminal-state guarantees of the event stream.

The pipeline is a plain generator of ProgressEvent values. ``report`` wraps
any such generator so the caller always sees exactly one terminal event
(complete or error) and nothing after it; ``write_events`` delivers the
records to a text stream as they are produced.
"""

import json
import logging
from collections.abc import Iterable, Iterator
from typing import Optional, TextIO

from .errors import ClientDisconnected, TransyncError
from .models import ProgressEvent, Segment

logger = logging.getLogger("transync")

EVENT_DELIMITER = "\n---\n"


def processing(
    stage: str,
    phase: str,
    message: str,
    chunking: float = 0.0,
    transcription: float = 0.0,
    segments: Optional[list[Segment]] = None,
) -> ProgressEvent:
    return ProgressEvent(
        status="processing",
        stage=stage,
        phase=phase,
        message=message,
        chunking_progress=chunking,
        transcription_progress=transcription,
        segments=segments,
    )


def complete(segments: list[Segment]) -> ProgressEvent:
    return ProgressEvent(
        status="complete",
        stage="finished",
        phase="complete",
        message="Transcription completed",
        chunking_progress=100.0,
        transcription_progress=100.0,
        segments=segments,
    )


def failure(exc: BaseException) -> ProgressEvent:
    details = getattr(exc, "details", None) or getattr(exc, "output", None)
    return ProgressEvent(
        status="error",
        stage="error",
        phase="error",
        message=f"Transcription failed: {exc}",
        error=str(exc),
        details=details or "No additional details available",
    )


def report(events: Iterable[ProgressEvent]) -> Iterator[ProgressEvent]:
    """Yield events until exactly one terminal event has been yielded."""
    it = iter(events)
    try:
        for event in it:
            yield event
            if event.is_terminal:
                return
    except TransyncError as e:
        logger.error(f"Transcription error: {e}")
        yield failure(e)
        return
    except Exception as e:
        logger.exception("Unexpected transcription error")
        yield failure(e)
        return
    finally:
        close = getattr(it, "close", None)
        if close is not None:
            close()
    yield failure(TransyncError("Pipeline ended without a result"))


def encode_event(event: ProgressEvent) -> str:
    return json.dumps(event.to_dict(), ensure_ascii=False)


def write_events(
    events: Iterable[ProgressEvent], stream: TextIO, delimiter: str = EVENT_DELIMITER
) -> Optional[ProgressEvent]:
    """Write each event as soon as it is produced; return the terminal event.

    A stream that breaks mid-way is treated as a client disconnect: the event
    source is closed first so its temporary storage is reclaimed, then
    ClientDisconnected propagates.
    """
    it = iter(events)
    last: Optional[ProgressEvent] = None
    try:
        for event in it:
            stream.write(encode_event(event) + delimiter)
            stream.flush()
            last = event
    except (BrokenPipeError, ConnectionResetError) as e:
        logger.warning(f"Client disconnected, aborting transcription: {e}")
        close = getattr(it, "close", None)
        if close is not None:
            close()
        raise ClientDisconnected("Client disconnected") from e
    return last
