"""
The transcription pipeline: a sequential generator of progress events.

probe -> (split) -> per chunk: transcribe, reconcile, discard -> merge.

All chunk files live in a per-run temporary directory that is removed on
every exit path, including the consumer closing the generator.
"""

import logging
import os
import tempfile
from collections.abc import Iterator
from typing import Optional

from .alignment import reconcile_result
from .config import PipelineConfig
from .io_ffmpeg import ensure_dir
from .media import guess_mime_type, load_media, needs_chunking
from .models import Chunk, ProgressEvent, Segment
from .progress import complete, processing
from .segmenter import split_media
from .stt import WhisperService, transcribe_chunk
from .timeline import merge_chunk_transcripts, shift_segments

logger = logging.getLogger("transync")


def _discard_chunk(chunk: Chunk) -> None:
    if chunk.is_temporary and os.path.exists(chunk.path):
        os.remove(chunk.path)


def transcribe_media(
    path: str,
    service: WhisperService,
    config: PipelineConfig,
    mime_type: Optional[str] = None,
) -> Iterator[ProgressEvent]:
    """Run the whole pipeline for one file, yielding progress events.

    Errors propagate to the caller (see ``progress.report``); the last event
    of a successful run carries the merged transcript.
    """
    yield processing("initializing", "starting", "Starting transcription process...")

    if config.work_dir:
        ensure_dir(config.work_dir)

    with tempfile.TemporaryDirectory(prefix="transync-chunks-", dir=config.work_dir) as chunks_dir:
        yield processing("chunking", "analyzing", "Analyzing audio file...")
        asset = load_media(path, mime_type or guess_mime_type(path))

        if needs_chunking(asset, config):
            logger.info("File exceeds the service size limit, splitting into chunks...")
            chunks = yield from split_media(asset, chunks_dir, config)
        else:
            yield processing(
                "chunking",
                "skipped",
                "File small enough to process directly",
                chunking=100.0,
            )
            chunks = [
                Chunk(
                    index=0,
                    start_offset=0.0,
                    duration=asset.duration,
                    path=asset.path,
                    is_temporary=False,
                )
            ]

        total = len(chunks)
        per_chunk: list[list[Segment]] = []
        for chunk in chunks:
            yield processing(
                "transcribing",
                "processing",
                f"Starting transcription of chunk {chunk.index + 1}/{total}",
                chunking=100.0,
                transcription=(chunk.index / total) * 100.0,
            )
            try:
                raw = transcribe_chunk(service, chunk, config)
                segments = reconcile_result(raw)
            finally:
                _discard_chunk(chunk)
            per_chunk.append(segments)
            logger.info(f"Successfully transcribed chunk {chunk.index + 1}/{total}")
            yield processing(
                "transcribing",
                "processing",
                f"Completed chunk {chunk.index + 1}/{total}",
                chunking=100.0,
                transcription=((chunk.index + 1) / total) * 100.0,
                segments=shift_segments(segments, chunk.start_offset),
            )

        transcript = merge_chunk_transcripts(per_chunk, [c.start_offset for c in chunks])

    logger.info(f"Transcription complete. Total segments: {len(transcript)}")
    yield complete(transcript)
