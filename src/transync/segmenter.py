"""
Splitting long media into fixed-duration, transcription-ready audio chunks.
"""

import logging
import math
import os
from collections.abc import Generator

from .config import PipelineConfig
from .errors import ChunkCreationError, TransyncError
from .io_ffmpeg import decoded_length_ms, ensure_dir, extract_segment
from .models import Chunk, MediaAsset, ProgressEvent
from .progress import processing

logger = logging.getLogger("transync")


def plan_chunks(duration: float, chunk_duration: float) -> list[tuple[int, float, float]]:
    """Return (index, start, length) for ceil(duration / chunk_duration) chunks.

    The last chunk is truncated to the remaining duration, so the lengths sum
    to ``duration``.
    """
    if duration <= 0:
        return []
    count = math.ceil(duration / chunk_duration)
    plan = []
    for i in range(count):
        start = i * chunk_duration
        plan.append((i, start, min(chunk_duration, duration - start)))
    return plan


def _remove_files(paths: list[str]) -> None:
    for p in paths:
        if os.path.exists(p):
            os.remove(p)


def verify_chunk(path: str) -> None:
    """Raise ValueError unless the chunk exists, is non-empty and decodes to audio."""
    if not os.path.exists(path):
        raise ValueError("output file was not created")
    if os.path.getsize(path) == 0:
        raise ValueError("output file is empty")
    if decoded_length_ms(path) <= 0:
        raise ValueError("no decodable audio stream found")


def split_media(
    asset: MediaAsset, out_dir: str, config: PipelineConfig
) -> Generator[ProgressEvent, None, list[Chunk]]:
    """Cut ``asset`` into chunks under ``out_dir``, yielding progress as it goes.

    Returns the chunk list (use ``yield from``). On any failure every chunk
    written so far is removed and ChunkCreationError is raised.
    """
    ensure_dir(out_dir)
    plan = plan_chunks(asset.duration, config.chunk_duration)
    total = len(plan)

    yield processing(
        "chunking", "splitting", f"Splitting audio into {total} chunks...", chunking=10.0
    )

    chunks: list[Chunk] = []
    for index, start, length in plan:
        out_path = os.path.join(out_dir, f"chunk_{index}.mp3")
        try:
            extract_segment(
                asset.path,
                out_path,
                start,
                length,
                sample_rate=config.sample_rate,
                channels=config.channels,
                bitrate=config.bitrate,
            )
            verify_chunk(out_path)
        except (TransyncError, ValueError, OSError) as e:
            logger.error(f"Error creating chunk {index + 1}/{total}: {e}")
            _remove_files([c.path for c in chunks] + [out_path])
            raise ChunkCreationError(index, str(e)) from e

        chunks.append(Chunk(index=index, start_offset=start, duration=length, path=out_path))
        size_mb = os.path.getsize(out_path) / (1024 * 1024)
        logger.info(f"Created chunk {index + 1}/{total} ({size_mb:.2f} MB)")
        yield processing(
            "chunking",
            "splitting",
            f"Created chunk {index + 1}/{total}",
            chunking=10.0 + ((index + 1) / total) * 90.0,
        )

    yield processing(
        "chunking", "complete", "Audio file splitting completed", chunking=100.0
    )
    return chunks
