"""
Input boundary: accept or reject uploaded media and build a MediaAsset.
"""

import logging
import mimetypes
import os
from typing import Optional

from .config import PipelineConfig
from .errors import FormatError
from .io_ffmpeg import probe_duration
from .models import MediaAsset

logger = logging.getLogger("transync")

ALLOWED_MIMES = {
    "audio/m4a",
    "audio/mp4",
    "audio/mp3",
    "audio/mpeg",
    "audio/wav",
    "video/mp4",
    "audio/x-m4a",  # common M4A MIME type
    "audio/aac",  # AAC audio, often in an M4A container
    "audio/x-mp4",
    "audio/MP4A-LATM",
    "audio/mpeg4-generic",
    "audio/x-mpeg",
    "audio/x-wav",
}
ALLOWED_EXTS = {".m4a", ".mp3", ".mp4", ".wav", ".aac"}


def guess_mime_type(path: str) -> str:
    """Guess the MIME type of a media file from its name."""
    mime, _ = mimetypes.guess_type(path)
    return mime or "application/octet-stream"


def media_class(mime_type: str, path: str) -> str:
    """'video' for containers that may carry a video stream, else 'audio'."""
    if mime_type.startswith("video/"):
        return "video"
    if not mime_type.startswith("audio/") and os.path.splitext(path)[1].lower() == ".mp4":
        return "video"
    return "audio"


def validate_upload(path: str, config: PipelineConfig, mime_type: Optional[str] = None) -> str:
    """Check format and size of an upload and return its MIME type.

    The MIME type is accepted first; the file extension is the fallback,
    mirroring how browsers report M4A/AAC uploads inconsistently.
    """
    if not path or not os.path.isfile(path):
        raise FormatError("No file uploaded")

    mime = mime_type or guess_mime_type(path)
    size = os.path.getsize(path)
    logger.info(f"Uploaded file MIME type: {mime}")
    logger.info(f"File size: {size / (1024 * 1024):.2f} MB")

    if mime not in ALLOWED_MIMES:
        ext = os.path.splitext(path)[1].lower()
        if ext not in ALLOWED_EXTS:
            raise FormatError(
                "Unsupported file format. Supported formats: MP3, M4A, WAV, MP4. "
                f"(Got MIME: {mime}, Extension: {ext or 'none'})"
            )
        logger.info(f"Allowing file based on extension: {ext}")

    if size > config.max_upload_size:
        raise FormatError(
            f"File is too large: maximum upload size is {config.max_upload_size // (1024 * 1024)}MB"
        )
    return mime


def load_media(path: str, mime_type: str) -> MediaAsset:
    """Probe an accepted file into a MediaAsset."""
    duration = probe_duration(path)
    asset = MediaAsset(
        path=path,
        size_bytes=os.path.getsize(path),
        duration=duration,
        media_class=media_class(mime_type, path),
        mime_type=mime_type,
    )
    logger.info(f"Media {path}: {asset.media_class}, {duration:.2f}s, {asset.size_bytes} bytes")
    return asset


def needs_chunking(asset: MediaAsset, config: PipelineConfig) -> bool:
    """Whether the asset exceeds the service's single-call payload limit."""
    return asset.size_bytes > config.service_size_limit
