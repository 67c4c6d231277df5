"""
Audio probing and re-encoding utilities using ffmpeg/ffprobe.
"""

import logging
import math
import subprocess
from pathlib import Path

from pydub import AudioSegment
from pydub.exceptions import CouldntDecodeError

from .errors import ProbeError, ToolError

logger = logging.getLogger("transync")


def run(cmd: list[str], *, check: bool = True) -> str:
    """Run a shell command and return stdout."""
    logger.debug("Running: %s", " ".join(map(str, cmd)))
    try:
        proc = subprocess.run(
            cmd, stdout=subprocess.PIPE, stderr=subprocess.STDOUT, text=True, check=False
        )
    except OSError as e:
        raise ToolError(f"Could not run {cmd[0]}: {e}") from e
    if proc.returncode != 0 and check:
        logger.error("Command failed with code %d: %s", proc.returncode, proc.stdout)
        raise ToolError(f"{cmd[0]} failed with code {proc.returncode}", output=proc.stdout)
    return proc.stdout


def ensure_dir(path: str) -> None:
    """Ensure directory exists."""
    if path:
        Path(path).mkdir(parents=True, exist_ok=True)


def probe_duration(path: str) -> float:
    """Return the media duration in seconds, or raise ProbeError."""
    try:
        out = run(
            [
                "ffprobe",
                "-v",
                "error",
                "-show_entries",
                "format=duration",
                "-of",
                "default=noprint_wrappers=1:nokey=1",
                path,
            ]
        )
    except ToolError as e:
        raise ProbeError(f"Could not read duration of {path}: {e}") from e
    try:
        seconds = float(out.strip())
    except ValueError:
        raise ProbeError(f"No parseable duration for {path} (ffprobe said {out.strip()!r})") from None
    if math.isnan(seconds) or math.isinf(seconds) or seconds <= 0:
        raise ProbeError(f"No usable duration for {path} ({seconds})")
    return seconds


def extract_segment(
    input_path: str,
    out_path: str,
    start: float,
    duration: float,
    *,
    sample_rate: int = 16000,
    channels: int = 1,
    bitrate: str = "64k",
) -> str:
    """Cut [start, start + duration) out of a media file as mono MP3, dropping video."""
    ensure_dir(str(Path(out_path).parent))
    cmd = [
        "ffmpeg",
        "-y",
        "-i",
        input_path,
        "-ss",
        f"{start:.6f}",
        "-t",
        f"{duration:.6f}",
        "-vn",
        "-ac",
        str(channels),
        "-acodec",
        "libmp3lame",
        "-ar",
        str(sample_rate),
        "-b:a",
        bitrate,
        out_path,
        "-loglevel",
        "error",
    ]
    output = run(cmd)
    if output.strip():
        logger.debug("ffmpeg output for %s: %s", out_path, output.strip())
    return out_path


def decoded_length_ms(path: str) -> int:
    """Decode an audio file and return its length in ms; 0 when nothing decodes."""
    try:
        audio = AudioSegment.from_file(path)
    except (CouldntDecodeError, IndexError, OSError) as e:
        logger.warning(f"Could not decode {path}: {e}")
        return 0
    return len(audio)
