"""
Error taxonomy for the transcription pipeline.

Every error carries a process exit code used by the CLI.
"""

from typing import Optional


class TransyncError(RuntimeError):
    code = 1

    def __init__(self, message: str, code: Optional[int] = None) -> None:
        super().__init__(message)
        if code is not None:
            self.code = code


class ConfigError(TransyncError):
    code = 2


class FormatError(TransyncError):
    """Unsupported or oversized input."""

    code = 2


class ToolError(TransyncError):
    """An ffmpeg/ffprobe invocation failed."""

    code = 3

    def __init__(self, message: str, output: str = "") -> None:
        super().__init__(message)
        self.output = output


class ProbeError(TransyncError):
    code = 3


class ChunkCreationError(TransyncError):
    code = 4

    def __init__(self, index: int, cause: str) -> None:
        super().__init__(f"Error creating chunk {index + 1}: {cause}")
        self.index = index
        self.cause = cause


class TranscriptionServiceError(TransyncError):
    code = 5

    def __init__(self, chunk_index: int, cause: str, details: Optional[str] = None) -> None:
        super().__init__(f"Transcription of chunk {chunk_index + 1} failed: {cause}")
        self.chunk_index = chunk_index
        self.cause = cause
        self.details = details


class AlignmentError(TransyncError):
    """Degenerate segment text; absorbed by the reconciler's fallback."""

    code = 6


class MergeError(TransyncError):
    code = 6


class ClientDisconnected(TransyncError):
    code = 7


def error_response(exc: BaseException) -> dict:
    """Single structured error body for failures before streaming starts."""
    details = getattr(exc, "details", None) or getattr(exc, "output", None)
    message = str(exc) if isinstance(exc, (ConfigError, FormatError)) else f"Transcription failed: {exc}"
    return {
        "error": message,
        "details": details or "No additional details available",
    }
