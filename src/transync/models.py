"""
Data models for the transcription pipeline.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass(frozen=True)
class MediaAsset:
    """An accepted input file with its probed duration."""

    path: str
    size_bytes: int
    duration: float  # seconds
    media_class: str  # "audio" or "video"
    mime_type: str = "application/octet-stream"


@dataclass(frozen=True)
class Chunk:
    """A bounded-duration slice of a MediaAsset, ready for transcription."""

    index: int
    start_offset: float  # seconds into the original asset
    duration: float  # seconds
    path: str
    is_temporary: bool = True


@dataclass
class RawWord:
    """A word token as returned by the speech-to-text service (chunk-local time)."""

    text: str
    start: float
    end: float


@dataclass
class RawSegment:
    """A segment as returned by the speech-to-text service (chunk-local time)."""

    start: float
    end: float
    text: str
    words: list[RawWord] = field(default_factory=list)
    language: Optional[str] = None


@dataclass
class RawTranslationResult:
    """English translation of one chunk, segment level only."""

    text: str
    segments: list[RawSegment] = field(default_factory=list)
    language: str = "english"


@dataclass
class RawTranscriptionResult:
    """Normalized service response for one chunk."""

    language: Optional[str]
    text: str
    segments: list[RawSegment] = field(default_factory=list)
    words: list[RawWord] = field(default_factory=list)
    duration: Optional[float] = None
    translation: Optional[RawTranslationResult] = None


@dataclass
class Word:
    """A timed word of the final transcript."""

    text: str
    start: float  # seconds
    end: float  # seconds

    def to_dict(self) -> dict:
        return {"text": self.text, "start": self.start, "end": self.end}

    @classmethod
    def from_dict(cls, data: dict) -> "Word":
        return cls(text=str(data["text"]), start=float(data["start"]), end=float(data["end"]))


@dataclass
class Segment:
    """A phrase-level unit of the final transcript."""

    start_time: float  # seconds
    end_time: float  # seconds
    text: str
    words: list[Word] = field(default_factory=list)
    is_non_native_audio: bool = False
    translation: Optional[str] = None

    def to_dict(self) -> dict:
        """Serialize with the keys the playback UI reads."""
        out = {
            "startTime": self.start_time,
            "endTime": self.end_time,
            "text": self.text,
            "words": [w.to_dict() for w in self.words],
            "isNonNativeAudio": self.is_non_native_audio,
        }
        if self.translation:
            out["translation"] = self.translation
        return out

    @classmethod
    def from_dict(cls, data: dict) -> "Segment":
        return cls(
            start_time=float(data["startTime"]),
            end_time=float(data["endTime"]),
            text=str(data.get("text", "")),
            words=[Word.from_dict(w) for w in data.get("words") or []],
            is_non_native_audio=bool(data.get("isNonNativeAudio", False)),
            translation=data.get("translation") or None,
        )


@dataclass
class ProgressEvent:
    """One record of the progress stream."""

    status: str  # "processing", "complete" or "error"
    stage: str
    phase: str
    message: str
    chunking_progress: float = 0.0  # 0-100
    transcription_progress: float = 0.0  # 0-100
    segments: Optional[list[Segment]] = None
    error: Optional[str] = None
    details: Optional[str] = None

    @property
    def is_terminal(self) -> bool:
        return self.status in ("complete", "error")

    def to_dict(self) -> dict:
        out = {
            "status": self.status,
            "stage": self.stage,
            "phase": self.phase,
            "message": self.message,
            "chunkingProgress": self.chunking_progress,
            "transcriptionProgress": self.transcription_progress,
        }
        if self.segments is not None:
            out["segments"] = [s.to_dict() for s in self.segments]
        if self.error is not None:
            out["error"] = self.error
        if self.details is not None:
            out["details"] = self.details
        return out
