"""
Speech-to-text with the OpenAI Whisper API.

Responses are normalized into RawTranscriptionResult right here; no other
module looks at SDK objects or their field-name variants.
"""

import json
import logging
import os
from typing import Any, Optional

import httpx
import openai
from openai import OpenAI

from .config import PipelineConfig
from .errors import ConfigError, TranscriptionServiceError
from .models import Chunk, RawSegment, RawTranscriptionResult, RawTranslationResult, RawWord

logger = logging.getLogger("transync")


def make_openai_client(api_key: Optional[str] = None, timeout: float = 600.0) -> OpenAI:
    """Create the Whisper client. Retries are left to the caller's policy."""
    key = api_key or os.getenv("OPENAI_API_KEY")
    if not key:
        raise ConfigError("OPENAI_API_KEY is not set. Put it in .env or environment.")
    return OpenAI(
        api_key=key,
        timeout=httpx.Timeout(timeout, connect=10.0),
        max_retries=0,
    )


def _get(obj: Any, name: str, default: Any = None) -> Any:
    if isinstance(obj, dict):
        return obj.get(name, default)
    return getattr(obj, name, default)


def _first(obj: Any, *names: str) -> Any:
    for name in names:
        value = _get(obj, name)
        if value is not None:
            return value
    return None


def _word_from_response(w: Any) -> RawWord:
    """Accept both {word, start, end} and {text, timestamp, duration} shapes."""
    text = str(_first(w, "text", "word") or "").strip()
    start = _first(w, "start", "timestamp")
    start = float(start) if start is not None else 0.0
    end = _get(w, "end")
    if end is None:
        end = start + float(_get(w, "duration") or 0.0)
    return RawWord(text=text, start=start, end=max(start, float(end)))


def _segment_from_response(seg: Any) -> RawSegment:
    words = _get(seg, "words") or []
    return RawSegment(
        start=float(_get(seg, "start", 0.0)),
        end=float(_get(seg, "end", 0.0)),
        text=str(_get(seg, "text", "") or ""),
        words=[_word_from_response(w) for w in words],
        language=_get(seg, "language"),
    )


def _segments_from_response(resp: Any, fallback_duration: Optional[float]) -> list[RawSegment]:
    segs = _get(resp, "segments")
    if segs:
        return [_segment_from_response(s) for s in segs]
    text = str(_get(resp, "text", "") or "").strip()
    if text and fallback_duration:
        logger.warning("No segments in response; using the full text as one segment.")
        return [RawSegment(start=0.0, end=float(fallback_duration), text=text)]
    return []


def parse_transcription(resp: Any, fallback_duration: Optional[float] = None) -> RawTranscriptionResult:
    """Normalize a verbose_json transcription response."""
    duration = _get(resp, "duration")
    duration = float(duration) if duration is not None else fallback_duration
    return RawTranscriptionResult(
        language=_get(resp, "language"),
        text=str(_get(resp, "text", "") or "").strip(),
        segments=_segments_from_response(resp, duration),
        words=[_word_from_response(w) for w in (_get(resp, "words") or [])],
        duration=duration,
    )


def parse_translation(resp: Any, fallback_duration: Optional[float] = None) -> RawTranslationResult:
    """Normalize a verbose_json translation response."""
    return RawTranslationResult(
        text=str(_get(resp, "text", "") or "").strip(),
        segments=_segments_from_response(resp, fallback_duration),
        language=str(_get(resp, "language") or "english"),
    )


class WhisperService:
    """The two remote operations the pipeline needs: transcribe and translate."""

    def __init__(self, client: OpenAI, model: str = "whisper-1") -> None:
        self.client = client
        self.model = model

    def transcribe(
        self,
        audio_path: str,
        language: Optional[str] = None,
        word_timestamps: bool = True,
        duration: Optional[float] = None,
    ) -> RawTranscriptionResult:
        kwargs: dict = {
            "model": self.model,
            "response_format": "verbose_json",
        }
        if word_timestamps:
            kwargs["timestamp_granularities"] = ["word", "segment"]
        if language:
            kwargs["language"] = language
        with open(audio_path, "rb") as f:
            logger.info(f"Transcribing {os.path.basename(audio_path)} with {self.model} (language: {language or 'auto'}) …")
            resp = self.client.audio.transcriptions.create(file=f, **kwargs)
        return parse_transcription(resp, fallback_duration=duration)

    def translate(self, audio_path: str, duration: Optional[float] = None) -> RawTranslationResult:
        with open(audio_path, "rb") as f:
            logger.info(f"Translating {os.path.basename(audio_path)} to English with {self.model} …")
            resp = self.client.audio.translations.create(
                model=self.model,
                file=f,
                response_format="verbose_json",
            )
        return parse_translation(resp, fallback_duration=duration)


def needs_translation(result: RawTranscriptionResult, languages: tuple[str, ...]) -> bool:
    """Whether the detected language is one that gets an English translation pass."""
    tags = {t.lower() for t in languages}
    detected = [result.language]
    if result.segments:
        detected.append(result.segments[0].language)
    return any(d and d.lower() in tags for d in detected)


def _error_details(exc: BaseException) -> Optional[str]:
    body = getattr(exc, "body", None)
    if body is None:
        return None
    if isinstance(body, (dict, list)):
        return json.dumps(body, ensure_ascii=False)
    return str(body)


def transcribe_chunk(service: WhisperService, chunk: Chunk, config: PipelineConfig) -> RawTranscriptionResult:
    """Transcribe one chunk and, for Chinese audio, attach its English translation.

    Service failures are raised as TranscriptionServiceError and never retried
    here.
    """
    try:
        result = service.transcribe(
            chunk.path,
            language=config.language_hint,
            word_timestamps=True,
            duration=chunk.duration,
        )
        logger.info(f"Chunk {chunk.index + 1}: language detected: {result.language or 'unknown'}")
        if needs_translation(result, config.translation_languages):
            result.translation = service.translate(chunk.path, duration=chunk.duration)
    except openai.OpenAIError as e:
        raise TranscriptionServiceError(chunk.index, str(e), details=_error_details(e)) from e
    except OSError as e:
        raise TranscriptionServiceError(chunk.index, f"could not read audio: {e}") from e
    except (TypeError, ValueError) as e:
        raise TranscriptionServiceError(chunk.index, f"malformed response: {e}") from e
    return result
