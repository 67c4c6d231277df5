"""
Pipeline configuration: policy constants with environment overrides.
"""

import os
from dataclasses import dataclass
from typing import Optional

from .errors import ConfigError

MB = 1024 * 1024

OPENAI_SIZE_LIMIT = 25 * MB  # single-call payload limit of the Whisper API
MAX_UPLOAD_SIZE = 500 * MB
CHUNK_DURATION = 300.0  # 5 minutes per chunk


@dataclass(frozen=True)
class PipelineConfig:
    """Settings shared by every stage of one transcription run."""

    chunk_duration: float = CHUNK_DURATION
    service_size_limit: int = OPENAI_SIZE_LIMIT
    max_upload_size: int = MAX_UPLOAD_SIZE
    sample_rate: int = 16000
    channels: int = 1
    bitrate: str = "64k"
    model: str = "whisper-1"
    language_hint: Optional[str] = None
    # Detected languages that trigger the English translation pass
    translation_languages: tuple[str, ...] = ("chinese", "zh")
    work_dir: Optional[str] = None
    request_timeout: float = 600.0

    def __post_init__(self) -> None:
        if self.chunk_duration <= 0:
            raise ConfigError(f"Chunk duration must be positive (got {self.chunk_duration})")
        if self.service_size_limit < 0 or self.max_upload_size <= 0:
            raise ConfigError("Size limits must be positive")

    @classmethod
    def from_env(cls, **overrides) -> "PipelineConfig":
        """Build a config from TRANSYNC_* environment variables.

        Keyword overrides whose value is None are ignored so CLI flags can be
        passed through unconditionally.
        """
        env: dict = {}
        try:
            if os.getenv("TRANSYNC_CHUNK_DURATION"):
                env["chunk_duration"] = float(os.environ["TRANSYNC_CHUNK_DURATION"])
            if os.getenv("TRANSYNC_SIZE_LIMIT_MB"):
                env["service_size_limit"] = int(float(os.environ["TRANSYNC_SIZE_LIMIT_MB"]) * MB)
            if os.getenv("TRANSYNC_MAX_UPLOAD_MB"):
                env["max_upload_size"] = int(float(os.environ["TRANSYNC_MAX_UPLOAD_MB"]) * MB)
            if os.getenv("TRANSYNC_REQUEST_TIMEOUT"):
                env["request_timeout"] = float(os.environ["TRANSYNC_REQUEST_TIMEOUT"])
        except ValueError as e:
            raise ConfigError(f"Invalid numeric setting in environment: {e}") from e

        if os.getenv("TRANSYNC_WHISPER_MODEL"):
            env["model"] = os.environ["TRANSYNC_WHISPER_MODEL"]
        if os.getenv("TRANSYNC_LANGUAGE"):
            env["language_hint"] = os.environ["TRANSYNC_LANGUAGE"]
        if os.getenv("TRANSYNC_WORKDIR"):
            env["work_dir"] = os.environ["TRANSYNC_WORKDIR"]
        if os.getenv("TRANSYNC_TRANSLATE_LANGUAGES"):
            tags = os.environ["TRANSYNC_TRANSLATE_LANGUAGES"].split(",")
            env["translation_languages"] = tuple(t.strip().lower() for t in tags if t.strip())

        env.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**env)

