"""
Transync - time-aligned transcripts for long audio and video files.

A sequential pipeline for:
- Validating uploaded media and probing its duration
- Splitting oversized media into fixed-duration audio chunks
- Transcribing each chunk with OpenAI Whisper (plus English translation for Chinese audio)
- Reconciling word timings against segment text
- Merging chunk transcripts into one time-ordered transcript
- Streaming structured progress events to the caller
"""

__version__ = "0.1.0"
