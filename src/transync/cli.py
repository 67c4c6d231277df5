"""
Command-line interface for the transcription pipeline.
"""

import argparse
import io
import json
import logging
import os
import sys
from collections.abc import Iterable
from typing import Optional

from dotenv import load_dotenv
from tqdm import tqdm

from .config import PipelineConfig
from .errors import ClientDisconnected, TransyncError, error_response
from .media import validate_upload
from .models import ProgressEvent
from .pipeline import transcribe_media
from .progress import EVENT_DELIMITER, report, write_events
from .srt_utils import format_timestamp, write_srt
from .stt import WhisperService, make_openai_client
from .transcript import load_transcript, save_transcript, search_segments, segment_at, word_at

logger = logging.getLogger("transync")


def setup_logging(verbose: bool = False) -> None:
    """Setup logging configuration (stderr; stdout carries the event stream)."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    ap = argparse.ArgumentParser(description="Time-aligned transcripts for long audio/video")
    ap.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    sub = ap.add_subparsers(dest="command", required=True)

    tr = sub.add_parser("transcribe", help="Transcribe a media file, streaming progress")
    tr.add_argument("input", help="Audio/video file (mp3, m4a, wav, aac, mp4)")
    tr.add_argument("-o", "--output", default=None, help="Write the final transcript JSON here")
    tr.add_argument("--srt", default=None, help="Also write the transcript as SRT")
    tr.add_argument(
        "--progress",
        choices=["events", "bar", "none"],
        default="events",
        help="events: JSON records on stdout; bar: progress bars on stderr; none: silent",
    )
    tr.add_argument(
        "--delimiter",
        default=EVENT_DELIMITER,
        help="Separator written after each JSON event record",
    )
    tr.add_argument("--chunk-duration", type=float, default=None, help="Seconds per chunk")
    tr.add_argument(
        "--language",
        default=None,
        help="Language hint for Whisper (e.g. 'en', 'zh'). Auto-detected if not specified.",
    )
    tr.add_argument("--model", default=None, help="Whisper model (default: whisper-1)")
    tr.add_argument("--mime", default=None, help="Override the MIME type guessed from the file name")
    tr.add_argument("--workdir", default=None, help="Parent directory for temporary chunk files")

    se = sub.add_parser("search", help="Find transcript segments containing a term")
    se.add_argument("transcript")
    se.add_argument("term")

    at = sub.add_parser("at", help="Show the segment and word playing at a time")
    at.add_argument("transcript")
    at.add_argument("seconds", type=float)

    srt = sub.add_parser("srt", help="Export a transcript JSON as SRT")
    srt.add_argument("transcript")
    srt.add_argument("output")
    srt.add_argument("--no-translation", action="store_true", help="Omit English translation lines")

    return ap.parse_args(argv)


def render_progress_bars(events: Iterable[ProgressEvent]) -> Optional[ProgressEvent]:
    """Consume the event stream, drawing chunking/transcription bars with tqdm."""
    last: Optional[ProgressEvent] = None
    bar_fmt = "{desc}: {percentage:3.0f}%|{bar}| {postfix}"
    with tqdm(total=100, desc="Chunking", bar_format=bar_fmt, file=sys.stderr) as chunk_bar, tqdm(
        total=100, desc="Transcribing", bar_format=bar_fmt, file=sys.stderr
    ) as tr_bar:
        for event in events:
            for bar, pct in ((chunk_bar, event.chunking_progress), (tr_bar, event.transcription_progress)):
                bar.n = min(100.0, max(0.0, pct))
                bar.set_postfix_str(event.message, refresh=False)
                bar.refresh()
            last = event
    return last


def decode_delimiter(raw: str) -> str:
    """Expand backslash escapes such as \\n in a command-line delimiter, keeping other characters as typed."""
    return raw.encode("latin-1", "backslashreplace").decode("unicode_escape")


def _silence_stdout() -> None:
    """Point stdout at devnull so the exit-time flush does not hit the closed pipe again."""
    try:
        fd = sys.stdout.fileno()
    except (AttributeError, io.UnsupportedOperation):
        sys.stdout = open(os.devnull, "w", encoding="utf-8")
        return
    devnull = os.open(os.devnull, os.O_WRONLY)
    os.dup2(devnull, fd)
    os.close(devnull)


def _print_error(exc: TransyncError) -> int:
    print(json.dumps(error_response(exc), ensure_ascii=False))
    return exc.code


def cmd_transcribe(args: argparse.Namespace) -> int:
    try:
        config = PipelineConfig.from_env(
            chunk_duration=args.chunk_duration,
            language_hint=args.language,
            model=args.model,
            work_dir=args.workdir,
        )
        mime = validate_upload(args.input, config, mime_type=args.mime)
        client = make_openai_client(timeout=config.request_timeout)
    except TransyncError as e:
        logger.error(str(e))
        return _print_error(e)

    service = WhisperService(client, model=config.model)
    events = report(transcribe_media(args.input, service, config, mime_type=mime))

    try:
        if args.progress == "events":
            delimiter = decode_delimiter(args.delimiter)
            final = write_events(events, sys.stdout, delimiter=delimiter)
        elif args.progress == "bar":
            final = render_progress_bars(events)
        else:
            final = None
            for final in events:
                pass
    except ClientDisconnected as e:
        logger.error(str(e))
        _silence_stdout()
        return e.code
    except TransyncError as e:
        logger.error(str(e))
        return e.code

    if final is None or final.status != "complete":
        if final is not None and args.progress != "events":
            logger.error(final.message)
        return 1

    segments = final.segments or []
    if args.output:
        save_transcript(segments, args.output)
    if args.srt:
        write_srt(segments, args.srt)
    return 0


def cmd_search(args: argparse.Namespace) -> int:
    segments = load_transcript(args.transcript)
    matches = search_segments(segments, args.term)
    for s in matches:
        print(f"[{format_timestamp(s.start_time)} --> {format_timestamp(s.end_time)}] {s.text}")
        if s.translation:
            print(f"    {s.translation}")
    logger.info(f"{len(matches)} of {len(segments)} segments match {args.term!r}")
    return 0


def cmd_at(args: argparse.Namespace) -> int:
    segments = load_transcript(args.transcript)
    seg = segment_at(segments, args.seconds)
    if seg is None:
        print(json.dumps({"segment": None, "word": None}))
        return 0
    word = word_at(seg, args.seconds)
    print(
        json.dumps(
            {"segment": seg.to_dict(), "word": word.to_dict() if word else None},
            ensure_ascii=False,
            indent=2,
        )
    )
    return 0


def cmd_srt(args: argparse.Namespace) -> int:
    segments = load_transcript(args.transcript)
    write_srt(segments, args.output, include_translation=not args.no_translation)
    return 0


COMMANDS = {
    "transcribe": cmd_transcribe,
    "search": cmd_search,
    "at": cmd_at,
    "srt": cmd_srt,
}


def main(argv: Optional[list[str]] = None) -> int:
    """Main CLI entry point."""
    load_dotenv()
    args = parse_args(argv)
    setup_logging(args.verbose)
    return COMMANDS[args.command](args)


if __name__ == "__main__":
    raise SystemExit(main())
