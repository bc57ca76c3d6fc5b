from __future__ import annotations

from pathlib import Path
from typing import List

import srt

TRANSCRIPT_SUFFIXES = (".txt", ".srt")


class TranscriptReadError(Exception):
    """Raised when a transcript file cannot be read or decoded."""


def _normalize_cue(text: str) -> str:
    return " ".join(text.replace("\n", " ").split()).strip()


def _srt_text(raw: str) -> str:
    cues = sorted(srt.parse(raw), key=lambda c: (c.start, c.end))
    parts = [_normalize_cue(c.content) for c in cues]
    return " ".join(p for p in parts if p)


def load_transcript(path: Path) -> str:
    """
    Transcript text from a speech-to-text output file.
    .srt cues are joined in time order; anything else is read as plain UTF-8 text.
    """
    try:
        raw = path.read_text(encoding="utf-8-sig")
    except (OSError, UnicodeDecodeError) as e:
        raise TranscriptReadError(f"cannot read {path}: {e}") from e

    if path.suffix.lower() == ".srt":
        try:
            return _srt_text(raw)
        except srt.SRTParseError as e:
            raise TranscriptReadError(f"bad srt {path}: {e}") from e
    return raw.strip()


def list_transcript_files(transcripts_dir: Path) -> List[Path]:
    files = [p for p in transcripts_dir.rglob("*") if p.is_file() and p.suffix.lower() in TRANSCRIPT_SUFFIXES]
    return sorted(files, key=lambda p: str(p).lower())
