"""
Score a single transcript against the configured target phrases.

Prints key=value lines for the best match; --all adds one line per phrase.
Config comes from --config (JSON) or the environment (see twisterscore.config).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

_THIS_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(_THIS_DIR))

from twisterscore.config import ConfigError, load_config_file, load_config_from_env  # noqa: E402
from twisterscore.scorer import Scorer  # noqa: E402
from twisterscore.transcripts import TranscriptReadError, load_transcript  # noqa: E402


def parse_args(argv=None) -> argparse.Namespace:
    ap = argparse.ArgumentParser()
    src = ap.add_mutually_exclusive_group(required=True)
    src.add_argument("--text", help="Transcript text")
    src.add_argument("--file", help="Path to a .txt or .srt transcript")
    ap.add_argument("--config", help="Path to a JSON scoring config")
    ap.add_argument("--all", action="store_true", help="Also print the score for every phrase")
    return ap.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        cfg = load_config_file(Path(args.config)) if args.config else load_config_from_env()
    except ConfigError as e:
        print(f"[config] ERROR: {e}")
        return 2

    if args.file:
        try:
            transcript = load_transcript(Path(args.file))
        except TranscriptReadError as e:
            print(f"[transcript] ERROR: {e}")
            return 1
    else:
        transcript = args.text

    scorer = Scorer(cfg)
    out = scorer.score_transcript(transcript).to_dict()
    out["expected"] = scorer.expected_display()
    out["pass_threshold"] = scorer.pass_threshold
    for k in sorted(out.keys()):
        print(f"{k}={out[k]}")

    if args.all:
        for i, r in enumerate(scorer.score_all(transcript)):
            print(f"phrase[{i}]={r.matched_phrase} score={r.score} similarity={r.similarity:.2f} status={r.status}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
