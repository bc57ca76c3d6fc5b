"""
Run batch transcript scoring.

Env:
- TRANSCRIPTS_DIR (default: transcripts)
- PUBLIC_DIR (default: public)
- MAX_NEW_FILES (default: 0 = no cap)
- SCORING_CONFIG (optional path to a JSON config; otherwise config comes from env)
- TARGET_PHRASES, REPEAT_COUNT, PASS_THRESHOLD, PUNCTUATION_STRIP, SCORING_DEBUG
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

_THIS_DIR = Path(__file__).resolve().parent
sys.path.insert(0, str(_THIS_DIR))

from twisterscore.config import ConfigError, load_config_file, load_config_from_env  # noqa: E402
from twisterscore.pipeline import run_pipeline  # noqa: E402


def main() -> int:
    transcripts_dir = Path(os.getenv("TRANSCRIPTS_DIR", "transcripts")).resolve()
    public_dir = Path(os.getenv("PUBLIC_DIR", "public")).resolve()
    try:
        max_new_files = int(os.getenv("MAX_NEW_FILES", "0"))
    except ValueError:
        print(f"[config] ERROR: MAX_NEW_FILES must be an integer, got {os.getenv('MAX_NEW_FILES')!r}")
        return 2

    if not transcripts_dir.exists():
        raise SystemExit(f"Missing transcripts_dir: {transcripts_dir}")

    config_path = (os.getenv("SCORING_CONFIG") or "").strip()
    try:
        cfg = load_config_file(Path(config_path)) if config_path else load_config_from_env()
    except ConfigError as e:
        print(f"[config] ERROR: {e}")
        return 2

    run_pipeline(
        transcripts_dir=transcripts_dir,
        public_dir=public_dir,
        cfg=cfg,
        max_new_files=max_new_files,
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
