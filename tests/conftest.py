from __future__ import annotations

import sys
from pathlib import Path

import pytest

# tools/ holds the package and the runnable scripts
_TOOLS_DIR = Path(__file__).resolve().parent.parent / "tools"
if str(_TOOLS_DIR) not in sys.path:
    sys.path.insert(0, str(_TOOLS_DIR))

from twisterscore.config import ScoringConfig  # noqa: E402
from twisterscore.scorer import Scorer  # noqa: E402


@pytest.fixture
def make_scorer():
    def _make(phrases, repeat_count=1, pass_threshold=70, punctuation=",.", debug=False):
        cfg = ScoringConfig(
            target_phrases=tuple(phrases),
            repeat_count=repeat_count,
            pass_threshold=pass_threshold,
            punctuation=frozenset(punctuation),
            debug=debug,
        )
        return Scorer(cfg)

    return _make
