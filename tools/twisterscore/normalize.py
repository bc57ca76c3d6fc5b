from __future__ import annotations

from functools import lru_cache
from typing import Dict, FrozenSet, Iterable


@lru_cache(maxsize=32)
def _strip_table(chars: FrozenSet[str]) -> Dict[int, None]:
    return {ord(ch): None for ch in chars}


def normalize_text(text: str, strip_chars: Iterable[str]) -> str:
    """
    Comparison form of a reference or transcript:
    - drop every character in strip_chars
    - collapse whitespace runs to one space, trim
    Nothing outside strip_chars is removed, so script letters and combining
    marks not listed survive untouched.
    """
    if not text:
        return ""
    t = text.translate(_strip_table(frozenset(strip_chars)))
    return " ".join(t.split())
