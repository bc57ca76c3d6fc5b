from __future__ import annotations

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class Comparison:
    distance: int
    max_len: int
    similarity: float


def _clamp(x: float, lo: float = 0.0, hi: float = 100.0) -> float:
    return max(lo, min(hi, x))


def levenshtein_distance(a: str, b: str) -> int:
    """
    Edit distance over code points (insert/delete/substitute, cost 1 each).
    Row j of the (len(b)+1) x (len(a)+1) table only needs row j-1, so two rows are kept.
    """
    if a == b:
        return 0
    if not a:
        return len(b)
    if not b:
        return len(a)

    prev: List[int] = list(range(len(a) + 1))
    for j in range(1, len(b) + 1):
        bj = b[j - 1]
        cur = [j] + [0] * len(a)
        for i in range(1, len(a) + 1):
            cost = 0 if a[i - 1] == bj else 1
            cur[i] = min(
                cur[i - 1] + 1,  # deletion
                prev[i] + 1,  # insertion
                prev[i - 1] + cost,  # substitution
            )
        prev = cur
    return prev[len(a)]


def compare(reference: str, candidate: str) -> Comparison:
    max_len = max(len(reference), len(candidate))
    if max_len == 0:
        # nothing to confirm an utterance against
        return Comparison(distance=0, max_len=0, similarity=0.0)
    dist = levenshtein_distance(reference, candidate)
    sim = _clamp(((max_len - dist) / max_len) * 100.0)
    return Comparison(distance=dist, max_len=max_len, similarity=sim)


def similarity(reference: str, candidate: str) -> float:
    """Length-normalized similarity in [0, 100]; 0 when both strings are empty."""
    return compare(reference, candidate).similarity
