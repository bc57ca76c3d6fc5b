from __future__ import annotations

from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import Any, Dict, List, Literal, Optional, Tuple

from .config import ScoringConfig
from .normalize import normalize_text
from .similarity import compare

Status = Literal["PASS", "FAIL"]


@dataclass(frozen=True)
class ScoringResult:
    score: int
    status: Status
    similarity: float
    matched_phrase: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "score": self.score,
            "status": self.status,
            "similarity": self.similarity,
            "matched_phrase": self.matched_phrase,
        }


NO_PHRASE_RESULT = ScoringResult(score=0, status="FAIL", similarity=0.0, matched_phrase=None)


def round_score(similarity: float) -> int:
    """
    Half away from zero on the exact float value: 66.5 -> 67, 69.5 -> 70.
    Python's round() would give 66 and 70 (banker's rounding).
    """
    return int(Decimal(similarity).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def status_for(score: int, pass_threshold: int) -> Status:
    return "PASS" if score >= pass_threshold else "FAIL"


class Scorer:
    """
    Scores a transcript against every configured target phrase and keeps the best match.
    Holds only the frozen config; safe to share across threads.
    """

    def __init__(self, cfg: ScoringConfig):
        self.cfg = cfg

    @property
    def target_phrases(self) -> Tuple[str, ...]:
        return self.cfg.target_phrases

    @property
    def pass_threshold(self) -> int:
        return self.cfg.pass_threshold

    @property
    def repeat_count(self) -> int:
        return self.cfg.repeat_count

    def expected_reference(self, phrase: str) -> str:
        if self.cfg.repeat_count > 1:
            return " ".join([phrase] * self.cfg.repeat_count)
        return phrase

    def repeated_phrase(self, index: int) -> str:
        phrases = self.cfg.target_phrases
        if index < 0 or index >= len(phrases):
            raise IndexError(f"Invalid target phrase index: {index}")
        return self.expected_reference(phrases[index])

    def expected_display(self) -> str:
        if self.cfg.repeat_count > 1:
            return ", ".join(f"{p} ({self.cfg.repeat_count} times)" for p in self.cfg.target_phrases)
        return ", ".join(self.cfg.target_phrases)

    def _score_phrase(self, phrase: str, normalized_transcript: str) -> ScoringResult:
        reference = normalize_text(self.expected_reference(phrase), self.cfg.punctuation)
        cmp = compare(reference, normalized_transcript)
        score = round_score(cmp.similarity)
        result = ScoringResult(
            score=score,
            status=status_for(score, self.cfg.pass_threshold),
            similarity=cmp.similarity,
            matched_phrase=phrase,
        )
        if self.cfg.debug:
            print(
                f"[score] phrase={phrase!r} reference={reference!r} transcript={normalized_transcript!r} "
                f"distance={cmp.distance} max_len={cmp.max_len} similarity={cmp.similarity:.4f} "
                f"score={score} status={result.status}"
            )
        return result

    def score_all(self, transcript: Optional[str]) -> List[ScoringResult]:
        normalized = normalize_text(transcript or "", self.cfg.punctuation)
        if self.cfg.debug:
            print(f"[score] input={transcript!r} normalized={normalized!r}")
        return [self._score_phrase(p, normalized) for p in self.cfg.target_phrases]

    def score_transcript(self, transcript: Optional[str]) -> ScoringResult:
        candidates = self.score_all(transcript)
        if not candidates:
            return NO_PHRASE_RESULT

        best = candidates[0]
        for cand in candidates[1:]:
            # strictly greater: earliest configured phrase wins ties
            if cand.score > best.score:
                best = cand

        if self.cfg.debug:
            print(f"[score] best phrase={best.matched_phrase!r} score={best.score} status={best.status}")
        return best
