from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import pandas as pd

from .config import ScoringConfig, config_as_dict, config_fingerprint
from .normalize import normalize_text
from .scorer import Scorer, round_score
from .transcripts import TranscriptReadError, list_transcript_files, load_transcript

PIPELINE_VERSION = "2026-10-19-levenshtein-best-match"
OUTPUT_VERSION = 1

FULL_JSON = "scores.full.json"
MINIMAL_JSON = "scores.json"
SCORES_CSV = "scores.csv"

CSV_COLUMNS = [
    "file_id",
    "transcript_path",
    "score",
    "status",
    "similarity",
    "matched_phrase",
    "transcript_empty",
    "transcript_char_count",
    "config_fingerprint",
    "processed_at_utc",
]


def _rel_path(path: Path, root: Path) -> str:
    return str(path.relative_to(root)).replace("\\", "/")


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).replace(microsecond=0).isoformat()


def _file_id_from_path(path: Path, root: Path) -> str:
    # suffix and subdirectory kept: call1.txt, call1.srt and day2/call1.txt are distinct
    return _rel_path(path, root)


def _load_existing_full(path: Path) -> Dict[str, Any]:
    if not path.exists():
        return {"version": OUTPUT_VERSION, "generated_at_utc": None, "config": {}, "items": [], "skipped": []}
    data = json.loads(path.read_text(encoding="utf-8"))
    data.setdefault("items", [])
    data.setdefault("skipped", [])
    return data


def _items_by_id(items: List[Dict[str, Any]]) -> Dict[str, Dict[str, Any]]:
    """Collapse duplicates by file_id, latest processed_at_utc wins."""
    out: Dict[str, Dict[str, Any]] = {}
    for it in items:
        fid = it.get("file_id")
        if not isinstance(fid, str) or not fid:
            continue
        prev = out.get(fid)
        if prev is None or str(it.get("processed_at_utc") or "") >= str(prev.get("processed_at_utc") or ""):
            out[fid] = it
    return out


def score_one(path: Path, transcripts_root: Path, scorer: Scorer, fingerprint: str) -> Dict[str, Any]:
    """
    Score one transcript file. Empty transcripts are scored like any other
    (no "no audio" short-circuit) and flagged so reviewers can spot them.
    """
    transcript = load_transcript(path)
    result = scorer.score_transcript(transcript)
    normalized = normalize_text(transcript, scorer.cfg.punctuation)

    return {
        "file_id": _file_id_from_path(path, transcripts_root),
        "transcript_path": _rel_path(path, transcripts_root),
        "transcript": transcript,
        "score": result.score,
        "status": result.status,
        "similarity": round(result.similarity, 6),
        "matched_phrase": result.matched_phrase,
        "transcript_empty": not normalized,
        "transcript_char_count": len(normalized),
        "config_fingerprint": fingerprint,
        "processed_at_utc": _utc_now_iso(),
        "pipeline_version": PIPELINE_VERSION,
    }


def _round_one_decimal(x: float) -> float:
    # same as the dashboard: Math.round(x * 10) / 10
    return round_score(x * 10.0) / 10.0


def summarize(items: List[Dict[str, Any]]) -> Dict[str, Any]:
    """Dashboard numbers: pass rate and average score, one decimal."""
    if not items:
        return {"total": 0, "pass_count": 0, "fail_count": 0, "pass_rate": 0.0, "avg_score": 0.0}
    df = pd.DataFrame(items, columns=["score", "status"])
    total = int(len(df))
    pass_count = int((df["status"] == "PASS").sum())
    scores = pd.to_numeric(df["score"], errors="coerce").dropna()
    avg = float(scores.mean()) if len(scores) else 0.0
    return {
        "total": total,
        "pass_count": pass_count,
        "fail_count": total - pass_count,
        "pass_rate": _round_one_decimal(pass_count / total * 100.0),
        "avg_score": _round_one_decimal(avg),
    }


def _write_full_json(public_dir: Path, cfg: ScoringConfig, fingerprint: str, items: List[Dict[str, Any]], skipped: List[Dict[str, Any]]) -> None:
    payload = {
        "version": OUTPUT_VERSION,
        "generated_at_utc": _utc_now_iso(),
        "pipeline_version": PIPELINE_VERSION,
        "config": config_as_dict(cfg),
        "config_fingerprint": fingerprint,
        "summary": summarize(items),
        "items": items,
        "skipped": skipped,
    }
    (public_dir / FULL_JSON).write_text(json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8")


def _write_scores_json(public_dir: Path, items: List[Dict[str, Any]]) -> None:
    minimal = [
        {
            "file_id": it["file_id"],
            "transcript_path": it["transcript_path"],
            "score": it["score"],
            "status": it["status"],
            "matched_phrase": it.get("matched_phrase"),
        }
        for it in items
    ]
    (public_dir / MINIMAL_JSON).write_text(json.dumps(minimal, ensure_ascii=False, indent=2), encoding="utf-8")


def _write_scores_csv(public_dir: Path, items: List[Dict[str, Any]]) -> None:
    df = pd.DataFrame(items, columns=CSV_COLUMNS)
    df.to_csv(public_dir / SCORES_CSV, index=False, encoding="utf-8")


def _plan(files: List[Path], root: Path, items_by_id: Dict[str, Dict[str, Any]], fingerprint: str) -> Tuple[List[Path], List[Path]]:
    stale: List[Path] = []
    new: List[Path] = []
    for p in files:
        existing = items_by_id.get(_file_id_from_path(p, root))
        if existing is None:
            new.append(p)
        elif existing.get("config_fingerprint") != fingerprint:
            stale.append(p)
    return stale, new


def run_pipeline(transcripts_dir: Path, public_dir: Path, cfg: ScoringConfig, max_new_files: int = 0) -> Dict[str, Any]:
    scorer = Scorer(cfg)
    fingerprint = config_fingerprint(cfg)
    public_dir.mkdir(parents=True, exist_ok=True)

    print(f"[pipeline] version={PIPELINE_VERSION} config={fingerprint}")
    print(f"[pipeline] phrases={len(cfg.target_phrases)} repeat={cfg.repeat_count} threshold={cfg.pass_threshold} max_new_files={max_new_files}")
    if not cfg.target_phrases:
        print("[pipeline] WARN: no target phrases configured, every transcript will FAIL")

    full_path = public_dir / FULL_JSON
    existing_full = _load_existing_full(full_path)
    items_by_id = _items_by_id(list(existing_full.get("items", [])))
    skipped: List[Dict[str, Any]] = list(existing_full.get("skipped", []))

    files = list_transcript_files(transcripts_dir)
    stale, new = _plan(files, transcripts_dir, items_by_id, fingerprint)

    # rescore results from an older config before taking on new files
    candidates = stale + new
    if max_new_files > 0:
        candidates = candidates[:max_new_files]

    for p in candidates:
        fid = _file_id_from_path(p, transcripts_dir)
        print(f"[progress] scoring file_id='{fid}'")
        try:
            item: Optional[Dict[str, Any]] = score_one(p, transcripts_dir, scorer, fingerprint)
        except TranscriptReadError as e:
            print(f"[transcript] SKIP: {p.name} => {e}")
            item = None

        skipped = [s for s in skipped if s.get("file_id") != fid]
        if item is not None:
            items_by_id[fid] = item
        else:
            skipped.append(
                {
                    "file_id": fid,
                    "transcript_path": _rel_path(p, transcripts_dir),
                    "reason": "unreadable_transcript",
                    "at_utc": _utc_now_iso(),
                }
            )

    items_sorted = sorted(items_by_id.values(), key=lambda it: (it.get("transcript_path", ""), it.get("file_id", "")))

    _write_full_json(public_dir, cfg, fingerprint, items_sorted, skipped)
    _write_scores_json(public_dir, items_sorted)
    _write_scores_csv(public_dir, items_sorted)

    summary = summarize(items_sorted)
    print(f"[pipeline] total={summary['total']} pass_rate={summary['pass_rate']} avg_score={summary['avg_score']}")
    return summary
