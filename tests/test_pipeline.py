import json

import pandas as pd

from twisterscore.config import ScoringConfig
from twisterscore.pipeline import FULL_JSON, MINIMAL_JSON, SCORES_CSV, run_pipeline, summarize


def _cfg(**kw):
    base = dict(target_phrases=("abc",), repeat_count=1, pass_threshold=70, punctuation=frozenset(",."))
    base.update(kw)
    return ScoringConfig(**base)


def _write_transcripts(root):
    root.mkdir()
    (root / "a.txt").write_text("abc", encoding="utf-8")
    (root / "b.txt").write_text("abd", encoding="utf-8")
    (root / "e.txt").write_text(" ,. ", encoding="utf-8")


def test_scores_and_outputs(tmp_path, capsys):
    src = tmp_path / "transcripts"
    out = tmp_path / "public"
    _write_transcripts(src)

    summary = run_pipeline(src, out, _cfg())
    assert summary == {"total": 3, "pass_count": 1, "fail_count": 2, "pass_rate": 33.3, "avg_score": 55.7}

    full = json.loads((out / FULL_JSON).read_text(encoding="utf-8"))
    by_id = {it["file_id"]: it for it in full["items"]}
    assert by_id["a.txt"]["status"] == "PASS"
    assert by_id["b.txt"]["score"] == 67
    assert by_id["e.txt"]["score"] == 0
    assert by_id["e.txt"]["transcript_empty"] is True
    assert by_id["e.txt"]["matched_phrase"] == "abc"
    assert full["config"]["target_phrases"] == ["abc"]
    assert full["summary"]["total"] == 3

    minimal = json.loads((out / MINIMAL_JSON).read_text(encoding="utf-8"))
    assert [m["file_id"] for m in minimal] == ["a.txt", "b.txt", "e.txt"]

    df = pd.read_csv(out / SCORES_CSV)
    assert list(df["score"]) == [100, 67, 0]

    assert "[progress] scoring file_id='a.txt'" in capsys.readouterr().out


def test_second_run_is_incremental(tmp_path, capsys):
    src = tmp_path / "transcripts"
    out = tmp_path / "public"
    _write_transcripts(src)
    run_pipeline(src, out, _cfg())
    capsys.readouterr()

    (src / "f.txt").write_text("abc", encoding="utf-8")
    summary = run_pipeline(src, out, _cfg())
    printed = capsys.readouterr().out
    assert "file_id='f.txt'" in printed
    assert "file_id='a.txt'" not in printed
    assert summary["total"] == 4


def test_config_change_rescores(tmp_path):
    src = tmp_path / "transcripts"
    out = tmp_path / "public"
    _write_transcripts(src)
    run_pipeline(src, out, _cfg())

    summary = run_pipeline(src, out, _cfg(pass_threshold=60))
    assert summary["pass_count"] == 2
    full = json.loads((out / FULL_JSON).read_text(encoding="utf-8"))
    assert {it["config_fingerprint"] for it in full["items"]} == {full["config_fingerprint"]}


def test_max_new_files_caps_a_run(tmp_path):
    src = tmp_path / "transcripts"
    out = tmp_path / "public"
    _write_transcripts(src)
    summary = run_pipeline(src, out, _cfg(), max_new_files=1)
    assert summary["total"] == 1


def test_unreadable_transcript_is_skipped_once(tmp_path, capsys):
    src = tmp_path / "transcripts"
    out = tmp_path / "public"
    _write_transcripts(src)
    (src / "bad.txt").write_bytes(b"\xff\xfa")

    run_pipeline(src, out, _cfg())
    run_pipeline(src, out, _cfg())
    assert "[transcript] SKIP: bad.txt" in capsys.readouterr().out

    full = json.loads((out / FULL_JSON).read_text(encoding="utf-8"))
    assert [s["file_id"] for s in full["skipped"]] == ["bad.txt"]
    assert full["skipped"][0]["reason"] == "unreadable_transcript"
    assert full["summary"]["total"] == 3


def test_no_phrases_fails_everything(tmp_path, capsys):
    src = tmp_path / "transcripts"
    _write_transcripts(src)
    summary = run_pipeline(src, tmp_path / "public", _cfg(target_phrases=()))
    assert summary["pass_count"] == 0
    assert "no target phrases configured" in capsys.readouterr().out


def test_summarize_empty():
    assert summarize([]) == {"total": 0, "pass_count": 0, "fail_count": 0, "pass_rate": 0.0, "avg_score": 0.0}


def test_same_stem_in_other_folder_or_format_kept_apart(tmp_path, capsys):
    src = tmp_path / "transcripts"
    out = tmp_path / "public"
    (src / "day2").mkdir(parents=True)
    (src / "call1.txt").write_text("abc", encoding="utf-8")
    (src / "day2" / "call1.txt").write_text("xyz", encoding="utf-8")
    (src / "call1.srt").write_text("1\n00:00:00,000 --> 00:00:01,000\nabd\n\n", encoding="utf-8")

    summary = run_pipeline(src, out, _cfg())
    assert summary["total"] == 3

    full = json.loads((out / FULL_JSON).read_text(encoding="utf-8"))
    by_id = {it["file_id"]: it["score"] for it in full["items"]}
    assert by_id == {"call1.txt": 100, "call1.srt": 67, "day2/call1.txt": 0}

    capsys.readouterr()
    assert run_pipeline(src, out, _cfg())["total"] == 3
    assert "[progress]" not in capsys.readouterr().out


def test_summary_rounds_half_up():
    items = [{"score": 1, "status": "PASS"}] + [{"score": 0, "status": "FAIL"}] * 3
    summary = summarize(items)
    # mean 0.25: round(0.25, 1) would give 0.2
    assert summary["avg_score"] == 0.3
    assert summary["pass_rate"] == 25.0
