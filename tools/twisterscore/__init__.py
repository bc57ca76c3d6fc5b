"""
twisterscore

Transcript scoring for the tongue-twister call-in contest:
- Normalize reference and transcript (configurable punctuation class, whitespace collapse)
- Levenshtein distance -> length-normalized similarity 0..100
- Best match over all configured phrases, each repeated N times
- PASS/FAIL against an integer threshold
"""
