from __future__ import annotations

import hashlib
import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, FrozenSet, Iterable, Mapping, Optional, Tuple

# Bengali danda, Latin sentence punctuation, nukta, hasanta, visarga
DEFAULT_PUNCTUATION: FrozenSet[str] = frozenset("।,.!?়্ঃ")

_CONFIG_KEYS = frozenset({"target_phrases", "repeat_count", "pass_threshold", "punctuation", "debug"})


class ConfigError(ValueError):
    """Raised when scoring configuration is missing or out of range."""


def _require_int(name: str, value: Any, lo: int, hi: Optional[int] = None) -> int:
    # bool is an int subclass; "True" is not a usable threshold
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigError(f"{name} must be an integer, got {value!r}")
    if value < lo or (hi is not None and value > hi):
        bound = f"[{lo}, {hi}]" if hi is not None else f">= {lo}"
        raise ConfigError(f"{name} must be {bound}, got {value}")
    return value


@dataclass(frozen=True)
class ScoringConfig:
    """
    Scoring configuration, fixed for the life of the process.

    Notes:
    - target_phrases order is the tie-break order for equal scores
    - repeat_count > 1 means the caller must say each phrase that many times
    - punctuation lists single characters removed before comparison; it must not
      contain letters that carry meaning in the target script
    """

    target_phrases: Tuple[str, ...] = ()
    repeat_count: int = 3
    pass_threshold: int = 70
    punctuation: FrozenSet[str] = DEFAULT_PUNCTUATION
    debug: bool = False

    def __post_init__(self) -> None:
        phrases = self.target_phrases
        if isinstance(phrases, str):
            raise ConfigError("target_phrases must be a sequence of strings, not a single string")
        phrases = tuple(phrases)
        for i, p in enumerate(phrases):
            if not isinstance(p, str):
                raise ConfigError(f"target_phrases[{i}] must be a string, got {type(p).__name__}")
            if not p.strip():
                raise ConfigError(f"target_phrases[{i}] is blank")

        punct = frozenset(self.punctuation)
        for ch in sorted(punct, key=repr):
            if not isinstance(ch, str) or len(ch) != 1:
                raise ConfigError(f"punctuation entries must be single characters, got {ch!r}")
            if ch.isspace():
                raise ConfigError("punctuation must not contain whitespace")

        _require_int("repeat_count", self.repeat_count, 1)
        _require_int("pass_threshold", self.pass_threshold, 0, 100)
        if not isinstance(self.debug, bool):
            raise ConfigError(f"debug must be a bool, got {self.debug!r}")

        object.__setattr__(self, "target_phrases", phrases)
        object.__setattr__(self, "punctuation", punct)


def config_as_dict(cfg: ScoringConfig) -> Dict[str, Any]:
    return {
        "target_phrases": list(cfg.target_phrases),
        "repeat_count": cfg.repeat_count,
        "pass_threshold": cfg.pass_threshold,
        "punctuation": "".join(sorted(cfg.punctuation)),
        "debug": cfg.debug,
    }


def config_fingerprint(cfg: ScoringConfig) -> str:
    """
    Stable short hash of everything that affects a score.
    debug is left out: it changes output noise, not results.
    """
    payload = config_as_dict(cfg)
    payload.pop("debug")
    raw = json.dumps(payload, ensure_ascii=False, sort_keys=True)
    return hashlib.sha1(raw.encode("utf-8")).hexdigest()[:16]


def _split_phrases(raw: str) -> Tuple[str, ...]:
    return tuple(p.strip() for p in raw.split("|") if p.strip())


def _env_int(environ: Mapping[str, str], key: str, default: int) -> int:
    raw = (environ.get(key) or "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigError(f"{key} must be an integer, got {raw!r}") from None


def load_config_from_env(environ: Optional[Mapping[str, str]] = None) -> ScoringConfig:
    """
    Env:
    - TARGET_PHRASES: phrases separated by "|"
    - REPEAT_COUNT (default: 3)
    - PASS_THRESHOLD (default: 70)
    - PUNCTUATION_STRIP: characters to strip (default: Bengali set; empty string strips nothing)
    - SCORING_DEBUG (default: 0)
    """
    env = os.environ if environ is None else environ

    punct_raw = env.get("PUNCTUATION_STRIP")
    punctuation: Iterable[str] = DEFAULT_PUNCTUATION if punct_raw is None else punct_raw

    return ScoringConfig(
        target_phrases=_split_phrases(env.get("TARGET_PHRASES", "") or ""),
        repeat_count=_env_int(env, "REPEAT_COUNT", 3),
        pass_threshold=_env_int(env, "PASS_THRESHOLD", 70),
        punctuation=frozenset(punctuation),
        debug=(env.get("SCORING_DEBUG", "0") or "0").strip() == "1",
    )


def load_config_file(path: Path) -> ScoringConfig:
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8-sig"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"cannot read config file {path}: {e}") from e
    if not isinstance(data, dict):
        raise ConfigError(f"config file {path} must contain a JSON object")

    unknown = sorted(set(data) - _CONFIG_KEYS)
    if unknown:
        raise ConfigError(f"unknown config keys in {path}: {', '.join(unknown)}")

    kwargs: Dict[str, Any] = {}
    if "target_phrases" in data:
        phrases = data["target_phrases"]
        if not isinstance(phrases, list):
            raise ConfigError("target_phrases must be a JSON list")
        kwargs["target_phrases"] = tuple(phrases)
    for key in ("repeat_count", "pass_threshold"):
        if key in data:
            kwargs[key] = data[key]
    if "punctuation" in data:
        punct = data["punctuation"]
        if not isinstance(punct, (str, list)):
            raise ConfigError("punctuation must be a string or a list of characters")
        kwargs["punctuation"] = frozenset(punct)
    if "debug" in data:
        if not isinstance(data["debug"], bool):
            raise ConfigError(f"debug must be true or false, got {data['debug']!r}")
        kwargs["debug"] = data["debug"]

    return ScoringConfig(**kwargs)
