from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .deck import DEFAULT_DIFFICULTY, layout_for
from .errors import ConfigurationError

DEFAULT_TITLE = "WW2 Memory Game"


@dataclass(frozen=True)
class GameConfig:
    """Settings for one engine. Delays are in milliseconds."""
    title: str = DEFAULT_TITLE
    difficulty: str = DEFAULT_DIFFICULTY
    match_delay_ms: int = 1000
    mismatch_delay_ms: int = 1500
    sample_interval_ms: int = 100

    def __post_init__(self) -> None:
        layout_for(self.difficulty)  # validates the tier
        for name in ('match_delay_ms', 'mismatch_delay_ms'):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be >= 0")
        if self.sample_interval_ms <= 0:
            raise ConfigurationError("sample_interval_ms must be > 0")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> 'GameConfig':
        env = os.environ if environ is None else environ

        def _int(name: str, default: int) -> int:
            raw = env.get(name)
            if raw is None or raw.strip() == "":
                return default
            try:
                return int(raw)
            except ValueError:
                raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None

        return cls(
            title=env.get("MEMORY_GAME_TITLE") or DEFAULT_TITLE,
            difficulty=(env.get("MEMORY_GAME_DIFFICULTY") or DEFAULT_DIFFICULTY).strip().lower(),
            match_delay_ms=_int("MEMORY_GAME_MATCH_DELAY_MS", 1000),
            mismatch_delay_ms=_int("MEMORY_GAME_MISMATCH_DELAY_MS", 1500),
            sample_interval_ms=_int("MEMORY_GAME_SAMPLE_MS", 100),
        )
