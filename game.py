from __future__ import annotations

from dataclasses import replace

# Facade module that re-exports the memory game core.
# Used by the Flask app and tests; single-responsibility modules live under memory_core/*.

# Prefer the package-relative import, then the top-level package.
try:
    from .memory_core.catalog import Item, WW2_ITEMS  # type: ignore
    from .memory_core.completion import (  # type: ignore
        BLOCK_ID,
        COMPLETION_TYPE,
        CompletionRecord,
        block_completed,
        broadcast,
    )
    from .memory_core.config import DEFAULT_TITLE, GameConfig  # type: ignore
    from .memory_core.deck import (  # type: ignore
        DEFAULT_DIFFICULTY,
        DIFFICULTIES,
        LAYOUTS,
        Card,
        Layout,
        build_deck,
        layout_for,
    )
    from .memory_core.engine import GameEngine  # type: ignore
    from .memory_core.errors import ConfigurationError  # type: ignore
    from .memory_core.scheduler import ManualClock, Scheduler, Timer, monotonic_ms  # type: ignore
    from .memory_core.scoring import MAX_SCORE, MIN_SCORE, compute_score, format_time  # type: ignore
    from .memory_core.state import HIDDEN_FACE, GameSession, GameStatus  # type: ignore
except ImportError:
    from memory_core.catalog import Item, WW2_ITEMS  # type: ignore
    from memory_core.completion import (  # type: ignore
        BLOCK_ID,
        COMPLETION_TYPE,
        CompletionRecord,
        block_completed,
        broadcast,
    )
    from memory_core.config import DEFAULT_TITLE, GameConfig  # type: ignore
    from memory_core.deck import (  # type: ignore
        DEFAULT_DIFFICULTY,
        DIFFICULTIES,
        LAYOUTS,
        Card,
        Layout,
        build_deck,
        layout_for,
    )
    from memory_core.engine import GameEngine  # type: ignore
    from memory_core.errors import ConfigurationError  # type: ignore
    from memory_core.scheduler import ManualClock, Scheduler, Timer, monotonic_ms  # type: ignore
    from memory_core.scoring import MAX_SCORE, MIN_SCORE, compute_score, format_time  # type: ignore
    from memory_core.state import HIDDEN_FACE, GameSession, GameStatus  # type: ignore


def new_engine(
    difficulty: str = DEFAULT_DIFFICULTY,
    title: str = DEFAULT_TITLE,
    seed: int | None = None,
    scheduler: Scheduler | None = None,
) -> GameEngine:
    """Builds an engine with delays taken from the environment and the given tier/title."""
    config = replace(GameConfig.from_env(), title=title, difficulty=difficulty)
    return GameEngine(config, scheduler=scheduler, seed=seed)


def main() -> None:
    # CLI driver delegated to memory_core.cli
    try:
        from .memory_core.cli import main as _main  # type: ignore
    except ImportError:
        from memory_core.cli import main as _main  # type: ignore
    _main()


if __name__ == '__main__':
    main()
