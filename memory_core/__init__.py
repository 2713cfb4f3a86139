"""
WW2 memory game core Python package.

This package holds the pure game logic behind the Flask app so that it can be
driven from tests, the CLI or the web layer alike.
Modules:
- catalog.py: Item and the WW2 item catalog
- deck.py: Card, Layout, build_deck
- state.py: GameSession, GameStatus
- scheduler.py: Scheduler, Timer, ManualClock
- engine.py: GameEngine (the state machine)
- scoring.py: score and time formatting helpers
- completion.py: CompletionRecord and the block_completed signal
- config.py: GameConfig
"""
