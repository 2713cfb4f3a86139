from __future__ import annotations

MAX_SCORE = 1000
MIN_SCORE = 100
MOVE_PENALTY = 10


def compute_score(moves: int) -> int:
    """Linear penalty per move, floored so any clear still scores."""
    return max(MAX_SCORE - moves * MOVE_PENALTY, MIN_SCORE)


def format_time(ms: int) -> str:
    """Formats milliseconds as m:ss."""
    seconds = max(0, int(ms)) // 1000
    minutes = seconds // 60
    return f"{minutes}:{seconds % 60:02d}"
