from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict

from blinker import Namespace

from .scoring import MAX_SCORE

logger = logging.getLogger(__name__)

COMPLETION_TYPE = 'BLOCK_COMPLETION'
BLOCK_ID = 'ww2-memory-game'

_signals = Namespace()

# Emitted once per won game.
# Sender: the GameEngine; extra kwarg `record`: CompletionRecord
block_completed = _signals.signal('block_completed')


@dataclass(frozen=True)
class CompletionRecord:
    """One-shot message telling the hosting page that a game was completed."""
    score: int
    time_spent: int
    moves: int
    difficulty: str
    max_score: int = MAX_SCORE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": COMPLETION_TYPE,
            "blockId": BLOCK_ID,
            "completed": True,
            "score": int(self.score),
            "maxScore": int(self.max_score),
            "timeSpent": int(self.time_spent),
            "data": {
                "moves": int(self.moves),
                "timeElapsed": int(self.time_spent),
                "difficulty": self.difficulty,
            },
        }


def broadcast(sender: Any, record: CompletionRecord) -> None:
    """Fire-and-forget delivery to every block_completed receiver; failures are only logged."""
    try:
        block_completed.send(sender, record=record)
    except Exception:
        logger.exception("completion receiver failed for %s", BLOCK_ID)
