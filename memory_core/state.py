from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .deck import Card

HIDDEN_FACE = '❓'


class GameStatus(str, Enum):
    NOT_STARTED = 'not_started'
    IN_PROGRESS = 'in_progress'
    WON = 'won'


@dataclass
class GameSession:
    """Mutable state of one game, owned and mutated only by GameEngine."""
    cards: List[Card]
    total_pairs: int
    generation: int = 0
    selection: List[int] = field(default_factory=list)  # at most 2 ids, in click order
    matched_pairs: int = 0
    moves: int = 0
    started: bool = False
    won: bool = False
    start_time: int = 0  # scheduler ms
    elapsed: int = 0  # ms
    score: Optional[int] = None
    completion_sent: bool = False

    def __post_init__(self) -> None:
        self._by_id: Dict[int, Card] = {c.id: c for c in self.cards}

    @property
    def status(self) -> GameStatus:
        if self.won:
            return GameStatus.WON
        if self.started:
            return GameStatus.IN_PROGRESS
        return GameStatus.NOT_STARTED

    @property
    def pending(self) -> bool:
        """True while a 2-card selection is waiting for its resolution."""
        return len(self.selection) == 2

    def card(self, card_id: int) -> Optional[Card]:
        return self._by_id.get(card_id)

    def is_revealed(self, card: Card) -> bool:
        # The selection list and the flipped flag can briefly disagree; either one reveals.
        return card.flipped or card.id in self.selection or card.matched

    def is_disabled(self, card: Card) -> bool:
        return card.matched or self.is_revealed(card)

    def face(self, card: Card) -> str:
        return card.symbol if self.is_revealed(card) else HIDDEN_FACE

    def label(self, card: Card) -> str:
        return card.name if self.is_revealed(card) else "Click to reveal"

    def pretty(self, columns: int, reveal_all: bool = False) -> str:
        """Generates a human-readable grid: `id:face` per cell, row-major."""
        width = len(str(max((c.id for c in self.cards), default=0)))
        lines: List[str] = []
        for start in range(0, len(self.cards), columns):
            row: List[str] = []
            for card in self.cards[start:start + columns]:
                face = card.symbol if reveal_all else self.face(card)
                if card.matched:
                    face = f"[{face}]"
                row.append(f"{card.id:>{width}}:{face}")
            lines.append("  ".join(row))
        return "\n".join(lines)
