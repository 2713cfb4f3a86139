from __future__ import annotations

import logging
import random
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .catalog import Item, WW2_ITEMS
from .errors import ConfigurationError

logger = logging.getLogger(__name__)

DIFFICULTIES = ('easy', 'medium', 'hard')
DEFAULT_DIFFICULTY = 'medium'


@dataclass(frozen=True)
class Layout:
    """Grid shape for a difficulty tier; every cell holds one card."""
    columns: int
    rows: int = 4

    @property
    def total_pairs(self) -> int:
        return (self.columns * self.rows) // 2


# easy and medium intentionally share the 4x4 grid (8 pairs).
LAYOUTS: Dict[str, Layout] = {
    'easy': Layout(columns=4),
    'medium': Layout(columns=4),
    'hard': Layout(columns=6),
}


@dataclass
class Card:
    """A single card in play. `matched` never reverts once set during a game."""
    id: int
    symbol: str
    name: str
    matched: bool = False
    flipped: bool = False


def layout_for(difficulty: str) -> Layout:
    """Returns the grid layout for a difficulty tier."""
    try:
        return LAYOUTS[difficulty]
    except KeyError:
        raise ConfigurationError(
            f"unknown difficulty {difficulty!r}; expected one of {', '.join(DIFFICULTIES)}"
        ) from None


def build_deck(
    difficulty: str,
    catalog: Sequence[Item] = WW2_ITEMS,
    rng: Optional[random.Random] = None,
) -> List[Card]:
    """Creates a shuffled deck holding exactly two cards for each of the first `total_pairs` catalog items."""
    total_pairs = layout_for(difficulty).total_pairs
    if len(catalog) < total_pairs:
        raise ConfigurationError(
            f"catalog has {len(catalog)} items but difficulty {difficulty!r} needs {total_pairs} pairs"
        )
    rng = rng or random.Random()
    deck: List[Card] = []
    for item in catalog[:total_pairs]:
        # Both cards of a pair share the item but get independent ids.
        deck.append(Card(id=len(deck), symbol=item.symbol, name=item.name))
        deck.append(Card(id=len(deck), symbol=item.symbol, name=item.name))
    rng.shuffle(deck)
    logger.debug("built %s deck: %d cards", difficulty, len(deck))
    return deck
