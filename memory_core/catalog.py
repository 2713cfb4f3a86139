from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class Item:
    """A matchable category: the symbol shown on the card face and its display name."""
    symbol: str
    name: str


# Order matters: a game uses the first `total_pairs` entries.
WW2_ITEMS: Tuple[Item, ...] = (
    Item('✈️', 'Fighter Plane'),
    Item('🚁', 'Helicopter'),
    Item('🚢', 'Battleship'),
    Item('⚓', 'Naval Anchor'),
    Item('🪖', 'Military Helmet'),
    Item('🎖️', 'Military Medal'),
    Item('💣', 'Bomb'),
    Item('🔫', 'Rifle'),
    Item('🗺️', 'Battle Map'),
    Item('📻', 'Radio'),
    Item('🚂', 'Military Train'),
    Item('⭐', 'Military Star'),
)
