from __future__ import annotations

import logging
import random
from typing import Any, Callable, Dict, Optional, Sequence

from .catalog import Item, WW2_ITEMS
from .completion import CompletionRecord, broadcast
from .config import GameConfig
from .deck import Layout, build_deck, layout_for
from .scheduler import Scheduler, Timer
from .scoring import MAX_SCORE, compute_score, format_time
from .state import GameSession, GameStatus

logger = logging.getLogger(__name__)

Notifier = Callable[[CompletionRecord], None]


class GameEngine:
    """
    Owns one GameSession and is the only thing that mutates it.

    Selections are applied immediately; pair resolution and elapsed-time sampling are
    deferred through the scheduler and only run when the engine is pumped. Every deferred
    callback carries the generation it was scheduled in, so anything left over from before
    a restart is ignored.
    """

    def __init__(
        self,
        config: Optional[GameConfig] = None,
        *,
        scheduler: Optional[Scheduler] = None,
        catalog: Sequence[Item] = WW2_ITEMS,
        seed: Optional[int] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.config = config or GameConfig()
        self.layout: Layout = layout_for(self.config.difficulty)
        self.scheduler = scheduler or Scheduler()
        self._catalog = catalog
        self._rng = random.Random(seed)
        self._notifier = notifier
        self._generation = 0
        self._resolution: Optional[Timer] = None
        self._sampler: Optional[Timer] = None
        self._session = self._new_session()

    # ---------- read-only surface ----------

    @property
    def session(self) -> GameSession:
        return self._session

    @property
    def difficulty(self) -> str:
        return self.config.difficulty

    @property
    def title(self) -> str:
        return self.config.title

    @property
    def columns(self) -> int:
        return self.layout.columns

    @property
    def total_pairs(self) -> int:
        return self.layout.total_pairs

    @property
    def status(self) -> GameStatus:
        return self._session.status

    @property
    def elapsed(self) -> int:
        return self._session.elapsed

    @property
    def formatted_time(self) -> str:
        return format_time(self._session.elapsed)

    @property
    def max_score(self) -> int:
        return MAX_SCORE

    def view(self) -> Dict[str, Any]:
        """Read-only snapshot for renderers: cards in deal order plus counters and flags."""
        s = self._session
        return {
            "title": self.title,
            "difficulty": self.difficulty,
            "columns": self.columns,
            "status": s.status,
            "started": s.started,
            "won": s.won,
            "pending": s.pending,
            "moves": s.moves,
            "matched_pairs": s.matched_pairs,
            "total_pairs": s.total_pairs,
            "elapsed": s.elapsed,
            "time": self.formatted_time,
            "score": s.score,
            "max_score": self.max_score,
            "cards": [
                {
                    "id": c.id,
                    "symbol": c.symbol,
                    "name": c.name,
                    "matched": c.matched,
                    "flipped": c.flipped,
                    "revealed": s.is_revealed(c),
                    "disabled": s.is_disabled(c),
                    "face": s.face(c),
                    "label": s.label(c),
                }
                for c in s.cards
            ],
        }

    # ---------- operations ----------

    def pump(self, now: Optional[int] = None) -> int:
        """Runs every timer that is due; returns how many fired."""
        return self.scheduler.run_due(now)

    def select_card(self, card_id: int) -> None:
        """Reveals a card. Calls that break a selection rule are ignored without any state change."""
        s = self._session
        if s.won or s.pending or card_id in s.selection:
            return
        card = s.card(card_id)
        if card is None or card.matched:
            return

        if not s.started:
            self._start()

        card.flipped = True
        s.selection.append(card_id)
        if len(s.selection) < 2:
            return

        s.moves += 1
        first, second = (s.card(i) for i in s.selection)
        if first.symbol == second.symbol:
            self._resolution = self.scheduler.call_later(
                self.config.match_delay_ms, self._resolve_match, s.generation, first.id, second.id
            )
        else:
            self._resolution = self.scheduler.call_later(
                self.config.mismatch_delay_ms, self._resolve_mismatch, s.generation, first.id, second.id
            )

    def restart(self) -> None:
        """Throws away the current session and deals a fresh one."""
        self._cancel_timers()
        self._generation += 1
        self._session = self._new_session()
        logger.info("restarted %s game (generation %d)", self.difficulty, self._generation)

    # ---------- internals ----------

    def _new_session(self) -> GameSession:
        cards = build_deck(self.config.difficulty, self._catalog, self._rng)
        return GameSession(cards=cards, total_pairs=self.layout.total_pairs, generation=self._generation)

    def _cancel_timers(self) -> None:
        for timer in (self._resolution, self._sampler):
            if timer is not None:
                timer.cancel()
        self._resolution = None
        self._sampler = None

    def _is_stale(self, generation: int) -> bool:
        if generation != self._generation:
            logger.debug("dropping callback from generation %d (current %d)", generation, self._generation)
            return True
        return False

    def _start(self) -> None:
        s = self._session
        s.started = True
        s.start_time = self.scheduler.now()
        s.elapsed = 0
        self._sampler = self.scheduler.call_every(self.config.sample_interval_ms, self._sample, s.generation)
        logger.info("%s game started", self.difficulty)

    def _sample(self, generation: int) -> None:
        s = self._session
        if self._is_stale(generation) or s.won:
            return
        s.elapsed = self.scheduler.now() - s.start_time

    def _resolve_match(self, generation: int, first_id: int, second_id: int) -> None:
        if self._is_stale(generation):
            return
        s = self._session
        for card_id in (first_id, second_id):
            card = s.card(card_id)
            card.matched = True
            card.flipped = False
        s.matched_pairs += 1
        s.selection.clear()
        self._resolution = None
        logger.debug("matched pair %d/%d", s.matched_pairs, s.total_pairs)
        if s.matched_pairs == s.total_pairs:
            self._win()

    def _resolve_mismatch(self, generation: int, first_id: int, second_id: int) -> None:
        if self._is_stale(generation):
            return
        s = self._session
        for card_id in (first_id, second_id):
            s.card(card_id).flipped = False
        s.selection.clear()
        self._resolution = None
        logger.debug("mismatch on cards %d and %d", first_id, second_id)

    def _win(self) -> None:
        s = self._session
        if s.won:
            return
        s.elapsed = self.scheduler.now() - s.start_time
        s.won = True
        if self._sampler is not None:
            self._sampler.cancel()
            self._sampler = None
        s.score = compute_score(s.moves)
        logger.info("%s game won: %d moves, %s, score %d", self.difficulty, s.moves, format_time(s.elapsed), s.score)
        if not s.completion_sent:
            s.completion_sent = True
            self._notify(CompletionRecord(
                score=s.score,
                time_spent=s.elapsed,
                moves=s.moves,
                difficulty=self.difficulty,
            ))

    def _notify(self, record: CompletionRecord) -> None:
        if self._notifier is None:
            broadcast(self, record)
            return
        try:
            self._notifier(record)
        except Exception:
            logger.exception("completion notifier failed")
