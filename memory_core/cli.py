from __future__ import annotations

import argparse
import json
import logging
import time
from dataclasses import replace

from .completion import block_completed
from .config import GameConfig
from .deck import DIFFICULTIES
from .engine import GameEngine
from .state import GameStatus


def _wait_for_resolution(engine: GameEngine) -> None:
    # The terminal has no event loop; sleep until the pending pair resolves.
    while engine.session.pending:
        due = engine.scheduler.next_due()
        if due is None:
            return
        delay = due - engine.scheduler.now()
        if delay > 0:
            time.sleep(delay / 1000.0)
        engine.pump()


def main() -> None:
    env = GameConfig.from_env()
    parser = argparse.ArgumentParser(description='WW2 memory game in the terminal')
    parser.add_argument('--difficulty', choices=DIFFICULTIES, default=env.difficulty, help='Difficulty tier')
    parser.add_argument('--title', default=env.title, help='Title shown above the grid')
    parser.add_argument('--seed', type=int, default=None, help='RNG seed for the deal')
    parser.add_argument('--reveal', action='store_true', help='Print the solved grid before playing')
    parser.add_argument('--verbose', action='store_true', help='Log engine events')
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING, format='%(levelname)s %(name)s: %(message)s')

    engine = GameEngine(replace(env, title=args.title, difficulty=args.difficulty), seed=args.seed)

    def on_completed(sender, record=None, **_extra):
        print('Completion message:', json.dumps(record.to_dict(), ensure_ascii=False))

    block_completed.connect(on_completed, sender=engine)

    print(f"{engine.title} ({engine.difficulty}): match pairs of World War 2 military items")
    print("Enter a card id to reveal it, 'r' for a new game, 'q' to quit.")
    if args.reveal:
        print(engine.session.pretty(engine.columns, reveal_all=True))
        print()

    while True:
        engine.pump()
        s = engine.session
        print(engine.session.pretty(engine.columns))
        print(f"Time: {engine.formatted_time}  Moves: {s.moves}  Pairs: {s.matched_pairs}/{s.total_pairs}")
        if engine.status == GameStatus.WON:
            print(f"VICTORY! Mission Accomplished in {s.moves} moves! Score: {s.score} points")
            text = input("Play again? [y/N]: ").strip().lower()
            if text != 'y':
                return
            engine.restart()
            continue

        text = input('Card: ').strip().lower()
        if text == 'q':
            return
        if text == 'r':
            engine.restart()
            continue
        try:
            card_id = int(text)
        except ValueError:
            print('Could not parse. Try again.')
            continue
        engine.select_card(card_id)
        if engine.session.pending:
            print(engine.session.pretty(engine.columns))
            _wait_for_resolution(engine)


if __name__ == '__main__':
    main()
