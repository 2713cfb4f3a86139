import unittest
from collections import defaultdict

from game import (
    GameConfig,
    GameEngine,
    GameStatus,
    ManualClock,
    Scheduler,
)


def _pairs(engine):
    by_symbol = defaultdict(list)
    for card in engine.session.cards:
        by_symbol[card.symbol].append(card.id)
    return list(by_symbol.values())


def _snapshot(engine):
    s = engine.session
    return (
        [(c.id, c.matched, c.flipped) for c in s.cards],
        list(s.selection),
        s.moves,
        s.matched_pairs,
        s.started,
        s.won,
    )


class TestGameEngine(unittest.TestCase):
    def setUp(self):
        self.clock = ManualClock()
        self.records = []
        self.engine = self._make_engine('medium')

    def _make_engine(self, difficulty):
        return GameEngine(
            GameConfig(difficulty=difficulty),
            scheduler=Scheduler(self.clock),
            seed=11,
            notifier=self.records.append,
        )

    def _advance(self, ms):
        self.clock.advance(ms)
        self.engine.pump()

    def _mismatched(self):
        pairs = _pairs(self.engine)
        return pairs[0][0], pairs[1][0]

    def test_given_new_engine_when_created_then_not_started_with_fresh_deck(self):
        s = self.engine.session
        self.assertEqual(self.engine.status, GameStatus.NOT_STARTED)
        self.assertEqual(len(s.cards), 16)
        self.assertEqual((s.moves, s.matched_pairs, s.elapsed), (0, 0, 0))
        self.assertEqual(self.engine.columns, 4)
        self.assertEqual(self.engine.title, 'WW2 Memory Game')
        self.assertIsNone(s.score)

    def test_given_first_selection_when_clicked_then_game_starts_and_latches_start_time(self):
        self.clock.advance(500)
        card_id = self.engine.session.cards[0].id
        self.engine.select_card(card_id)
        s = self.engine.session
        self.assertEqual(self.engine.status, GameStatus.IN_PROGRESS)
        self.assertEqual(s.start_time, 500)
        self.assertTrue(s.card(card_id).flipped)
        self.assertEqual(s.selection, [card_id])
        self.assertEqual(s.moves, 0)

        self._advance(250)
        self.assertEqual(s.elapsed, 200)  # last sample at t=700
        self.assertEqual(self.engine.formatted_time, '0:00')

    def test_given_mismatch_when_delay_elapses_then_both_cards_hide_and_selection_clears(self):
        a, b = self._mismatched()
        self.engine.select_card(a)
        self.engine.select_card(b)
        s = self.engine.session
        self.assertEqual(s.moves, 1)
        self.assertTrue(s.pending)

        self._advance(1499)
        self.assertEqual(s.selection, [a, b])
        self.assertTrue(s.card(a).flipped)

        self._advance(1)
        for card_id in (a, b):
            self.assertFalse(s.card(card_id).flipped)
            self.assertFalse(s.card(card_id).matched)
        self.assertEqual(s.selection, [])
        self.assertEqual(s.matched_pairs, 0)

    def test_given_match_when_delay_elapses_then_cards_matched_and_count_increments(self):
        a, b = _pairs(self.engine)[0]
        self.engine.select_card(a)
        self.engine.select_card(b)
        s = self.engine.session
        self._advance(999)
        self.assertEqual(s.matched_pairs, 0)
        self.assertTrue(s.is_revealed(s.card(a)))

        self._advance(1)
        self.assertEqual(s.matched_pairs, 1)
        for card_id in (a, b):
            self.assertTrue(s.card(card_id).matched)
            self.assertFalse(s.card(card_id).flipped)
            self.assertTrue(s.is_revealed(s.card(card_id)))
            self.assertTrue(s.is_disabled(s.card(card_id)))
        self.assertEqual(s.selection, [])

    def test_given_matched_card_when_selected_then_nothing_changes(self):
        a, b = _pairs(self.engine)[0]
        self.engine.select_card(a)
        self.engine.select_card(b)
        self._advance(1000)
        before = _snapshot(self.engine)
        self.engine.select_card(a)
        self.engine.select_card(b)
        self.assertEqual(_snapshot(self.engine), before)

    def test_given_selected_card_when_selected_again_then_ignored(self):
        a = self.engine.session.cards[0].id
        self.engine.select_card(a)
        before = _snapshot(self.engine)
        self.engine.select_card(a)
        self.assertEqual(_snapshot(self.engine), before)

    def test_given_unknown_card_id_when_selected_then_ignored_and_not_started(self):
        self.engine.select_card(999)
        self.assertEqual(self.engine.status, GameStatus.NOT_STARTED)
        self.assertIsNone(self.engine.scheduler.next_due())

    def test_given_pending_pair_when_third_card_selected_then_ignored_and_pair_resolves_on_schedule(self):
        a, b = self._mismatched()
        third = next(c.id for c in self.engine.session.cards if c.id not in (a, b))
        self.engine.select_card(a)
        self.engine.select_card(b)
        self._advance(700)
        self.engine.select_card(third)
        s = self.engine.session
        self.assertFalse(s.card(third).flipped)
        self.assertEqual(s.selection, [a, b])
        self.assertEqual(s.moves, 1)

        self._advance(800)
        self.assertEqual(s.selection, [])
        self.assertFalse(s.card(a).flipped)
        self.assertFalse(s.card(third).flipped)

    def test_given_selections_when_counting_moves_then_only_completed_pairs_count(self):
        a, b = self._mismatched()
        self.engine.select_card(a)
        self.assertEqual(self.engine.session.moves, 0)
        self.engine.select_card(b)
        self.assertEqual(self.engine.session.moves, 1)
        self._advance(1500)
        self.engine.select_card(a)
        self.assertEqual(self.engine.session.moves, 1)
        self.engine.select_card(b)
        self.assertEqual(self.engine.session.moves, 2)

    def test_given_medium_game_when_played_perfectly_then_won_with_920_and_one_completion(self):
        for a, b in _pairs(self.engine):
            self.assertFalse(self.engine.session.won)
            self.assertEqual(self.records, [])
            self.engine.select_card(a)
            self.engine.select_card(b)
            self._advance(1000)

        s = self.engine.session
        self.assertEqual(self.engine.status, GameStatus.WON)
        self.assertEqual((s.moves, s.matched_pairs), (8, 8))
        self.assertEqual(s.score, 920)
        self.assertEqual(s.elapsed, 8000)
        self.assertEqual(len(self.records), 1)
        record = self.records[0].to_dict()
        self.assertEqual(record["score"], 920)
        self.assertEqual(record["timeSpent"], 8000)
        self.assertEqual(record["data"], {"moves": 8, "timeElapsed": 8000, "difficulty": "medium"})

        # Sampling has stopped and nothing is re-emitted.
        self.assertIsNone(self.engine.scheduler.next_due())
        self._advance(5000)
        self.assertEqual(s.elapsed, 8000)
        self.assertEqual(len(self.records), 1)
        self.engine.select_card(s.cards[0].id)
        self.assertEqual(len(self.records), 1)

    def test_given_mistakes_when_game_won_then_score_reflects_all_moves(self):
        a, b = self._mismatched()
        for _ in range(3):
            self.engine.select_card(a)
            self.engine.select_card(b)
            self._advance(1500)
        for x, y in _pairs(self.engine):
            self.engine.select_card(x)
            self.engine.select_card(y)
            self._advance(1000)
        self.assertTrue(self.engine.session.won)
        self.assertEqual(self.engine.session.moves, 11)
        self.assertEqual(self.engine.session.score, 890)
        self.assertEqual(self.records[0].time_spent, 3 * 1500 + 8 * 1000)

    def test_given_hard_game_when_played_perfectly_then_twelve_pairs_needed(self):
        self.engine = self._make_engine('hard')
        self.assertEqual(self.engine.columns, 6)
        pairs = _pairs(self.engine)
        self.assertEqual(len(pairs), 12)
        for a, b in pairs:
            self.engine.select_card(a)
            self.engine.select_card(b)
            self._advance(1000)
        self.assertTrue(self.engine.session.won)
        self.assertEqual(self.engine.session.score, 880)
        self.assertEqual(self.records[0].difficulty, 'hard')

    def test_given_one_flipped_card_when_restart_then_everything_resets(self):
        a = self.engine.session.cards[0].id
        self.engine.select_card(a)
        self._advance(300)
        old_session = self.engine.session
        self.engine.restart()
        s = self.engine.session
        self.assertIsNot(s, old_session)
        self.assertEqual(self.engine.status, GameStatus.NOT_STARTED)
        self.assertTrue(all(not c.flipped and not c.matched for c in s.cards))
        self.assertEqual((s.moves, s.matched_pairs, s.elapsed), (0, 0, 0))
        self.assertEqual(s.selection, [])
        self.assertIsNone(self.engine.scheduler.next_due())

    def test_given_pending_match_when_restart_then_old_resolution_has_no_effect(self):
        a, b = _pairs(self.engine)[0]
        self.engine.select_card(a)
        self.engine.select_card(b)
        self.engine.restart()
        self._advance(2000)
        s = self.engine.session
        self.assertEqual(s.matched_pairs, 0)
        self.assertTrue(all(not c.matched for c in s.cards))
        self.assertEqual(s.elapsed, 0)

    def test_given_callback_from_previous_generation_when_it_runs_then_it_is_dropped(self):
        a, b = _pairs(self.engine)[0]
        self.engine.restart()
        s = self.engine.session
        self.engine._resolve_match(0, a, b)
        self.engine._sample(0)
        self.assertEqual(s.matched_pairs, 0)
        self.assertFalse(s.card(a).matched)

    def test_given_won_game_when_restart_then_new_game_can_be_won_again(self):
        for a, b in _pairs(self.engine):
            self.engine.select_card(a)
            self.engine.select_card(b)
            self._advance(1000)
        self.engine.restart()
        self.assertEqual(self.engine.status, GameStatus.NOT_STARTED)
        self.assertEqual(len(self.records), 1)
        for a, b in _pairs(self.engine):
            self.engine.select_card(a)
            self.engine.select_card(b)
            self._advance(1000)
        self.assertEqual(len(self.records), 2)

    def test_given_each_phase_when_viewing_then_cards_counters_and_flags_reflect_state(self):
        pairs = _pairs(self.engine)
        v = self.engine.view()
        self.assertEqual((v["title"], v["difficulty"], v["columns"]), ('WW2 Memory Game', 'medium', 4))
        self.assertEqual(v["status"], GameStatus.NOT_STARTED)
        self.assertEqual((v["moves"], v["matched_pairs"], v["total_pairs"]), (0, 0, 8))
        self.assertEqual((v["elapsed"], v["time"], v["score"], v["max_score"]), (0, '0:00', None, 1000))
        self.assertFalse(v["started"] or v["won"] or v["pending"])
        self.assertEqual([c["id"] for c in v["cards"]], [c.id for c in self.engine.session.cards])
        for card in v["cards"]:
            self.assertEqual((card["face"], card["label"]), ('❓', 'Click to reveal'))
            self.assertFalse(card["revealed"] or card["disabled"] or card["flipped"] or card["matched"])

        a, b = pairs[0]
        self.engine.select_card(a)
        self.engine.select_card(b)
        v = self.engine.view()
        self.assertEqual(v["status"], GameStatus.IN_PROGRESS)
        self.assertTrue(v["started"] and v["pending"])
        self.assertEqual(v["moves"], 1)
        card = next(c for c in v["cards"] if c["id"] == a)
        self.assertTrue(card["revealed"] and card["disabled"] and card["flipped"])
        self.assertEqual((card["face"], card["label"]), (card["symbol"], card["name"]))

        self._advance(1000)
        v = self.engine.view()
        self.assertFalse(v["pending"])
        self.assertEqual((v["matched_pairs"], v["elapsed"], v["time"]), (1, 1000, '0:01'))
        card = next(c for c in v["cards"] if c["id"] == b)
        self.assertTrue(card["matched"] and card["revealed"] and card["disabled"])
        self.assertFalse(card["flipped"])

        for x, y in pairs[1:]:
            self.engine.select_card(x)
            self.engine.select_card(y)
            self._advance(1000)
        v = self.engine.view()
        self.assertEqual(v["status"], GameStatus.WON)
        self.assertTrue(v["won"])
        self.assertEqual((v["moves"], v["matched_pairs"], v["score"]), (8, 8, 920))
        self.assertTrue(all(c["matched"] and c["disabled"] for c in v["cards"]))

    def test_given_failing_notifier_when_game_won_then_error_logged_and_state_won(self):
        def _boom(record):
            raise RuntimeError('host gone')

        self.engine = GameEngine(GameConfig(), scheduler=Scheduler(self.clock), seed=5, notifier=_boom)
        with self.assertLogs('memory_core.engine', level='ERROR'):
            for a, b in _pairs(self.engine):
                self.engine.select_card(a)
                self.engine.select_card(b)
                self._advance(1000)
        self.assertTrue(self.engine.session.won)
        self.assertTrue(self.engine.session.completion_sent)


if __name__ == '__main__':
    unittest.main(verbosity=2)
