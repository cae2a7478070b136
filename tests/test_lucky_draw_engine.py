from __future__ import annotations

import random
import unittest
from datetime import datetime, timezone
from typing import Optional, Sequence

from luckygroup.exceptions import DrawInProgressError, EmptyPoolError
from luckygroup.lucky_draw import DrawState, DrawTiming, LuckyDrawEngine, ManualScheduler
from luckygroup.models import GENERIC_WIN, DrawRecord
from luckygroup.roster import PrizeQueue, Roster


class DrawEngineTestCase(unittest.TestCase):
    def build(
        self,
        names: Sequence[str] = ("A", "B", "C"),
        prizes: Optional[Sequence[str]] = None,
        *,
        allow_repeat: bool = False,
        seed: int = 1,
    ) -> LuckyDrawEngine:
        self.roster = Roster()
        self.roster.add(",".join(names))
        self.queue = PrizeQueue()
        if prizes:
            self.queue.add(",".join(prizes))
        self.scheduler = ManualScheduler()
        self.engine = LuckyDrawEngine(
            self.roster,
            self.queue,
            allow_repeat=allow_repeat,
            scheduler=self.scheduler,
            rng=random.Random(seed),
        )
        self.addCleanup(self.engine.close)
        return self.engine

    def draw(self) -> DrawRecord:
        self.engine.start()
        self.scheduler.advance(self.engine.timing.max_duration)
        self.assertIs(self.engine.state, DrawState.RESULT_SHOWN)
        return self.engine.history[-1]


class FailingStopScheduler(ManualScheduler):
    def call_later(self, delay, callback):
        raise RuntimeError("timer backend unavailable")


class SchedulerFailureTests(unittest.TestCase):
    def test_failed_scheduling_leaves_engine_idle(self) -> None:
        roster = Roster()
        roster.add("A, B")
        scheduler = FailingStopScheduler()
        engine = LuckyDrawEngine(roster, scheduler=scheduler, rng=random.Random(2))
        self.addCleanup(engine.close)

        with self.assertRaises(RuntimeError):
            engine.start()

        self.assertIs(engine.state, DrawState.IDLE)
        self.assertIsNone(engine.current_prize)
        self.assertEqual(scheduler.pending(), 0)
        self.assertTrue(engine.toggle_repeat())
        engine.acknowledge()

    def test_asyncio_scheduler_without_running_loop(self) -> None:
        roster = Roster()
        roster.add("A, B")
        engine = LuckyDrawEngine(roster)
        self.addCleanup(engine.close)

        with self.assertRaises(RuntimeError):
            engine.start()
        self.assertIs(engine.state, DrawState.IDLE)
        self.assertEqual(engine.remaining_count, 2)
        self.assertTrue(engine.toggle_repeat())


class NoRepeatDrawTests(DrawEngineTestCase):
    def test_pool_shrinks_and_winners_are_distinct(self) -> None:
        engine = self.build(names=[f"P{i}" for i in range(8)])
        for m in range(1, 6):
            self.draw()
            engine.acknowledge()
            self.assertEqual(engine.remaining_count, 8 - m)
        winners = [r.participant.id for r in engine.history]
        self.assertEqual(len(winners), len(set(winners)))
        remaining_ids = {p.id for p in engine.remaining}
        self.assertTrue(remaining_ids.isdisjoint(winners))
        self.assertTrue(remaining_ids <= {p.id for p in self.roster})

    def test_exhausted_pool_rejects_start(self) -> None:
        engine = self.build(names=["A", "B", "C"])
        for _ in range(3):
            self.draw()
        self.assertEqual(engine.remaining_count, 0)
        engine.acknowledge()

        with self.assertRaises(EmptyPoolError):
            engine.start()
        self.assertIs(engine.state, DrawState.IDLE)
        self.assertEqual(len(engine.history), 3)
        self.assertEqual(self.scheduler.pending(), 0)

    def test_history_orders(self) -> None:
        engine = self.build()
        first = self.draw()
        second = self.draw()
        self.assertEqual([r.sequence for r in engine.history], [1, 2])
        self.assertEqual(engine.recent_history(), [second, first])


class RepeatDrawTests(DrawEngineTestCase):
    def test_pool_stays_full(self) -> None:
        engine = self.build(allow_repeat=True)
        for _ in range(10):
            self.draw()
            self.assertEqual(engine.remaining_count, 3)
        winners = [r.participant.id for r in engine.history]
        self.assertEqual(len(winners), 10)
        self.assertLess(len(set(winners)), len(winners))

    def test_toggle_recomputes_pool_from_history(self) -> None:
        engine = self.build()
        record = self.draw()
        engine.acknowledge()
        self.assertEqual(engine.remaining_count, 2)

        self.assertTrue(engine.toggle_repeat())
        self.assertEqual(engine.remaining_count, 3)

        self.assertFalse(engine.toggle_repeat())
        self.assertEqual(engine.remaining_count, 2)
        self.assertNotIn(record.participant, engine.remaining)

    def test_toggle_while_rolling_is_rejected(self) -> None:
        engine = self.build()
        engine.start()
        with self.assertRaises(DrawInProgressError):
            engine.toggle_repeat()
        self.assertFalse(engine.allow_repeat)


class PrizeSequencingTests(DrawEngineTestCase):
    def test_prizes_are_awarded_in_queue_order(self) -> None:
        engine = self.build(prizes=["Gold", "Silver"])
        first = self.draw()
        second = self.draw()
        self.assertEqual(first.prize.name, "Gold")
        self.assertEqual(second.prize.name, "Silver")
        self.assertEqual(len(self.queue), 0)

        third = self.draw()
        self.assertIs(third.prize, GENERIC_WIN)
        self.assertTrue(third.is_generic)
        self.assertEqual(engine.remaining_count, 0)

    def test_queue_front_tracks_number_of_draws(self) -> None:
        names = ["P1", "P2", "P3", "P4", "P5", "P6"]
        prizes = ["Car", "TV", "Phone", "Mug", "Pen"]
        self.build(names=names, prizes=prizes)
        original = self.queue.prizes
        for n in range(1, 4):
            record = self.draw()
            self.assertEqual(record.prize, original[n - 1])
            self.assertEqual(self.queue.peek_next(), original[n])

    def test_prize_is_captured_at_start(self) -> None:
        engine = self.build(prizes=["Gold", "Silver"])
        gold, silver = self.queue.prizes
        self.assertEqual(engine.start(), gold)
        self.assertEqual(engine.current_prize, gold)

        self.queue.move_down(0)
        self.scheduler.advance(engine.timing.max_duration)

        self.assertEqual(engine.history[-1].prize, gold)
        self.assertEqual(self.queue.prizes, (silver,))

    def test_prize_removed_while_rolling(self) -> None:
        engine = self.build(prizes=["Gold", "Silver"])
        gold, silver = self.queue.prizes
        engine.start()
        self.queue.remove(gold.id)
        self.scheduler.advance(engine.timing.max_duration)
        self.assertEqual(engine.history[-1].prize, gold)
        self.assertEqual(self.queue.prizes, (silver,))

    def test_engine_without_prize_queue(self) -> None:
        roster = Roster()
        roster.add("A,B")
        scheduler = ManualScheduler()
        engine = LuckyDrawEngine(roster, scheduler=scheduler, rng=random.Random(3))
        self.addCleanup(engine.close)
        self.assertIs(engine.start(), GENERIC_WIN)
        scheduler.advance(engine.timing.max_duration)
        self.assertTrue(engine.history[0].is_generic)


class RollingPhaseTests(DrawEngineTestCase):
    def test_display_samples_come_from_pool(self) -> None:
        engine = self.build(names=[f"P{i}" for i in range(5)])
        shown = []
        engine.subscribe("display", shown.append)
        engine.start()
        self.scheduler.advance(1.0)

        self.assertIs(engine.state, DrawState.ROLLING)
        self.assertIsNone(engine.current_winner)
        self.assertGreaterEqual(len(shown), 15)
        pool = set(engine.remaining)
        self.assertTrue(all(p in pool for p in shown))
        self.assertEqual(engine.displayed, shown[-1])

    def test_stop_happens_within_duration_bounds(self) -> None:
        engine = self.build()
        timing = engine.timing
        engine.start()
        self.scheduler.advance(timing.min_duration - 0.01)
        self.assertIs(engine.state, DrawState.ROLLING)
        self.scheduler.advance(timing.max_duration - timing.min_duration + 0.01)
        self.assertIs(engine.state, DrawState.RESULT_SHOWN)
        self.assertEqual(engine.displayed, engine.current_winner)
        self.assertEqual(self.scheduler.pending(), 0)

    def test_result_event_and_clock(self) -> None:
        when = datetime(2024, 5, 1, tzinfo=timezone.utc)
        roster = Roster()
        roster.add("A")
        scheduler = ManualScheduler()
        engine = LuckyDrawEngine(
            roster,
            scheduler=scheduler,
            timing=DrawTiming(tick_interval=0.1, min_duration=0.5, max_duration=0.5),
            clock=lambda: when,
        )
        self.addCleanup(engine.close)
        results = []
        engine.subscribe("result", results.append)
        engine.start()
        scheduler.advance(0.5)
        self.assertEqual(len(results), 1)
        self.assertEqual(results[0].drawn_at, when)
        self.assertEqual(results[0].participant.name, "A")

    def test_acknowledge(self) -> None:
        engine = self.build()
        engine.start()
        with self.assertRaises(DrawInProgressError):
            engine.acknowledge()
        self.scheduler.advance(engine.timing.max_duration)
        engine.acknowledge()
        self.assertIs(engine.state, DrawState.IDLE)
        self.assertEqual(len(engine.history), 1)

    def test_start_from_result_acknowledges_implicitly(self) -> None:
        engine = self.build()
        self.draw()
        engine.start()
        self.assertIs(engine.state, DrawState.ROLLING)
        self.assertIsNone(engine.current_winner)

    def test_second_start_restarts_roll(self) -> None:
        engine = self.build()
        reasons = []
        engine.subscribe("cancel", reasons.append)
        engine.start()
        self.scheduler.advance(1.0)
        engine.start()
        self.scheduler.advance(engine.timing.max_duration * 2)
        self.assertEqual(reasons, ["restarted"])
        self.assertEqual(len(engine.history), 1)

    def test_unknown_event(self) -> None:
        engine = self.build()
        with self.assertRaises(ValueError):
            engine.subscribe("confetti", lambda _: None)


class ResetAndRosterChangeTests(DrawEngineTestCase):
    def test_reset_history_cancels_rolling_draw(self) -> None:
        engine = self.build()
        self.draw()
        engine.start()
        engine.reset_history()
        self.scheduler.advance(10)

        self.assertIs(engine.state, DrawState.IDLE)
        self.assertEqual(engine.history, ())
        self.assertEqual(engine.remaining_count, 3)
        self.assertIsNone(engine.current_winner)
        self.assertIsNone(engine.displayed)
        self.assertEqual(self.scheduler.pending(), 0)

    def test_roster_change_while_rolling_cancels_timers(self) -> None:
        engine = self.build()
        reasons = []
        engine.subscribe("cancel", reasons.append)
        engine.start()
        self.scheduler.advance(1.0)

        self.roster.add("D")
        self.assertIs(engine.state, DrawState.IDLE)
        self.assertEqual(reasons, ["roster changed"])
        self.assertEqual(self.scheduler.pending(), 0)

        self.scheduler.advance(10)
        self.assertEqual(engine.history, ())
        self.assertEqual(engine.remaining_count, 4)

    def test_roster_edit_without_repeats_clears_history(self) -> None:
        engine = self.build()
        self.draw()
        self.draw()
        survivor = engine.remaining[0]
        self.roster.remove(survivor.id)

        self.assertEqual(engine.history, ())
        self.assertIs(engine.state, DrawState.IDLE)
        self.assertEqual(set(engine.remaining), set(self.roster.participants))

    def test_roster_edit_with_repeats_keeps_history(self) -> None:
        engine = self.build(allow_repeat=True)
        self.draw()
        self.roster.add("D")
        self.assertEqual(len(engine.history), 1)
        self.assertEqual(engine.remaining_count, 4)

    def test_close_detaches_from_roster(self) -> None:
        engine = self.build()
        engine.start()
        engine.close()
        self.assertEqual(self.scheduler.pending(), 0)
        self.roster.add("D")
        self.assertEqual(engine.remaining_count, 3)


if __name__ == "__main__":
    unittest.main()
