"""Tests for the cooperative scheduler's tick and timer semantics."""

from __future__ import annotations

import unittest

from picker_fakes import make_scheduler


class SchedulerTests(unittest.TestCase):
    def test_defer_never_runs_synchronously(self) -> None:
        scheduler, _clock = make_scheduler()
        calls: list[str] = []

        scheduler.defer(lambda: calls.append("a"))

        self.assertEqual(calls, [])
        self.assertEqual(scheduler.run_pending(), 1)
        self.assertEqual(calls, ["a"])

    def test_work_deferred_during_a_tick_waits_for_next_tick(self) -> None:
        scheduler, _clock = make_scheduler()
        calls: list[str] = []

        def outer() -> None:
            calls.append("outer")
            scheduler.defer(lambda: calls.append("inner"))

        scheduler.defer(outer)
        scheduler.run_pending()
        self.assertEqual(calls, ["outer"])
        scheduler.run_pending()
        self.assertEqual(calls, ["outer", "inner"])

    def test_call_later_waits_for_deadline(self) -> None:
        scheduler, clock = make_scheduler()
        calls: list[int] = []

        scheduler.call_later(0.010, lambda: calls.append(1))
        clock.advance(0.009)
        scheduler.run_pending()
        self.assertEqual(calls, [])
        clock.advance(0.002)
        scheduler.run_pending()
        self.assertEqual(calls, [1])

    def test_cancelled_handle_never_runs(self) -> None:
        scheduler, clock = make_scheduler()
        calls: list[int] = []

        handle = scheduler.call_later(0.005, lambda: calls.append(1))
        handle.cancel()
        clock.advance(1.0)

        self.assertEqual(scheduler.run_pending(), 0)
        self.assertEqual(calls, [])
        self.assertFalse(handle.active)
        self.assertEqual(scheduler.pending_count(), 0)

    def test_callbacks_run_in_deadline_then_fifo_order(self) -> None:
        scheduler, clock = make_scheduler()
        calls: list[str] = []

        scheduler.call_later(0.002, lambda: calls.append("late"))
        scheduler.defer(lambda: calls.append("first"))
        scheduler.defer(lambda: calls.append("second"))
        clock.advance(0.005)
        scheduler.run_pending()

        self.assertEqual(calls, ["first", "second", "late"])

    def test_failing_callback_does_not_stop_the_tick(self) -> None:
        scheduler, _clock = make_scheduler()
        calls: list[str] = []

        def boom() -> None:
            raise RuntimeError("boom")

        scheduler.defer(boom)
        scheduler.defer(lambda: calls.append("after"))
        with self.assertLogs("fastpick.scheduler", level="ERROR"):
            scheduler.run_pending()

        self.assertEqual(calls, ["after"])

    def test_callback_can_cancel_a_later_task_in_the_same_tick(self) -> None:
        scheduler, _clock = make_scheduler()
        calls: list[str] = []
        handles = {}

        scheduler.defer(lambda: handles["victim"].cancel())
        handles["victim"] = scheduler.defer(lambda: calls.append("victim"))
        scheduler.run_pending()

        self.assertEqual(calls, [])

    def test_run_until_advances_time_through_sleep(self) -> None:
        scheduler, clock = make_scheduler()
        start = clock.now
        calls: list[int] = []

        scheduler.call_later(0.010, lambda: calls.append(1))
        scheduler.call_later(0.030, lambda: calls.append(2))

        self.assertTrue(scheduler.run_until())
        self.assertEqual(calls, [1, 2])
        self.assertAlmostEqual(clock.now - start, 0.030)
        self.assertIsNone(scheduler.next_deadline())

    def test_run_until_stops_on_predicate_or_timeout(self) -> None:
        scheduler, _clock = make_scheduler()
        calls: list[int] = []

        def tick() -> None:
            calls.append(1)
            scheduler.call_later(0.010, tick)

        scheduler.defer(tick)
        self.assertTrue(scheduler.run_until(lambda: len(calls) >= 3))
        self.assertEqual(len(calls), 3)
        self.assertFalse(scheduler.run_until(lambda: False, timeout_seconds=0.05))


if __name__ == "__main__":
    unittest.main()
