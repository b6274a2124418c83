"""Tests for the virtual clock and staggered reel-stop timing."""
import pytest

from fortune.logic.models import SpinSession
from fortune.logic.reels import reel_stop_times, spin_progress, stopped_reels
from fortune.logic.timers import VirtualScheduler


class TestVirtualScheduler:
    """Deterministic manual clock."""

    def test_nothing_runs_until_advanced(self):
        scheduler = VirtualScheduler()
        fired = []
        scheduler.call_later(1.0, lambda: fired.append("a"))
        assert fired == []
        assert scheduler.pending == 1

        assert scheduler.advance(1.0) == 1
        assert fired == ["a"]
        assert scheduler.pending == 0

    def test_order_by_due_then_schedule_order(self):
        scheduler = VirtualScheduler()
        fired = []
        scheduler.call_later(2.0, lambda: fired.append("late"))
        scheduler.call_later(1.0, lambda: fired.append("first"))
        scheduler.call_later(1.0, lambda: fired.append("second"))
        scheduler.run_until_idle()
        assert fired == ["first", "second", "late"]
        assert scheduler.now() == 2.0

    def test_cancelled_timer_never_fires(self):
        scheduler = VirtualScheduler()
        fired = []
        handle = scheduler.call_later(1.0, lambda: fired.append("x"))
        handle.cancel()
        handle.cancel()
        assert handle.cancelled is True
        assert scheduler.pending == 0
        assert scheduler.advance(5.0) == 0
        assert fired == []

    def test_callbacks_may_schedule_more(self):
        scheduler = VirtualScheduler()
        fired = []

        def tick():
            fired.append(scheduler.now())
            if len(fired) < 3:
                scheduler.call_later(0.5, tick)

        scheduler.call_later(0.5, tick)
        scheduler.run_until_idle()
        assert fired == [0.5, 1.0, 1.5]

    def test_clock_lands_on_target(self):
        scheduler = VirtualScheduler(start=10.0)
        scheduler.advance(3.0)
        assert scheduler.now() == 13.0
        assert scheduler.next_due() is None


def _session(started_at=0.0, duration=2.5) -> SpinSession:
    return SpinSession(stake=100, started_at=started_at, settle_at=started_at + duration)


class TestReelStops:
    """Columns stop left to right; the last at the logical settle time."""

    def test_stop_times(self):
        times = reel_stop_times(_session(), columns=3, stagger=0.15)
        assert times == pytest.approx([2.2, 2.35, 2.5])

    def test_stop_times_never_precede_start(self):
        times = reel_stop_times(_session(duration=0.1), columns=3, stagger=0.15)
        assert times == pytest.approx([0.0, 0.0, 0.1])

    def test_stopped_reels(self):
        session = _session()
        assert stopped_reels(session, 3, 0.15, now=1.0) == [False, False, False]
        assert stopped_reels(session, 3, 0.15, now=2.36) == [True, True, False]
        assert stopped_reels(session, 3, 0.15, now=2.5) == [True, True, True]

    def test_progress(self):
        session = _session(started_at=1.0, duration=2.0)
        assert spin_progress(session, 0.0) == 0.0
        assert spin_progress(session, 2.0) == pytest.approx(0.5)
        assert spin_progress(session, 9.0) == 1.0

    def test_progress_of_instant_spin(self):
        assert spin_progress(_session(duration=0.0), 0.0) == 1.0
