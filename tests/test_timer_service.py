"""Unit tests for TimerService: tick handle ownership and effect execution."""

import logging
import sqlite3
import pytest
from datetime import datetime, timedelta
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pmo.data.database import SCHEMA_SQL
from pmo.data.repository import SessionRepository
from pmo.services import cycle
from pmo.services.cycle import CycleDurations, CyclePhase
from pmo.services.timer_service import TimerService

FULL_SEQUENCE_TICKS = 4 * 1500 + 3 * 300 + 900


class FakeHandle:
    def __init__(self, callback):
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class FakeTicker:
    """Records scheduled handles instead of running a real timer."""

    def __init__(self):
        self.handles = []

    def schedule(self, callback):
        handle = FakeHandle(callback)
        self.handles.append(handle)
        return handle

    @property
    def live(self):
        return [h for h in self.handles if not h.cancelled]


class FakeClock:
    def __init__(self, start: datetime):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds: int = 1):
        self.now += timedelta(seconds=seconds)


class SpyStore:
    def __init__(self):
        self.completed = []
        self.partial = []

    def save_completed_session(self, task_name, start, end, cycles):
        self.completed.append((task_name, start, end, cycles))

    def save_partial_session(self, task_name, start, end, cycles_completed):
        self.partial.append((task_name, start, end, cycles_completed))


class BrokenStore:
    def __init__(self):
        self.calls = 0

    def save_completed_session(self, *args):
        self.calls += 1
        raise sqlite3.OperationalError("database is locked")

    def save_partial_session(self, *args):
        self.calls += 1
        raise sqlite3.OperationalError("database is locked")


@pytest.fixture
def clock():
    return FakeClock(datetime(2026, 10, 19, 9, 0, 0))


@pytest.fixture
def ticker():
    return FakeTicker()


@pytest.fixture
def store():
    return SpyStore()


@pytest.fixture
def svc(store, ticker, clock):
    return TimerService(store, ticker, clock=clock)


def run_ticks(svc, clock, n):
    for _ in range(n):
        clock.advance()
        svc.tick()


class TestStartPause:
    def test_start_with_empty_task_is_rejected(self, svc, ticker):
        before = svc.state
        after = svc.start("")
        assert after == before
        assert not after.is_running
        assert ticker.handles == []

    def test_start_schedules_one_tick_stream(self, svc, ticker):
        state = svc.start("Read")
        assert state.is_running
        assert state.remaining_seconds == 1500
        assert len(ticker.live) == 1
        svc.start("Read")
        assert len(ticker.handles) == 1

    def test_pause_cancels_tick_and_keeps_remaining(self, svc, ticker, clock):
        svc.start("Read")
        run_ticks(svc, clock, 125)
        paused = svc.pause()
        assert not paused.is_running
        assert paused.remaining_seconds == 1375
        assert ticker.live == []
        assert not svc.is_ticking

    def test_resume_from_exact_remaining(self, svc, ticker, clock):
        svc.start("Read")
        run_ticks(svc, clock, 125)
        svc.pause()
        run_ticks(svc, clock, 30)  # stray ticks while paused change nothing
        resumed = svc.start("")
        assert resumed.is_running
        assert resumed.remaining_seconds == 1375
        assert resumed.task_name == "Read"
        assert len(ticker.live) == 1
        assert len(ticker.handles) == 2

    def test_pause_when_idle_is_noop(self, svc, ticker):
        assert svc.pause() == cycle.initial_state(svc.durations)
        assert ticker.handles == []


class TestExampleTrace:
    def test_work_period_then_reset(self, svc, store, clock):
        started_at = clock.now
        svc.start("Read")
        run_ticks(svc, clock, 1500)

        s = svc.state
        assert s.phase is CyclePhase.SHORT_BREAK
        assert s.remaining_seconds == 300
        assert s.completed_work_periods == 1
        assert s.is_running

        reset = svc.reset()
        assert store.partial == [("Read", started_at, clock.now, 1)]
        assert store.completed == []
        assert (reset.phase, reset.remaining_seconds, reset.is_running,
                reset.task_name, reset.completed_work_periods) == (
            CyclePhase.WORK, 1500, False, "", 0)
        assert not svc.is_ticking


class TestFullSequence:
    def test_one_completed_save_with_four_cycles(self, svc, store, ticker, clock):
        started_at = clock.now
        svc.start("Read")
        run_ticks(svc, clock, FULL_SEQUENCE_TICKS)

        assert store.completed == [("Read", started_at, clock.now, 4)]
        assert store.partial == []
        assert svc.state == cycle.initial_state(svc.durations)
        assert ticker.live == []

    def test_reset_after_completion_saves_nothing_more(self, svc, store, clock):
        svc.start("Read")
        run_ticks(svc, clock, FULL_SEQUENCE_TICKS)
        svc.reset()
        assert len(store.completed) == 1
        assert store.partial == []

    def test_reset_after_two_work_periods(self, svc, store, clock):
        svc.start("Read")
        run_ticks(svc, clock, 1500 + 300 + 1500 + 300 + 60)
        svc.reset()
        assert [p[3] for p in store.partial] == [2]
        assert svc.state == cycle.initial_state(svc.durations)

    def test_notifications_and_nearing_signal(self, store, ticker, clock):
        notes, nearing = [], []
        svc = TimerService(store, ticker, clock=clock,
                           on_notify=notes.append, on_nearing_completion=nearing.append)
        svc.start("Read")
        run_ticks(svc, clock, FULL_SEQUENCE_TICKS)
        assert [n.phase for n in notes] == [
            CyclePhase.WORK, CyclePhase.SHORT_BREAK,
            CyclePhase.WORK, CyclePhase.SHORT_BREAK,
            CyclePhase.WORK, CyclePhase.SHORT_BREAK,
            CyclePhase.WORK, CyclePhase.LONG_BREAK,
        ]
        assert all(n.task_name == "Read" for n in notes)
        assert len(nearing) == 1

    def test_state_listener_sees_every_tick(self, store, ticker, clock):
        seen = []
        svc = TimerService(store, ticker, clock=clock, on_state_changed=seen.append)
        svc.start("Read")
        run_ticks(svc, clock, 3)
        assert [s.remaining_seconds for s in seen] == [1500, 1499, 1498, 1497]


class TestFailureIsolation:
    def test_store_failure_does_not_stop_the_timer(self, ticker, clock, caplog):
        broken = BrokenStore()
        svc = TimerService(broken, ticker, clock=clock)
        with caplog.at_level(logging.ERROR):
            svc.start("Read")
            run_ticks(svc, clock, FULL_SEQUENCE_TICKS)
        assert broken.calls == 1
        assert svc.state == cycle.initial_state(svc.durations)
        assert "Failed to save completed session" in caplog.text

    def test_partial_save_failure_still_resets(self, ticker, clock):
        broken = BrokenStore()
        svc = TimerService(broken, ticker, clock=clock)
        svc.start("Read")
        run_ticks(svc, clock, 1500)
        state = svc.reset()
        assert broken.calls == 1
        assert state == cycle.initial_state(svc.durations)
        assert ticker.live == []

    def test_failing_notify_callback_is_swallowed(self, store, ticker, clock):
        def explode(_):
            raise RuntimeError("no audio device")

        svc = TimerService(store, ticker, clock=clock, on_notify=explode)
        svc.start("Read")
        run_ticks(svc, clock, 1500)
        assert svc.state.phase is CyclePhase.SHORT_BREAK


class TestWithRepository:
    def test_sessions_land_in_sqlite(self, ticker, clock):
        conn = sqlite3.connect(":memory:")
        conn.row_factory = sqlite3.Row
        conn.executescript(SCHEMA_SQL)
        repo = SessionRepository(conn)

        svc = TimerService(repo, ticker, clock=clock,
                           durations=CycleDurations(work=60, short_break=10, long_break=30))
        svc.start("Read")
        run_ticks(svc, clock, 4 * 60 + 3 * 10 + 30)
        svc.start("Write")
        run_ticks(svc, clock, 60 + 5)
        svc.reset()

        sessions = repo.list_sessions_by_date("2026-10-19")
        assert [(s.task_name, s.completed_cycles, s.is_completed) for s in sessions] == [
            ("Read", 4, True), ("Write", 1, False),
        ]
        assert sessions[0].duration == 4 * 60 + 3 * 10 + 30


class TestDurations:
    def test_set_durations_on_fresh_timer(self, svc):
        svc.set_durations(CycleDurations(work=50 * 60))
        assert svc.state.remaining_seconds == 3000

    def test_set_durations_mid_cycle_keeps_countdown(self, svc, clock):
        svc.start("Read")
        run_ticks(svc, clock, 10)
        svc.set_durations(CycleDurations(work=50 * 60))
        assert svc.state.remaining_seconds == 1490

    def test_shrinking_durations_mid_cycle_clamps_countdown(self, svc, clock):
        svc.start("Read")
        run_ticks(svc, clock, 1)
        svc.set_durations(CycleDurations(work=600))
        assert svc.state.remaining_seconds == 600
        assert svc.state.remaining_seconds <= svc.durations.for_phase(svc.state.phase)
        assert svc.state.is_running
        assert svc.progress() == 0.0

    def test_shrinking_durations_during_short_break(self, svc, clock):
        svc.start("Read")
        run_ticks(svc, clock, 1500 + 10)
        svc.set_durations(CycleDurations(short_break=60))
        assert svc.state.phase is CyclePhase.SHORT_BREAK
        assert svc.state.remaining_seconds == 60


class TestQtTicker:
    def test_handle_cancel(self):
        from PySide6.QtCore import QCoreApplication
        from pmo.services.ticker import QtTicker

        app = QCoreApplication.instance() or QCoreApplication([])
        handle = QtTicker().schedule(lambda: None)
        assert handle.active
        handle.cancel()
        assert not handle.active
        handle.cancel()  # second cancel is harmless
