"""Unit tests for the history service (date-tagged background fetches)."""

import concurrent.futures
import sqlite3
import time
import pytest
from datetime import date, datetime
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parent.parent))

from pmo.data.database import SCHEMA_SQL
from pmo.data.repository import SessionRepository
from pmo.services.history_service import HistoryService, HistoryStatus


class ManualExecutor(concurrent.futures.Executor):
    """Runs submitted work only when the test says so, in any order."""

    def __init__(self):
        self.pending = []

    def submit(self, fn, *args, **kwargs):
        future = concurrent.futures.Future()
        self.pending.append((future, fn, args, kwargs))
        return future

    def complete(self, index):
        future, fn, args, kwargs = self.pending[index]
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as exc:
            future.set_exception(exc)

    def shutdown(self, wait=True, **kwargs):
        pass


class FailingStore:
    def list_sessions_by_date(self, day):
        raise sqlite3.OperationalError("unable to open database file")


@pytest.fixture
def repo():
    conn = sqlite3.connect(":memory:", check_same_thread=False)
    conn.row_factory = sqlite3.Row
    conn.executescript(SCHEMA_SQL)
    conn.commit()
    repo = SessionRepository(conn)
    repo.save_completed_session(
        "Read", datetime(2026, 10, 18, 9, 0), datetime(2026, 10, 18, 11, 10), 4)
    repo.save_partial_session(
        "Write", datetime(2026, 10, 19, 14, 0), datetime(2026, 10, 19, 14, 40), 1)
    return repo


@pytest.fixture
def executor():
    return ManualExecutor()


class TestHistoryService:
    def test_select_date_loads_sessions(self, repo, executor):
        states = []
        svc = HistoryService(repo, executor=executor, on_change=states.append)
        svc.select_date(date(2026, 10, 19))
        assert svc.state.status is HistoryStatus.LOADING

        executor.complete(0)
        assert svc.state.status is HistoryStatus.LOADED
        assert [s.task_name for s in svc.state.sessions] == ["Write"]
        assert [s.status for s in states] == [HistoryStatus.LOADING, HistoryStatus.LOADED]

    def test_empty_date_is_not_an_error(self, repo, executor):
        svc = HistoryService(repo, executor=executor)
        svc.select_date("2026-01-01")
        executor.complete(0)
        assert svc.state.status is HistoryStatus.LOADED
        assert svc.state.sessions == []
        assert svc.state.error is None

    def test_stale_response_is_discarded(self, repo, executor):
        posted = []
        svc = HistoryService(repo, executor=executor,
                             post=lambda day, fut: posted.append((day, fut)))
        svc.select_date("2026-10-18")
        svc.select_date("2026-10-19")

        # newer query finishes first, the slow older one arrives afterwards
        executor.complete(1)
        executor.complete(0)
        for day, fut in posted:
            svc.deliver(day, fut)

        assert svc.state.selected_date == "2026-10-19"
        assert [s.task_name for s in svc.state.sessions] == ["Write"]

    def test_late_response_for_old_date_ignored_while_loading(self, repo, executor):
        svc = HistoryService(repo, executor=executor)
        svc.select_date("2026-10-18")
        svc.select_date("2026-10-19")
        executor.complete(0)
        assert svc.state.status is HistoryStatus.LOADING
        assert svc.state.selected_date == "2026-10-19"

    def test_fetch_failure_surfaces_as_error_state(self, executor):
        svc = HistoryService(FailingStore(), executor=executor)
        svc.select_date("2026-10-19")
        executor.complete(0)
        assert svc.state.status is HistoryStatus.ERROR
        assert "unable to open database file" in svc.state.error
        assert svc.state.sessions == []

    def test_refresh_refetches_selected_date(self, repo, executor):
        svc = HistoryService(repo, executor=executor)
        svc.refresh()
        assert executor.pending == []
        svc.select_date("2026-10-18")
        svc.refresh()
        assert len(executor.pending) == 2

    def test_refresh_outdates_earlier_fetch_of_same_date(self, repo, executor):
        posted = []
        svc = HistoryService(repo, executor=executor,
                             post=lambda tag, fut: posted.append((tag, fut)))
        svc.select_date("2026-10-19")
        repo.save_partial_session(
            "Review", datetime(2026, 10, 19, 16, 0), datetime(2026, 10, 19, 16, 30), 1)
        svc.refresh()

        executor.complete(1)
        executor.complete(0)
        for tag, fut in posted:
            svc.deliver(tag, fut)

        assert [s.task_name for s in svc.state.sessions] == ["Write", "Review"]

    def test_show_recent_lists_newest_first(self, repo, executor):
        svc = HistoryService(repo, executor=executor)
        svc.select_date("2026-10-18")
        svc.show_recent()
        assert svc.state.showing_recent
        assert svc.state.selected_date is None

        executor.complete(0)  # date fetch finishing late changes nothing
        assert svc.state.status is HistoryStatus.LOADING

        executor.complete(1)
        assert svc.state.status is HistoryStatus.LOADED
        assert [s.task_name for s in svc.state.sessions] == ["Write", "Read"]

    def test_refresh_keeps_recent_view(self, repo, executor):
        svc = HistoryService(repo, executor=executor)
        svc.show_recent(limit=1)
        executor.complete(0)
        svc.refresh()
        executor.complete(1)
        assert svc.state.showing_recent
        assert [s.task_name for s in svc.state.sessions] == ["Write"]

    def test_bad_date_rejected(self, repo, executor):
        svc = HistoryService(repo, executor=executor)
        with pytest.raises(ValueError):
            svc.select_date("19/10/2026")
        assert executor.pending == []

    def test_real_worker_thread(self, repo):
        svc = HistoryService(repo)
        try:
            svc.select_date("2026-10-18")
            deadline = time.monotonic() + 5
            while svc.state.status is HistoryStatus.LOADING and time.monotonic() < deadline:
                time.sleep(0.01)
            assert svc.state.status is HistoryStatus.LOADED
            assert [s.completed_cycles for s in svc.state.sessions] == [4]
        finally:
            svc.shutdown()
