"""
History Service - loads past sessions for the history panel.

Two views: the sessions of one calendar date, or the most recent sessions
across all dates. Fetches run on a single worker thread so the widget never
blocks on SQLite. Each fetch gets its own tag (the date string or RECENT plus
a sequence number); when its result comes back (on the UI thread, via
the injected `post` callable) it is dropped unless it is the newest
fetch.
"""

from __future__ import annotations

import concurrent.futures
import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Callable, List, Optional

from pmo.data.models import Session
from pmo.data.repository import normalize_date

logger = logging.getLogger(__name__)

RECENT = "recent"
RECENT_LIMIT = 50


class HistoryStatus(Enum):
    IDLE = "idle"
    LOADING = "loading"
    LOADED = "loaded"
    ERROR = "error"


@dataclass(frozen=True)
class HistoryState:
    selected_date: Optional[str] = None
    status: HistoryStatus = HistoryStatus.IDLE
    sessions: List[Session] = field(default_factory=list)
    error: Optional[str] = None
    showing_recent: bool = False


class HistoryService:
    """Read-only view-model over the session repository queries."""

    def __init__(
        self,
        store,
        executor: Optional[concurrent.futures.Executor] = None,
        post: Optional[Callable[[str, concurrent.futures.Future], None]] = None,
        on_change: Optional[Callable[[HistoryState], None]] = None,
    ) -> None:
        self.store = store
        self._executor = executor or concurrent.futures.ThreadPoolExecutor(
            max_workers=1, thread_name_prefix="history",
        )
        # Default delivers on the worker thread; the Qt widget swaps in a signal emit.
        self._post = post or self.deliver
        self.on_change = on_change
        self._state = HistoryState()
        self._tag: Optional[str] = None
        self._seq = 0
        self._recent_limit = RECENT_LIMIT

    @property
    def state(self) -> HistoryState:
        return self._state

    def select_date(self, day) -> None:
        """Select a date and fetch its sessions. Raises ValueError on bad input."""
        day_str = normalize_date(day)
        self._fetch(
            day_str,
            HistoryState(selected_date=day_str, status=HistoryStatus.LOADING),
            self.store.list_sessions_by_date, day_str,
        )

    def show_recent(self, limit: int = RECENT_LIMIT) -> None:
        """Fetch the newest sessions across all dates."""
        self._recent_limit = limit
        self._fetch(
            RECENT,
            HistoryState(status=HistoryStatus.LOADING, showing_recent=True),
            self.store.list_recent_sessions, limit,
        )

    def refresh(self) -> None:
        """Re-run whichever view is showing, e.g. after a session was saved."""
        if self._state.showing_recent:
            self.show_recent(self._recent_limit)
        elif self._state.selected_date is not None:
            self.select_date(self._state.selected_date)

    def deliver(self, tag: str, future: concurrent.futures.Future) -> None:
        """Apply a finished fetch. Must run on the thread that owns the view."""
        if tag != self._tag:
            logger.debug("Discarding stale history for %s (current %s)", tag, self._tag)
            return
        try:
            sessions = future.result()
        except Exception as exc:
            logger.exception("Failed to load session history for %s", tag)
            self._set_state(replace(
                self._state, status=HistoryStatus.ERROR, sessions=[],
                error=str(exc) or type(exc).__name__,
            ))
            return
        self._set_state(replace(
            self._state, status=HistoryStatus.LOADED,
            sessions=list(sessions or []), error=None,
        ))

    def shutdown(self) -> None:
        self._executor.shutdown(wait=False)

    def _fetch(self, key: str, loading: HistoryState, query: Callable, *args) -> None:
        # unique per fetch, so a refresh of the same date also outdates older fetches
        self._seq += 1
        tag = self._tag = f"{key}#{self._seq}"
        self._set_state(loading)
        logger.debug("Loading sessions for %s", tag)
        future = self._executor.submit(query, *args)
        future.add_done_callback(lambda f: self._post(tag, f))

    def _set_state(self, state: HistoryState) -> None:
        self._state = state
        if self.on_change:
            self.on_change(state)


# ---------------------------------------------------------------------------
# Explanation (for interviews)
# ---------------------------------------------------------------------------
# What this file does:
#   Runs history queries off the UI thread and keeps only the answer to the
#   latest question asked.
#
# Key pieces:
#   - _tag: the newest fetch (key plus sequence number). deliver() compares
#     against it, so a slow older query can never overwrite a newer one.
#   - post: how a finished future gets back to the UI thread. The widget
#     passes a Qt signal emit; tests pass a list or run it inline.
#
# Data flow:
#   Date picked → select_date() → LOADING → worker runs
#   list_sessions_by_date() → post(tag, future) → deliver() → LOADED/ERROR
#   → on_change(state) → HistoryWidget._render().
